import re

import mcshapley


def test_version() -> None:
    assert re.fullmatch(r"\d+\.\d+\.\d+", mcshapley.__version__)


def test_errors() -> None:
    # errors can be caught as the built-in exceptions they specialise
    assert issubclass(mcshapley.SchemaMismatchError, TypeError)
    assert issubclass(mcshapley.UnknownFeatureError, KeyError)
    assert issubclass(mcshapley.SampleSizeError, ValueError)
    assert issubclass(mcshapley.PredictionFunctionError, ValueError)
