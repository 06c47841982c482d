import logging

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose
from sklearn.cluster import KMeans
from sklearn.linear_model import LinearRegression, LogisticRegression
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler

from mcshapley.estimation import explain
from mcshapley.prediction import LearnerPredictionFunction

log = logging.getLogger(__name__)


@pytest.fixture  # type: ignore
def binary_target(small_features: pd.DataFrame) -> pd.Series:
    return (small_features.loc[:, "x1"] > 0.5).map({True: "yes", False: "no"})


def test_regressor(small_features: pd.DataFrame) -> None:
    y = 2.0 * small_features.loc[:, "x1"] - small_features.loc[:, "x3"]
    regressor = LinearRegression().fit(small_features, y)

    predictions = LearnerPredictionFunction()(regressor, small_features)

    assert predictions.shape == (len(small_features),)
    assert_allclose(predictions, y, atol=1e-8)

    pipeline = make_pipeline(StandardScaler(), LinearRegression()).fit(
        small_features, y
    )
    assert_allclose(
        LearnerPredictionFunction()(pipeline, small_features), y, atol=1e-8
    )


def test_classifier(small_features: pd.DataFrame, binary_target: pd.Series) -> None:
    classifier = LogisticRegression().fit(small_features, binary_target)
    probabilities = classifier.predict_proba(small_features)

    # classes are sorted, so the last class is "yes"
    assert_allclose(
        LearnerPredictionFunction()(classifier, small_features), probabilities[:, 1]
    )
    assert_allclose(
        LearnerPredictionFunction(reference_class="no")(classifier, small_features),
        probabilities[:, 0],
    )

    with pytest.raises(ValueError, match="reference class 'maybe'"):
        LearnerPredictionFunction(reference_class="maybe")(classifier, small_features)


def test_callable_model(small_features: pd.DataFrame) -> None:
    def _model(data: pd.DataFrame) -> pd.Series:
        return data.loc[:, "x2"] * 10.0

    assert_allclose(
        LearnerPredictionFunction()(_model, small_features),
        small_features.loc[:, "x2"] * 10.0,
    )


def test_unsupported_model(small_features: pd.DataFrame) -> None:
    with pytest.raises(TypeError, match="neither a regressor nor a classifier"):
        LearnerPredictionFunction()(
            KMeans(n_clusters=2, n_init=1).fit(small_features), small_features
        )

    with pytest.raises(TypeError, match="scikit-learn learner or a callable"):
        LearnerPredictionFunction()("model", small_features)


def test_explain_classifier(
    small_features: pd.DataFrame, binary_target: pd.Series
) -> None:
    classifier = LogisticRegression().fit(small_features, binary_target)

    shap_values = explain(
        classifier,
        None,
        small_features,
        10,
        LearnerPredictionFunction(reference_class="yes"),
        random_state=42,
    )

    # the target only depends on x1
    importance = shap_values.abs().mean()
    assert importance.idxmax() == "x1"


def test_repr() -> None:
    assert (
        repr(LearnerPredictionFunction(reference_class="yes"))
        == "LearnerPredictionFunction(reference_class='yes')"
    )
