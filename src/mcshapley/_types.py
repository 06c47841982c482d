"""
Type aliases for common use in the ``mcshapley`` package
"""

from typing import Any, Callable, Hashable, Sequence, Union

import numpy as np
import numpy.typing as npt
import pandas as pd
from typing_extensions import TypeAlias

# a table of feature values: a homogeneous numeric matrix or a record table
FeatureTable: TypeAlias = Union[npt.NDArray[Any], pd.DataFrame]

# the label of a column in a feature table
FeatureName: TypeAlias = Hashable

# a function returning one prediction for each row of a feature table
PredictionFunction: TypeAlias = Callable[
    [Any, FeatureTable],
    Union[pd.Series, pd.DataFrame, npt.NDArray[np.float64], Sequence[float]],
]

# a random seed, or a generator to draw random numbers from
RandomState: TypeAlias = Union[int, np.random.Generator, None]
