from typing import Sequence

import numpy as np
import pandas as pd
from pandas.testing import assert_index_equal

from mcshapley._types import FeatureName


def check_shapley_values(
    shap_values: pd.DataFrame, index: pd.Index, features: Sequence[FeatureName]
) -> None:
    """
    Test helper to check the axes and dtypes of estimated Shapley values

    :param shap_values: the estimated Shapley values
    :param index: the expected row index
    :param features: the expected features, in column order
    :return: None
    """
    assert isinstance(shap_values, pd.DataFrame)
    assert_index_equal(shap_values.index, index)
    assert shap_values.columns.to_list() == list(features), (
        f"unexpected columns: got {shap_values.columns.to_list()} "
        f"but expected {list(features)}"
    )
    assert (shap_values.dtypes == np.float64).all()
