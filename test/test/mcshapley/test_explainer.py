import logging

import numpy as np
import pandas as pd
import pytest
from pandas.testing import assert_frame_equal

from mcshapley.estimation import MonteCarloShapleyExplainer, ShapleyEstimate, explain
from mcshapley.parallel import ParallelFeatureMap, SequentialFeatureMap

from . import check_shapley_values

log = logging.getLogger(__name__)


def test_explainer(small_features: pd.DataFrame, pred_interaction) -> None:
    explainer = MonteCarloShapleyExplainer(
        None, pred_interaction, small_features, nsim=5, random_state=42
    )

    assert explainer.feature_names == ["x1", "x2", "x3"]

    estimate = explainer.explain()

    assert isinstance(estimate, ShapleyEstimate)
    assert estimate.nsim == 5
    assert len(estimate) == len(small_features)
    assert estimate.values.columns.name == ShapleyEstimate.IDX_FEATURE

    # estimates match the functional API for the same random state
    assert_frame_equal(
        estimate.values,
        explain(None, None, small_features, 5, pred_interaction, random_state=42),
        check_names=False,
    )

    newdata = small_features.iloc[:5]
    estimate = explainer.explain(feature_names=["x2"], newdata=newdata)
    check_shapley_values(estimate.values, newdata.index, ["x2"])


def test_explainer_sem(small_features: pd.DataFrame, pred_interaction) -> None:
    estimate = MonteCarloShapleyExplainer(
        None, pred_interaction, small_features, random_state=42
    ).explain()

    # standard errors are undefined for a single repetition
    assert estimate.nsim == 1
    assert estimate.sem.isna().all().all()
    assert estimate.lower_bound().isna().all().all()

    estimate = MonteCarloShapleyExplainer(
        None, pred_interaction, small_features, nsim=20, random_state=42
    ).explain()

    assert (estimate.sem >= 0.0).all().all()
    assert (estimate.sem > 0.0).any().any()


def test_explainer_expected_output(small_features: pd.DataFrame, pred_x1) -> None:
    explainer = MonteCarloShapleyExplainer(None, pred_x1, small_features)

    assert explainer.expected_output() == pytest.approx(
        small_features.loc[:, "x1"].mean()
    )


def test_explainer_parallel(
    small_features: pd.DataFrame, pred_interaction, n_jobs: int
) -> None:
    sequential = MonteCarloShapleyExplainer(
        None, pred_interaction, small_features, nsim=3, random_state=42
    )
    parallel = MonteCarloShapleyExplainer(
        None,
        pred_interaction,
        small_features,
        nsim=3,
        random_state=42,
        n_jobs=n_jobs,
        shared_memory=True,
    )

    assert isinstance(sequential._feature_map(), SequentialFeatureMap)
    assert isinstance(parallel._feature_map(), ParallelFeatureMap)

    assert_frame_equal(parallel.explain().values, sequential.explain().values)
    assert_frame_equal(parallel.explain().sem, sequential.explain().sem)


def test_explainer_array(pred_first_column) -> None:
    X = np.random.default_rng(0).uniform(size=(20, 2))

    explainer = MonteCarloShapleyExplainer(None, pred_first_column, X, nsim=2)

    assert explainer.feature_names == [0, 1]
    assert explainer.explain().values.shape == (20, 2)


def test_explainer_invalid_args(small_features: pd.DataFrame, pred_x1) -> None:
    with pytest.raises(TypeError, match="pred_fn"):
        MonteCarloShapleyExplainer(None, "predict", small_features)

    with pytest.raises(TypeError):
        MonteCarloShapleyExplainer(None, pred_x1, small_features.to_dict())

    with pytest.raises(ValueError, match="nsim"):
        MonteCarloShapleyExplainer(None, pred_x1, small_features, nsim=0)

    with pytest.raises(TypeError):
        MonteCarloShapleyExplainer(None, pred_x1, small_features, nsim="10")

    with pytest.raises(TypeError, match="random_state"):
        MonteCarloShapleyExplainer(None, pred_x1, small_features, random_state=0.5)


def test_explainer_numpy_integer_args(small_features: pd.DataFrame, pred_x1) -> None:
    explainer = MonteCarloShapleyExplainer(
        None, pred_x1, small_features, nsim=np.int64(4), random_state=np.int64(1)
    )

    assert explainer.nsim == 4
    assert type(explainer.nsim) is int
    assert explainer.explain().nsim == 4


@pytest.mark.parametrize(  # type: ignore
    "random_state, error",
    [(True, TypeError), (-1, ValueError), ("42", TypeError)],
)
def test_explainer_invalid_random_state(
    small_features: pd.DataFrame, pred_x1, random_state, error: type
) -> None:
    # invalid random states are rejected on construction, not on first use
    with pytest.raises(error, match="random_state"):
        MonteCarloShapleyExplainer(
            None, pred_x1, small_features, random_state=random_state
        )


def test_explainer_boolean_nsim(small_features: pd.DataFrame, pred_x1) -> None:
    with pytest.raises(TypeError, match="nsim"):
        MonteCarloShapleyExplainer(None, pred_x1, small_features, nsim=True)
