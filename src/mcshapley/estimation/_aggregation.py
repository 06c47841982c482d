"""
Monte Carlo estimation of Shapley values for multiple features, averaging repeated
samples of each feature's marginal contribution.
"""

import functools
import logging
import numbers
from typing import Any, Iterable, List, Optional, Tuple, Union

import numpy as np
import numpy.typing as npt
import pandas as pd

from pytools.api import AllTracker, validate_type

from .._types import FeatureName, FeatureTable, PredictionFunction, RandomState
from ..data import (
    column_key,
    column_labels,
    resolve_feature,
    validate_feature_table,
    validate_sample_size,
    validate_schema,
)
from ..parallel import FeatureMap, SequentialFeatureMap
from ._contribution import _explain_column

log = logging.getLogger(__name__)

__all__ = ["explain"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Functions
#


def explain(
    model: Any,
    feature_names: Union[FeatureName, Iterable[FeatureName], None],
    X: FeatureTable,
    nsim: int,
    pred_fn: PredictionFunction,
    *,
    newdata: Optional[FeatureTable] = None,
    random_state: RandomState = None,
    feature_map: Optional[FeatureMap] = None,
) -> pd.DataFrame:
    """
    Estimate the Shapley values of a set of features for a set of observations.

    For each feature, :func:`.explain_feature` is called `nsim` times and the
    resulting contributions are averaged for each observation.
    The prediction function is called exactly ``2 * nsim`` times per feature, each
    time with one row for each observation to be explained.

    Each feature gets its own random number generator, seeded from `random_state`
    and the feature's label: for a given seed, results are the same whether
    features are explained sequentially or in parallel, and regardless of the order
    of features and columns.

    :param model: the model to explain, passed on to the prediction function
    :param feature_names: the label of a feature, or an iterable of feature labels,
        to estimate Shapley values for; if ``None``, Shapley values are estimated for
        all columns in ``X``
    :param X: the reference table to draw background observations from
    :param nsim: the number of Monte Carlo repetitions per feature
    :param pred_fn: function taking the model and a feature table, and returning
        one numeric prediction per row of the table
    :param newdata: the observations to explain; if ``None``, all observations in
        ``X`` are explained
    :param random_state: optional random seed, or a random number generator
    :param feature_map: strategy for distributing the features across workers
        (default: a :class:`.SequentialFeatureMap`)
    :return: a data frame with the estimated Shapley values, with one row for each
        observation being explained (in the order and with the index of the
        observations) and one column for each feature (in the given order)
    :raise SchemaMismatchError: if ``newdata`` does not match the schema of ``X``
    :raise UnknownFeatureError: if a feature is not a column of ``X``
    :raise SampleSizeError: if ``newdata`` has more rows than ``X``
    :raise PredictionFunctionError: if the prediction function returns anything
        other than one numeric prediction per row
    """
    mean, _ = _aggregate(
        model=model,
        feature_names=feature_names,
        X=X,
        nsim=nsim,
        pred_fn=pred_fn,
        newdata=newdata,
        random_state=random_state,
        feature_map=feature_map,
    )
    return mean


def _aggregate(
    model: Any,
    feature_names: Union[FeatureName, Iterable[FeatureName], None],
    X: FeatureTable,
    nsim: int,
    pred_fn: PredictionFunction,
    newdata: Optional[FeatureTable],
    random_state: RandomState,
    feature_map: Optional[FeatureMap],
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    # estimate Shapley values, returning a tuple of data frames with the means and
    # the standard errors of the means

    validate_feature_table(X)
    validate_schema(X, newdata)
    nsim = _validate_nsim(nsim)
    _validate_random_state(random_state)
    validate_type(
        feature_map, expected_type=FeatureMap, optional=True, name="arg feature_map"
    )

    features = _to_feature_list(X, feature_names)
    columns = [resolve_feature(X, feature) for feature in features]
    n_explained = validate_sample_size(X, newdata)

    entropy = _root_entropy(random_state)

    if feature_map is None:
        feature_map = SequentialFeatureMap()

    log.debug(
        f"estimating Shapley values for {len(features)} features "
        f"and {n_explained} observations, with nsim={nsim}"
    )

    estimates = feature_map.map(
        functools.partial(
            _estimate_feature,
            model=model,
            X=X,
            nsim=nsim,
            pred_fn=pred_fn,
            newdata=newdata,
            column_by_feature=dict(zip(features, columns)),
            entropy=entropy,
        ),
        features,
    )

    explained = X if newdata is None else newdata
    index = (
        explained.index
        if isinstance(explained, pd.DataFrame)
        else pd.RangeIndex(n_explained)
    )

    def _to_frame(values: List[npt.NDArray[np.float64]]) -> pd.DataFrame:
        return pd.DataFrame(
            data=np.column_stack(values),
            index=index,
            columns=pd.Index(features),
        )

    return (
        _to_frame([estimates[feature][0] for feature in features]),
        _to_frame([estimates[feature][1] for feature in features]),
    )


def _to_feature_list(
    X: FeatureTable, feature_names: Union[FeatureName, Iterable[FeatureName], None]
) -> List[FeatureName]:
    features: List[FeatureName]
    if feature_names is None:
        features = column_labels(X)
    elif not pd.api.types.is_list_like(feature_names):
        features = [feature_names]
    else:
        features = list(feature_names)

    if not features:
        raise ValueError("arg feature_names must not be empty")
    if len(set(features)) < len(features):
        raise ValueError(f"arg feature_names must be unique, but got {features}")

    return features


def _validate_nsim(nsim: Any) -> int:
    # accept any integral number except booleans
    if isinstance(nsim, bool) or not isinstance(nsim, numbers.Integral):
        raise TypeError(
            f"arg nsim must be an integer, but is a {type(nsim).__name__}"
        )
    if nsim < 1:
        raise ValueError(f"arg nsim={nsim} must be a positive integer")
    return int(nsim)


def _validate_random_state(random_state: Any) -> None:
    if random_state is None or isinstance(random_state, np.random.Generator):
        return
    elif isinstance(random_state, bool) or not isinstance(
        random_state, numbers.Integral
    ):
        raise TypeError(
            "arg random_state must be an int, a numpy random Generator, or None; "
            f"got a {type(random_state).__name__}"
        )
    elif random_state < 0:
        raise ValueError(f"arg random_state={random_state} must not be negative")


def _root_entropy(random_state: RandomState) -> int:
    # get the entropy from which to seed the random number generators of all
    # features; assumes the random state has been validated
    if random_state is None:
        return int(np.random.SeedSequence().entropy)
    elif isinstance(random_state, np.random.Generator):
        return int(random_state.integers(np.iinfo(np.int64).max))
    else:
        return int(random_state)


def _feature_rng(entropy: int, feature: FeatureName) -> np.random.Generator:
    # derive a random number generator from the root entropy and the digest of the
    # feature label, so that distinct labels get independent streams
    spawn_key = tuple(
        int(word) for word in np.frombuffer(column_key(feature), dtype=np.uint32)
    )
    return np.random.default_rng(np.random.SeedSequence(entropy, spawn_key=spawn_key))


def _estimate_feature(
    feature: FeatureName,
    *,
    model: Any,
    X: FeatureTable,
    nsim: int,
    pred_fn: PredictionFunction,
    newdata: Optional[FeatureTable],
    column_by_feature: dict,
    entropy: int,
) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    # estimate the Shapley values of one feature, returning the mean and the
    # standard error of the mean across all Monte Carlo samples

    column = column_by_feature[feature]
    rng = _feature_rng(entropy, column_labels(X)[column])

    log.debug(f"estimating Shapley values for feature {feature!r}")

    # running mean and sum of squared deviations (Welford's algorithm)
    mean: Optional[npt.NDArray[np.float64]] = None
    sq_dev: Optional[npt.NDArray[np.float64]] = None
    for i in range(1, nsim + 1):
        sample = _explain_column(
            model=model, X=X, column=column, pred_fn=pred_fn, newdata=newdata, rng=rng
        )
        if mean is None:
            mean = sample
            sq_dev = np.zeros_like(sample)
        else:
            delta = sample - mean
            mean = mean + delta / i
            sq_dev = sq_dev + delta * (sample - mean)

    assert mean is not None and sq_dev is not None, "nsim must be positive"

    if nsim > 1:
        sem = np.sqrt(sq_dev / (nsim - 1) / nsim)
    else:
        sem = np.full_like(mean, np.nan)

    return mean, sem


__tracker.validate()
