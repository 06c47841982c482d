"""
Monte Carlo estimation of the marginal contribution of a single feature.
"""

import logging
from typing import Any, Optional

import numpy as np
import numpy.typing as npt

from pytools.api import AllTracker

from .._errors import PredictionFunctionError
from .._types import FeatureName, FeatureTable, PredictionFunction, RandomState
from ..data import (
    HybridRowBuilder,
    PermutationMaskGenerator,
    canonical_column_order,
    column_labels,
    resolve_feature,
    sample_background,
    validate_feature_table,
    validate_sample_size,
    validate_schema,
)

log = logging.getLogger(__name__)

__all__ = ["explain_feature"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Functions
#


def explain_feature(
    model: Any,
    X: FeatureTable,
    feature: FeatureName,
    pred_fn: PredictionFunction,
    *,
    newdata: Optional[FeatureTable] = None,
    random_state: RandomState = None,
) -> npt.NDArray[np.float64]:
    """
    Draw one Monte Carlo sample of the contribution of a feature to the predictions
    for a set of observations.

    For each observation being explained, a random background observation is drawn
    from the reference table, along with a random coalition of features.
    Two hybrid observations take the values of all coalition features from the
    observation being explained and all other values from the background
    observation; the first hybrid also takes the explained feature's value from the
    observation being explained, the second takes it from the background
    observation.
    The difference between the predictions for the two hybrids is one sample of the
    feature's marginal contribution; its expectation is the feature's Shapley value.

    All observations are processed at once, so the prediction function is called
    exactly twice.

    :param model: the model to explain, passed on to the prediction function
    :param X: the reference table to draw background observations from
    :param feature: the label of the feature to explain; the columns of a numpy
        array are labelled by their positions
    :param pred_fn: function taking the model and a feature table, and returning
        one numeric prediction per row of the table
    :param newdata: the observations to explain; if ``None``, all observations in
        ``X`` are explained
    :param random_state: optional random seed, or a random number generator
    :return: the sampled contributions, one for each observation being explained
    :raise SchemaMismatchError: if ``newdata`` does not match the schema of ``X``
    :raise UnknownFeatureError: if the feature is not a column of ``X``
    :raise SampleSizeError: if ``newdata`` has more rows than ``X``
    :raise PredictionFunctionError: if the prediction function returns anything
        other than one numeric prediction per row
    """
    validate_feature_table(X)
    validate_schema(X, newdata)
    column = resolve_feature(X, feature)
    validate_sample_size(X, newdata)

    return _explain_column(
        model=model,
        X=X,
        column=column,
        pred_fn=pred_fn,
        newdata=newdata,
        rng=np.random.default_rng(random_state),
    )


def _explain_column(
    model: Any,
    X: FeatureTable,
    column: int,
    pred_fn: PredictionFunction,
    newdata: Optional[FeatureTable],
    rng: np.random.Generator,
) -> npt.NDArray[np.float64]:
    # assumes all arguments have been validated

    if newdata is None:
        target = X
        background = sample_background(X, None, rng)
    else:
        target = newdata
        background = sample_background(X, len(newdata), rng)

    n_rows, n_columns = target.shape

    # draw the coin for each column in an order independent of the column order,
    # so that estimates do not change when columns are reordered
    mask = np.empty((n_rows, n_columns), dtype=bool)
    mask[:, canonical_column_order(column_labels(target))] = PermutationMaskGenerator(
        rng
    ).generate(n_rows, n_columns)

    hybrid_with, hybrid_without = HybridRowBuilder.for_table(target).build(
        target=target, background=background, mask=mask, column=column
    )

    return _predict(pred_fn, model, hybrid_with) - _predict(
        pred_fn, model, hybrid_without
    )


def _predict(
    pred_fn: PredictionFunction, model: Any, data: FeatureTable
) -> npt.NDArray[np.float64]:
    predictions = pred_fn(model, data)

    try:
        values = np.asarray(predictions, dtype=np.float64)
    except (TypeError, ValueError) as cause:
        raise PredictionFunctionError(
            "prediction function must return numeric values, but returned a "
            f"{type(predictions).__name__}: {cause}"
        ) from cause

    # accept single-column frames and column vectors
    if values.ndim == 2 and values.shape[1] == 1:
        values = values[:, 0]

    n_rows = len(data)
    if values.shape != (n_rows,):
        raise PredictionFunctionError(
            f"prediction function must return a vector of {n_rows} predictions, "
            f"but returned an array of shape {values.shape}"
        )

    return values


__tracker.validate()
