"""
Helper functions for feature tables, which are either numpy arrays or data frames.
"""

import hashlib
import logging
from typing import Any, List, Optional, Tuple

import numpy as np
import numpy.typing as npt
import pandas as pd

from pytools.api import AllTracker

from .._errors import SampleSizeError, SchemaMismatchError, UnknownFeatureError
from .._types import FeatureName, FeatureTable

log = logging.getLogger(__name__)

__all__ = [
    "canonical_column_order",
    "column_key",
    "column_labels",
    "resolve_feature",
    "sample_background",
    "take_rows",
    "validate_dtypes",
    "validate_feature_table",
    "validate_sample_size",
    "validate_schema",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Functions
#


def validate_feature_table(table: Any, *, name: str = "X") -> None:
    """
    Ensure the given object can be used as a feature table.

    :param table: the object to validate
    :param name: the argument name to use in error messages
    :raise TypeError: if the table is neither a numpy array nor a data frame
    :raise ValueError: if the table is not two-dimensional, or has no columns
    """
    if isinstance(table, pd.DataFrame):
        n_columns = len(table.columns)
    elif isinstance(table, np.ndarray):
        if table.ndim != 2:
            raise ValueError(
                f"arg {name} must be a 2-dimensional array, "
                f"but has {table.ndim} dimensions"
            )
        n_columns = table.shape[1]
    else:
        raise TypeError(
            f"arg {name} must be a numpy array or a data frame, "
            f"but is a {type(table).__qualname__}"
        )

    if n_columns == 0:
        raise ValueError(f"arg {name} must have at least one column")


def validate_schema(X: FeatureTable, newdata: Optional[FeatureTable]) -> None:
    """
    Ensure the observations to be explained are compatible with the reference table.

    Both tables must be of the same type; data frames must have identical columns
    in identical order, with dtypes that can be combined (see
    :func:`.validate_dtypes`), arrays must have the same number of columns.
    Differing numeric dtypes are logged as a warning.

    :param X: the reference table
    :param newdata: the observations to be explained; nothing is checked if
        ``None``
    :raise SchemaMismatchError: if the tables are not compatible
    """
    if newdata is None:
        return

    if type(X) is not type(newdata):
        raise SchemaMismatchError(
            "args X and newdata must be of the same type, but X is a "
            f"{type(X).__qualname__} and newdata is a {type(newdata).__qualname__}"
        )

    validate_feature_table(newdata, name="newdata")

    if isinstance(X, pd.DataFrame):
        if not X.columns.equals(newdata.columns):
            raise SchemaMismatchError(
                "args X and newdata must have the same columns, but X has columns "
                f"{X.columns.to_list()} and newdata has columns "
                f"{newdata.columns.to_list()}"
            )
        drifting = validate_dtypes(X, newdata, names=("X", "newdata"))
        if drifting:
            log.warning(
                "numeric dtypes of args X and newdata differ for columns "
                f"{drifting}: {X.dtypes.loc[drifting].to_dict()} vs. "
                f"{newdata.dtypes.loc[drifting].to_dict()}"
            )
    elif X.shape[1] != newdata.shape[1]:
        raise SchemaMismatchError(
            f"args X and newdata must have the same number of columns, but X has "
            f"{X.shape[1]} columns and newdata has {newdata.shape[1]} columns"
        )


def validate_dtypes(
    left: pd.DataFrame,
    right: pd.DataFrame,
    *,
    names: Tuple[str, str] = ("target", "background"),
) -> List[FeatureName]:
    """
    Ensure the values of two data frames with identical columns can be combined
    cell by cell.

    Columns with different numeric dtypes (e.g., ``int64`` and ``float64``) can be
    combined, with the values upcast to a common dtype. Any other dtype
    difference, including categoricals with different categories, is an error.

    :param left: the first data frame
    :param right: the second data frame, with the same columns as the first
    :param names: the names of the two data frames to use in error messages
    :return: the labels of the columns with different numeric dtypes
    :raise SchemaMismatchError: if the dtypes of a column cannot be combined
    """
    drifting: List[FeatureName] = []

    for column, left_dtype, right_dtype in zip(
        left.columns, left.dtypes, right.dtypes
    ):
        if left_dtype == right_dtype:
            continue
        elif _is_plain_numeric(left_dtype) and _is_plain_numeric(right_dtype):
            drifting.append(column)
        else:
            left_name, right_name = names
            raise SchemaMismatchError(
                f"column {column!r} has dtype {left_dtype} in {left_name} but "
                f"dtype {right_dtype} in {right_name}; values of these dtypes "
                "cannot be combined"
            )

    return drifting


def column_labels(table: FeatureTable) -> List[FeatureName]:
    """
    Get the column labels of a feature table.

    The columns of a numpy array are labelled by their positions.

    :param table: the feature table
    :return: the column labels, in column order
    """
    if isinstance(table, pd.DataFrame):
        return table.columns.to_list()
    else:
        return list(range(table.shape[1]))


def resolve_feature(table: FeatureTable, feature: FeatureName) -> int:
    """
    Get the position of a feature in a feature table.

    :param table: the feature table
    :param feature: the column label of the feature
    :return: the position of the feature's column
    :raise UnknownFeatureError: if the table has no column with the given label
    """
    columns = column_labels(table)
    try:
        return columns.index(feature)
    except ValueError:
        raise UnknownFeatureError(
            f"feature {feature!r} is not a column of the feature table; "
            f"expected one of {columns}"
        ) from None


def validate_sample_size(X: FeatureTable, newdata: Optional[FeatureTable]) -> int:
    """
    Get the number of observations to be explained, ensuring the reference table
    is large enough to draw a background sample of that size without replacement.

    :param X: the reference table
    :param newdata: the observations to be explained; if ``None``, all
        observations in the reference table are explained
    :return: the number of observations to be explained
    :raise SampleSizeError: if there are more observations to explain than
        observations in the reference table
    """
    n_reference = len(X)
    if newdata is None:
        return n_reference

    n_explained = len(newdata)
    if n_explained > n_reference:
        raise SampleSizeError(
            f"cannot explain {n_explained} observations in arg newdata using "
            f"a background sample from the {n_reference} observations in arg X"
        )
    return n_explained


def take_rows(table: FeatureTable, rows: npt.NDArray[np.int_]) -> FeatureTable:
    """
    Select rows from a feature table by position.

    :param table: the feature table
    :param rows: the row positions to select
    :return: the selected rows, in the given order
    """
    if isinstance(table, pd.DataFrame):
        return table.iloc[rows]
    else:
        return table[rows]


def sample_background(
    X: FeatureTable, n_explained: Optional[int], rng: np.random.Generator
) -> FeatureTable:
    """
    Draw a background sample from the reference table.

    :param X: the reference table
    :param n_explained: the number of observations to be explained; if ``None``,
        all observations of the reference table are explained and the background
        sample is a random permutation of its rows
    :param rng: the random number generator to draw rows with
    :return: the background sample, with one row per observation to be explained
    :raise SampleSizeError: if more rows are requested than the reference table has
    """
    n_reference = len(X)
    if n_explained is None:
        return take_rows(X, rng.permutation(n_reference))
    elif n_explained > n_reference:
        raise SampleSizeError(
            f"cannot draw {n_explained} background observations without "
            f"replacement from {n_reference} reference observations"
        )
    else:
        return take_rows(X, rng.choice(n_reference, size=n_explained, replace=False))


def column_key(column: FeatureName) -> bytes:
    """
    Get a digest identifying a column label, distinguishing labels of different
    types with the same string representation (e.g., ``1`` and ``"1"``).

    :param column: the column label
    :return: the SHA-256 digest of the label's type and representation
    """
    return hashlib.sha256(
        f"{type(column).__qualname__}:{column!r}".encode("utf-8")
    ).digest()


def canonical_column_order(columns: List[FeatureName]) -> npt.NDArray[np.int_]:
    """
    Get a column order that does not depend on the order of the given columns.

    Columns are sorted by the digests of their labels (see :func:`.column_key`);
    columns with equal labels keep their relative order.

    :param columns: the column labels
    :return: the column positions, in canonical order
    """
    keys = [column_key(column) for column in columns]
    return np.array(sorted(range(len(keys)), key=keys.__getitem__), dtype=np.int_)


def _is_plain_numeric(dtype: Any) -> bool:
    # integer or floating point, excluding booleans and categoricals
    return getattr(dtype, "kind", None) in ("i", "u", "f") and not isinstance(
        dtype, pd.CategoricalDtype
    )


__tracker.validate()
