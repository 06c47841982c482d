"""
Construction of hybrid observations, combining feature values of the observations
being explained with feature values of background observations.
"""

import logging
from abc import ABCMeta, abstractmethod
from typing import Any, Generic, Tuple, TypeVar

import numpy as np
import numpy.typing as npt
import pandas as pd

from pytools.api import AllTracker

from .._errors import SchemaMismatchError
from .._types import FeatureTable
from ._mask import PermutationMaskGenerator
from ._table import validate_dtypes

log = logging.getLogger(__name__)

__all__ = [
    "FrameHybridRowBuilder",
    "HybridRowBuilder",
    "MatrixHybridRowBuilder",
]


#
# Type variables
#

T_Table = TypeVar("T_Table", npt.NDArray[Any], pd.DataFrame)


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class HybridRowBuilder(Generic[T_Table], metaclass=ABCMeta):
    """
    Builds the pair of hybrid tables used to estimate the marginal contribution of
    one feature.

    Each cell of a hybrid table takes the value of the corresponding cell in the
    target table if the corresponding cell of a permutation mask is ``True``, and the
    value of the corresponding cell in the background table otherwise.
    The first hybrid table always uses the target value of the feature being
    explained, the second hybrid table always uses its background value; both
    tables are identical in all other columns.

    Use :meth:`.for_table` to get the builder suited to a given feature table.
    """

    #: the type of feature table supported by this builder
    table_type: type

    def build(
        self,
        target: T_Table,
        background: T_Table,
        mask: npt.NDArray[np.bool_],
        column: int,
    ) -> Tuple[T_Table, T_Table]:
        """
        Build the hybrid tables with and without the target values of one feature.

        :param target: the observations being explained
        :param background: the background observations, one for each target
            observation
        :param mask: boolean array with one row per observation and one column per
            feature, ``True`` where the target value is to be used
        :param column: the position of the feature being explained
        :return: a tuple of the hybrid tables with and without the target values
            of the feature being explained
        :raise SchemaMismatchError: if target and background are not compatible
        """
        self._validate(target=target, background=background)

        n_rows, n_columns = target.shape
        if mask.shape != (n_rows, n_columns):
            raise ValueError(
                f"arg mask has shape {mask.shape} but the target table has shape "
                f"{(n_rows, n_columns)}"
            )
        if not 0 <= column < n_columns:
            raise ValueError(
                f"arg column={column} must be in the range [0, {n_columns})"
            )

        mask_with = PermutationMaskGenerator.force_column(mask, column, True)
        mask_without = PermutationMaskGenerator.force_column(mask, column, False)

        return (
            self._select(target, background, mask_with),
            self._select(target, background, mask_without),
        )

    @staticmethod
    def for_table(table: FeatureTable) -> "HybridRowBuilder[Any]":
        """
        Get a hybrid row builder for the given type of feature table.

        :param table: the feature table to build hybrid tables for
        :return: a :class:`.MatrixHybridRowBuilder` for numpy arrays, or a
            :class:`.FrameHybridRowBuilder` for data frames
        """
        if isinstance(table, pd.DataFrame):
            return FrameHybridRowBuilder()
        elif isinstance(table, np.ndarray):
            return MatrixHybridRowBuilder()
        else:
            raise TypeError(
                "arg table must be a numpy array or a data frame, "
                f"but is a {type(table).__qualname__}"
            )

    def _validate(self, target: T_Table, background: T_Table) -> None:
        for table, name in [(target, "target"), (background, "background")]:
            if not isinstance(table, self.table_type):
                raise SchemaMismatchError(
                    f"{type(self).__name__} requires {name} table of type "
                    f"{self.table_type.__name__}, but got a {type(table).__name__}"
                )

        if len(target) != len(background):
            raise SchemaMismatchError(
                f"target table has {len(target)} rows but background table has "
                f"{len(background)} rows"
            )

    @abstractmethod
    def _select(
        self, target: T_Table, background: T_Table, mask: npt.NDArray[np.bool_]
    ) -> T_Table:
        pass


class MatrixHybridRowBuilder(HybridRowBuilder[npt.NDArray[Any]]):
    """
    Builds hybrid tables from homogeneous numpy arrays, selecting all cells in a
    single vectorized operation.
    """

    table_type = np.ndarray

    def _validate(
        self, target: npt.NDArray[Any], background: npt.NDArray[Any]
    ) -> None:
        super()._validate(target=target, background=background)
        if target.ndim != 2 or target.shape[1:] != background.shape[1:]:
            raise SchemaMismatchError(
                f"target table with shape {target.shape} does not match "
                f"background table with shape {background.shape}"
            )

    def _select(
        self,
        target: npt.NDArray[Any],
        background: npt.NDArray[Any],
        mask: npt.NDArray[np.bool_],
    ) -> npt.NDArray[Any]:
        return np.where(mask, target, background)


class FrameHybridRowBuilder(HybridRowBuilder[pd.DataFrame]):
    """
    Builds hybrid tables from heterogeneous data frames, selecting cells column by
    column.

    Column dtypes (including categoricals) and the row index of the target table
    are preserved; columns with different numeric dtypes in target and background
    are upcast to a common dtype, any other dtype difference raises a
    :class:`.SchemaMismatchError`.
    """

    table_type = pd.DataFrame

    def _validate(self, target: pd.DataFrame, background: pd.DataFrame) -> None:
        super()._validate(target=target, background=background)
        if not target.columns.equals(background.columns):
            raise SchemaMismatchError(
                f"target table with columns {target.columns.to_list()} does not "
                f"match background table with columns {background.columns.to_list()}"
            )
        validate_dtypes(target, background)

    def _select(
        self,
        target: pd.DataFrame,
        background: pd.DataFrame,
        mask: npt.NDArray[np.bool_],
    ) -> pd.DataFrame:
        # align rows by position, not by index
        target_aligned = target.reset_index(drop=True)
        background_aligned = background.reset_index(drop=True)

        hybrid = pd.concat(
            [
                target_aligned.iloc[:, i].where(
                    mask[:, i], background_aligned.iloc[:, i]
                )
                for i in range(len(target.columns))
            ],
            axis=1,
        )
        hybrid.columns = target.columns
        hybrid.index = target.index
        return hybrid


__tracker.validate()
