"""
Implementation of :class:`.ShapleyEstimate`.
"""

import logging

import pandas as pd
from scipy import stats

from pytools.api import AllTracker

log = logging.getLogger(__name__)

__all__ = ["ShapleyEstimate"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class ShapleyEstimate:
    """
    Monte Carlo estimates of Shapley values, with one row per observation and one
    column per feature, along with the standard errors of the estimates.

    Supports :func:`.len`, returning the number of observations.
    """

    #: The estimated Shapley values as a data frame, with one row for each
    #: explained observation and one column for each explained feature.
    values: pd.DataFrame

    #: The standard errors of the estimated Shapley values, with the same shape as
    #: :attr:`.values`; undefined (``NaN``) if only one Monte Carlo repetition was run.
    sem: pd.DataFrame

    #: The number of Monte Carlo repetitions run for each feature.
    nsim: int

    #: The name of the column index of :attr:`.values` and :attr:`.sem`.
    IDX_FEATURE = "feature"

    #: The name of the series returned by :meth:`.feature_importance`.
    COL_IMPORTANCE = "importance"

    def __init__(self, *, values: pd.DataFrame, sem: pd.DataFrame, nsim: int) -> None:
        """
        :param values: the estimated Shapley values
        :param sem: the standard errors of the estimated Shapley values
        :param nsim: the number of Monte Carlo repetitions run for each feature
        """
        if not (
            values.shape == sem.shape
            and values.index.equals(sem.index)
            and values.columns.equals(sem.columns)
        ):
            raise ValueError("args values and sem must have the same rows and columns")

        if nsim < 1:
            raise ValueError(f"arg nsim={nsim} must be a positive integer")

        self.values = values.rename_axis(columns=ShapleyEstimate.IDX_FEATURE)
        self.sem = sem.rename_axis(columns=ShapleyEstimate.IDX_FEATURE)
        self.nsim = nsim

    def lower_bound(self, confidence_level: float = 0.95) -> pd.DataFrame:
        """
        Get the lower bounds of the confidence intervals of the estimates, assuming
        normally distributed estimation errors.

        :param confidence_level: the width of the confidence interval, ranging
            between 0.0 and 1.0 (exclusive)
        :return: the lower bounds, with the same shape as :attr:`.values`
        """
        return self.values + self._ci_width(confidence_level)

    def upper_bound(self, confidence_level: float = 0.95) -> pd.DataFrame:
        """
        Get the upper bounds of the confidence intervals of the estimates, assuming
        normally distributed estimation errors.

        :param confidence_level: the width of the confidence interval, ranging
            between 0.0 and 1.0 (exclusive)
        :return: the upper bounds, with the same shape as :attr:`.values`
        """
        return self.values - self._ci_width(confidence_level)

    def feature_importance(self) -> pd.Series:
        """
        Get the importance of each feature as the mean absolute Shapley value across
        all observations.

        :return: the feature importances, in descending order
        """
        return (
            self.values.abs()
            .mean()
            .rename(ShapleyEstimate.COL_IMPORTANCE)
            .sort_values(ascending=False, kind="stable")
        )

    def _ci_width(self, confidence_level: float) -> pd.DataFrame:
        if not (0.0 < confidence_level < 1.0):
            raise ValueError(
                f"arg confidence_level={confidence_level} is not "
                "in the range between 0.0 and 1.0 (exclusive)"
            )

        # this is a negative number
        return stats.norm.ppf((1.0 - confidence_level) / 2.0) * self.sem

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        n_observations, n_features = self.values.shape
        return (
            f"{type(self).__name__}(n_observations={n_observations}, "
            f"n_features={n_features}, nsim={self.nsim})"
        )


__tracker.validate()
