"""
Implementation of :class:`.PermutationMaskGenerator`.
"""

import logging

import numpy as np
import numpy.typing as npt

from pytools.api import AllTracker

from .._types import RandomState

log = logging.getLogger(__name__)

__all__ = ["PermutationMaskGenerator"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class PermutationMaskGenerator:
    """
    Generates random boolean masks approximating which features precede a given
    feature in a random permutation of all features.

    Each cell of a mask is an independent fair coin draw: ``True`` indicates that the
    feature of the cell's column precedes the feature being explained, for the
    observation of the cell's row.
    Unlike sampling an actual permutation for each observation, this does not
    enforce a total order on the features, trading exactness for speed; the
    resulting coalitions still include each other feature with probability 1/2.
    """

    #: the random number generator used to draw masks
    rng: np.random.Generator

    def __init__(self, random_state: RandomState = None) -> None:
        """
        :param random_state: optional random seed, or a random number generator to
            draw masks from; a generator is used as is, not copied
        """
        self.rng = np.random.default_rng(random_state)

    def generate(self, n_rows: int, n_features: int) -> npt.NDArray[np.bool_]:
        """
        Draw a new random mask.

        :param n_rows: the number of observations
        :param n_features: the number of features
        :return: a boolean array of shape `(n_rows, n_features)`
        """
        if n_rows < 0 or n_features < 0:
            raise ValueError(
                f"args n_rows={n_rows} and n_features={n_features} "
                "must not be negative"
            )
        return self.rng.integers(0, 2, size=(n_rows, n_features)).astype(bool)

    @staticmethod
    def force_column(
        mask: npt.NDArray[np.bool_], column: int, value: bool
    ) -> npt.NDArray[np.bool_]:
        """
        Set all cells of one column of a mask to the same value.

        :param mask: the mask to derive the new mask from; remains unchanged
        :param column: the position of the column to set
        :param value: the value to set the column's cells to
        :return: a copy of the mask, with the given column set to the given value
        """
        forced = mask.copy()
        forced[:, column] = value
        return forced


__tracker.validate()
