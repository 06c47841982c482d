"""
Exceptions raised while estimating Shapley values.
"""

import logging

from pytools.api import AllTracker

log = logging.getLogger(__name__)

__all__ = [
    "PredictionFunctionError",
    "SampleSizeError",
    "SchemaMismatchError",
    "UnknownFeatureError",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class SchemaMismatchError(TypeError):
    """
    Raised when two feature tables that need to be combined differ in their table
    type or their columns.
    """


class UnknownFeatureError(KeyError):
    """
    Raised when a feature to be explained is not a column of the feature table.
    """


class SampleSizeError(ValueError):
    """
    Raised when more observations are to be explained than there are observations
    in the reference table to draw a background sample from.
    """


class PredictionFunctionError(ValueError):
    """
    Raised when a prediction function returns anything other than a numeric vector
    with one value per row of the table it was called with.
    """


__tracker.validate()
