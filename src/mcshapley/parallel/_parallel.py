"""
Strategies for mapping a unit of work over a sequence of features, either in the
calling thread or in parallel using a :class:`~pytools.parallelization.JobRunner`.
"""

import logging
from abc import ABCMeta, abstractmethod
from typing import Callable, Dict, Iterable, List, Optional, TypeVar, Union

from pytools.api import AllTracker, inheritdoc
from pytools.parallelization import Job, JobRunner, ParallelizableMixin

from .._types import FeatureName

log = logging.getLogger(__name__)

__all__ = [
    "FeatureMap",
    "ParallelFeatureMap",
    "SequentialFeatureMap",
]


#
# Type variables
#

T_Result = TypeVar("T_Result")


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class FeatureMap(metaclass=ABCMeta):
    """
    Applies a function to each of a sequence of features.

    Implementations may run the function calls in any order and on any worker, but
    must return one result per feature; if any function call fails, the exception is
    propagated to the caller.
    """

    @abstractmethod
    def map(
        self,
        function: Callable[[FeatureName], T_Result],
        features: Iterable[FeatureName],
    ) -> Dict[FeatureName, T_Result]:
        """
        Apply a function to each feature.

        :param function: the function to apply, taking a feature as its only
            argument
        :param features: the features to apply the function to
        :return: a dictionary mapping each feature to the result of the function
        """
        pass


@inheritdoc(match="""[see superclass]""")
class SequentialFeatureMap(FeatureMap):
    """
    Applies a function to each feature in turn, in the calling thread.
    """

    def map(
        self,
        function: Callable[[FeatureName], T_Result],
        features: Iterable[FeatureName],
    ) -> Dict[FeatureName, T_Result]:
        """[see superclass]"""
        return {feature: function(feature) for feature in features}


@inheritdoc(match="""[see superclass]""")
class ParallelFeatureMap(FeatureMap, ParallelizableMixin):
    """
    Applies a function to each feature as a separate job, run by a
    :class:`~pytools.parallelization.JobRunner`.

    The function and its arguments must be picklable unless shared memory is used.
    """

    # defined in superclass, repeated here for Sphinx
    n_jobs: Optional[int]

    # defined in superclass, repeated here for Sphinx
    shared_memory: Optional[bool]

    # defined in superclass, repeated here for Sphinx
    pre_dispatch: Optional[Union[str, int]]

    # defined in superclass, repeated here for Sphinx
    verbose: Optional[int]

    def map(
        self,
        function: Callable[[FeatureName], T_Result],
        features: Iterable[FeatureName],
    ) -> Dict[FeatureName, T_Result]:
        """[see superclass]"""
        features = list(features)

        log.debug(f"running {len(features)} feature jobs with n_jobs={self.n_jobs}")

        results: List[T_Result] = JobRunner.from_parallelizable(self).run_jobs(
            Job.delayed(function)(feature) for feature in features
        )
        return dict(zip(features, results))


__tracker.validate()
