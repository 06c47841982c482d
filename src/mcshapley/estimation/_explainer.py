"""
Implementation of :class:`.MonteCarloShapleyExplainer`.
"""

import logging
from typing import Any, Iterable, List, Optional, Union, cast

from pytools.api import AllTracker
from pytools.parallelization import ParallelizableMixin

from .._types import FeatureName, FeatureTable, PredictionFunction, RandomState
from ..data import column_labels, validate_feature_table
from ..parallel import FeatureMap, ParallelFeatureMap, SequentialFeatureMap
from ._aggregation import _aggregate, _validate_nsim, _validate_random_state
from ._contribution import _predict
from ._result import ShapleyEstimate

log = logging.getLogger(__name__)

__all__ = ["MonteCarloShapleyExplainer"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class MonteCarloShapleyExplainer(ParallelizableMixin):
    """
    Explains the predictions of a model with Monte Carlo estimates of the Shapley
    values of its features.

    The explainer draws background observations from a reference table, usually the
    model's training data.
    Shapley values of each feature are estimated with :func:`.explain`, running
    `nsim` Monte Carlo repetitions per feature; features are distributed across
    parallel jobs if `n_jobs` is set.
    """

    #: the model to explain
    model: Any

    #: function taking the model and a feature table, and returning one numeric
    #: prediction per row of the table
    pred_fn: PredictionFunction

    #: the reference table to draw background observations from
    X: FeatureTable

    #: the number of Monte Carlo repetitions per feature
    nsim: int

    #: optional random seed, or a random number generator
    random_state: RandomState

    # defined in superclass, repeated here for Sphinx
    n_jobs: Optional[int]

    # defined in superclass, repeated here for Sphinx
    shared_memory: Optional[bool]

    # defined in superclass, repeated here for Sphinx
    pre_dispatch: Optional[Union[str, int]]

    # defined in superclass, repeated here for Sphinx
    verbose: Optional[int]

    def __init__(
        self,
        model: Any,
        pred_fn: PredictionFunction,
        X: FeatureTable,
        *,
        nsim: int = 1,
        random_state: RandomState = None,
        n_jobs: Optional[int] = None,
        shared_memory: Optional[bool] = None,
        pre_dispatch: Optional[Union[str, int]] = None,
        verbose: Optional[int] = None,
    ) -> None:
        """
        :param model: the model to explain, passed on to the prediction function
        :param pred_fn: function taking the model and a feature table, and
            returning one numeric prediction per row of the table; see
            :class:`.LearnerPredictionFunction` for scikit-learn learners
        :param X: the reference table to draw background observations from; a
            numpy array or a data frame
        :param nsim: the number of Monte Carlo repetitions per feature
            (default: 1)
        :param random_state: optional random seed, or a random number generator
        """
        super().__init__(
            n_jobs=n_jobs,
            shared_memory=shared_memory,
            pre_dispatch=pre_dispatch,
            verbose=verbose,
        )

        if not callable(pred_fn):
            raise TypeError(
                f"arg pred_fn must be callable, but is a {type(pred_fn).__name__}"
            )
        validate_feature_table(X)
        nsim = _validate_nsim(nsim)
        _validate_random_state(random_state)

        self.model = model
        self.pred_fn = pred_fn
        self.X = X
        self.nsim = nsim
        self.random_state = random_state

    # add parallelization parameters to __init__ docstring
    __init__.__doc__ = cast(str, __init__.__doc__) + cast(
        str, ParallelizableMixin.__init__.__doc__
    )

    @property
    def feature_names(self) -> List[FeatureName]:
        """
        The labels of all columns in the reference table.
        """
        return column_labels(self.X)

    def explain(
        self,
        feature_names: Union[FeatureName, Iterable[FeatureName], None] = None,
        newdata: Optional[FeatureTable] = None,
    ) -> ShapleyEstimate:
        """
        Estimate the Shapley values of a set of features for a set of observations.

        :param feature_names: the label of a feature, or an iterable of feature
            labels, to estimate Shapley values for; if ``None``, Shapley values are
            estimated for all columns in the reference table
        :param newdata: the observations to explain; if ``None``, all observations in
            the reference table are explained
        :return: the Shapley value estimates, with one row for each observation
            being explained and one column for each feature
        """
        values, sem = _aggregate(
            model=self.model,
            feature_names=feature_names,
            X=self.X,
            nsim=self.nsim,
            pred_fn=self.pred_fn,
            newdata=newdata,
            random_state=self.random_state,
            feature_map=self._feature_map(),
        )

        return ShapleyEstimate(values=values, sem=sem, nsim=self.nsim)

    def expected_output(self) -> float:
        """
        Calculate the mean prediction across all observations in the reference table.

        For each observation, the Shapley values of all features add up to the
        difference between the prediction for the observation and this baseline,
        up to the Monte Carlo estimation error.

        :return: the mean prediction for the reference table
        """
        return float(_predict(self.pred_fn, self.model, self.X).mean())

    def _feature_map(self) -> FeatureMap:
        if self.n_jobs is None:
            return SequentialFeatureMap()
        else:
            return ParallelFeatureMap(
                n_jobs=self.n_jobs,
                shared_memory=self.shared_memory,
                pre_dispatch=self.pre_dispatch,
                verbose=self.verbose,
            )


__tracker.validate()
