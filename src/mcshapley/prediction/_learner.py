"""
Prediction functions for scikit-learn learners.
"""

import logging
from typing import Any, Optional

import numpy as np
import numpy.typing as npt
from sklearn.base import BaseEstimator, is_classifier, is_regressor

from pytools.api import AllTracker

from .._types import FeatureTable

log = logging.getLogger(__name__)

__all__ = ["LearnerPredictionFunction"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class LearnerPredictionFunction:
    """
    A prediction function for fitted scikit-learn learners, for use with
    :func:`.explain` and :class:`.MonteCarloShapleyExplainer`.

    - regressors (including regression pipelines) are called with method
      ``predict``
    - classifiers (including classification pipelines) are called with method
      ``predict_proba``, returning the probabilities of the reference class
    - any other callable model is called with the feature table as its only
      argument
    """

    #: the class whose probabilities to return for classifiers; ``None`` for the
    #: last class listed in the classifier's ``classes_`` attribute
    reference_class: Optional[Any]

    def __init__(self, *, reference_class: Optional[Any] = None) -> None:
        """
        :param reference_class: the class whose probabilities to return for
            classifiers (default: the last class listed in the classifier's
            ``classes_`` attribute, i.e., the positive class of a binary classifier)
        """
        self.reference_class = reference_class

    def __call__(self, model: Any, X: FeatureTable) -> npt.NDArray[np.float64]:
        """
        Get the predictions of a model for a feature table.

        :param model: the fitted learner, or a callable model
        :param X: the feature table
        :return: the predictions, one for each row of the feature table
        """
        if isinstance(model, BaseEstimator):
            if is_classifier(model):
                probabilities = np.asarray(model.predict_proba(X))
                return probabilities[:, self._reference_class_index(model)]
            elif is_regressor(model):
                return np.asarray(model.predict(X))
            else:
                raise TypeError(
                    "arg model is neither a regressor nor a classifier: "
                    f"{type(model).__name__}"
                )
        elif callable(model):
            return np.asarray(model(X))
        else:
            raise TypeError(
                "arg model must be a scikit-learn learner or a callable, "
                f"but is a {type(model).__name__}"
            )

    def _reference_class_index(self, classifier: BaseEstimator) -> int:
        try:
            classes = list(classifier.classes_)
        except AttributeError:
            if self.reference_class is not None:
                raise
            log.warning(
                f"{type(classifier).__name__} does not define classes_ attribute; "
                "using the probabilities of the last class"
            )
            return -1

        if self.reference_class is None:
            return len(classes) - 1

        try:
            return classes.index(self.reference_class)
        except ValueError:
            raise ValueError(
                f"reference class {self.reference_class!r} is not one of the "
                f"classes of the classifier: {classes}"
            ) from None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(reference_class={self.reference_class!r})"


__tracker.validate()
