"""
Prediction functions adapting fitted learners to the interface expected by the
Shapley value estimators: called with a model and a feature table, and returning
one numeric prediction per row.
"""

from ._learner import *
