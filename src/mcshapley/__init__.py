"""
Fast approximate Shapley values for black-box models.

Estimates per-feature Shapley attributions for every observation of a data set at
once, using Monte Carlo sampling of feature permutations and background
observations. Only a prediction function is required of the model being explained.

Sub-packages:

- :mod:`mcshapley.data`: permutation masks and hybrid observations
- :mod:`mcshapley.estimation`: the Monte Carlo Shapley estimator
- :mod:`mcshapley.parallel`: strategies for explaining features in parallel
- :mod:`mcshapley.prediction`: prediction functions for scikit-learn learners
"""

from ._errors import *

__version__ = "0.1.0"
