"""
Monte Carlo estimation of Shapley values.

:func:`.explain_feature` draws a single Monte Carlo sample of one feature's
contribution for all observations being explained; :func:`.explain` averages
repeated samples for multiple features into Shapley value estimates.
:class:`.MonteCarloShapleyExplainer` wraps both in an object-oriented API, returning
:class:`.ShapleyEstimate` objects with standard errors and confidence bounds.
"""

from ._aggregation import *
from ._contribution import *
from ._explainer import *
from ._result import *
