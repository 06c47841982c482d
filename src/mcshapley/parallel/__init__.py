"""
Strategies for explaining multiple features sequentially or in parallel.

Features are explained independently of each other, so the work for each feature
can be dispatched to a separate worker using a :class:`.ParallelFeatureMap`.
"""

from ._parallel import *
