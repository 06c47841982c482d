"""
Feature tables, background samples, permutation masks, and hybrid observations.

Feature tables are either homogeneous numeric matrices (:class:`numpy.ndarray`) or
heterogeneous record tables (:class:`pandas.DataFrame`).
:class:`.HybridRowBuilder` combines the observations being explained with
background observations according to the masks drawn by a
:class:`.PermutationMaskGenerator`.
"""

from ._hybrid import *
from ._mask import *
from ._table import *
