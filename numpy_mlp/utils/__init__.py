"""
Common helper functions.

The ``utils`` module contains the library's exception types, training
helpers (minibatching, joint shuffling, random-state handling), and weight
initialization schemes.
"""

from .utils import *
from . import testing
