"""
Common neural network activation functions.

Each activation is a strategy object exposing ``fn`` (the nonlinearity,
applied to a layer's raw output) and ``grad`` (its derivative with respect to
that raw output).
"""

from .activations import *
