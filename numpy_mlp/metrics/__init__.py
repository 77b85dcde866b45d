"""Confusion matrices and the classification scores derived from them."""

from .metrics import *
