"""
Factories that build activations, losses, optimizers, and initial weights
from strings, dicts, or existing objects.
"""

from .initializers import *
