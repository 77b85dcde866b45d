"""
Parameter-update strategies.

An optimizer turns a layer's accumulated gradients into a step on that
layer's weights and biases. Per-layer bookkeeping (moving averages, moment
estimates) is stored on the layer itself, in its ``optimizer_state`` slot.
"""

from .optimizers import *
