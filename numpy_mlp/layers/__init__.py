"""Layers for assembling feedforward networks."""

from .layers import *
