"""Helpers for turning raw datasets into lists of column samples."""

from .general import *
