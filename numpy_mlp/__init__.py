# noqa
"""Feedforward neural networks (multilayer perceptrons) implemented in NumPy"""

from . import utils
from . import preprocessing

from . import activations
from . import losses
from . import optimizers
from . import initializers
from . import layers
from . import metrics
from . import models
