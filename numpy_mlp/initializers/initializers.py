"""A module containing objects to instantiate various neural network components."""
import re
from functools import partial
from ast import literal_eval as _eval

import numpy as np

from ..optimizers import OptimizerBase, SGD, AdaGrad, RMSProp, Adam
from ..activations import (
    ReLU,
    Tanh,
    Affine,
    Sigmoid,
    Softmax,
    Identity,
    LeakyReLU,
    ActivationBase,
)
from ..losses import (
    ObjectiveBase,
    CrossEntropy,
    SquaredError,
    MeanSquaredError,
    BinaryCrossEntropy,
)

from ..utils import (
    uniform,
    he_normal,
    he_uniform,
    std_normal,
    glorot_normal,
    glorot_uniform,
)


class ActivationInitializer(object):
    def __init__(self, param=None):
        """
        A class for initializing activation functions. Valid `param` values
        are:
            (a) ``__str__`` representations of an `ActivationBase` instance
            (b) `ActivationBase` instance

        If `param` is `None`, return the identity function: f(X) = X
        """
        self.param = param

    def __call__(self):
        """Initialize activation function"""
        param = self.param
        if param is None:
            act = Identity()
        elif isinstance(param, ActivationBase):
            act = param
        elif isinstance(param, str):
            act = self.init_from_str(param)
        else:
            raise ValueError("Unknown activation: {}".format(param))
        return act

    def init_from_str(self, act_str):
        """Initialize activation function from the `param` string"""
        act_str = act_str.lower()
        if act_str == "relu":
            act_fn = ReLU()
        elif act_str == "tanh":
            act_fn = Tanh()
        elif act_str == "sigmoid":
            act_fn = Sigmoid()
        elif act_str == "softmax":
            act_fn = Softmax()
        elif act_str == "identity":
            act_fn = Identity()
        elif "affine" in act_str:
            r = r"affine\(slope=(.*), intercept=(.*)\)"
            slope, intercept = re.match(r, act_str).groups()
            act_fn = Affine(float(slope), float(intercept))
        elif "leaky relu" in act_str:
            r = r"leaky relu\(alpha=(.*)\)"
            alpha = re.match(r, act_str).groups()[0]
            act_fn = LeakyReLU(float(alpha))
        else:
            raise ValueError("Unknown activation: {}".format(act_str))
        return act_fn


class LossInitializer(object):
    def __init__(self, param=None):
        """
        A class for initializing loss objects. Valid `param` values are:
            (a) `ObjectiveBase` instances
            (b) strings: "squared_error", "mse", "cross_entropy", or
                "binary_cross_entropy" (case, spaces, and underscores are
                ignored)
        """
        self.param = param

    def __call__(self):
        """Initialize the loss"""
        param = self.param
        if isinstance(param, ObjectiveBase):
            loss = param
        elif isinstance(param, str):
            loss = self.init_from_str(param)
        else:
            raise ValueError("Unknown loss: {}".format(param))
        return loss

    def init_from_str(self, loss_str):
        """Initialize the loss from the `param` string"""
        key = re.sub(r"[\s_]", "", loss_str.lower())
        if key in ["squarederror", "l2"]:
            loss = SquaredError()
        elif key in ["mse", "meansquarederror"]:
            loss = MeanSquaredError()
        elif key in ["crossentropy", "categoricalcrossentropy"]:
            loss = CrossEntropy()
        elif key.startswith("binarycrossentropy"):
            loss = BinaryCrossEntropy()
        else:
            raise ValueError("Unknown loss: {}".format(loss_str))
        return loss


class OptimizerInitializer(object):
    def __init__(self, param=None):
        """
        A class for initializing optimizers. Valid `param` values are:
            (a) __str__ representations of `OptimizerBase` instances
            (b) `OptimizerBase` instances
            (c) Parameter dicts with a `hyperparameters` key (e.g., as produced
                by an optimizer's `hyperparameters` attribute wrapped in a dict)

        If `param` is `None`, return the RMSProp optimizer with default
        parameters.
        """
        self.param = param

    def __call__(self):
        """Initialize the optimizer"""
        param = self.param
        if param is None:
            opt = RMSProp()
        elif isinstance(param, OptimizerBase):
            opt = param
        elif isinstance(param, str):
            opt = self.init_from_str()
        elif isinstance(param, dict):
            opt = self.init_from_dict()
        else:
            raise ValueError("Unknown optimizer: {}".format(param))
        return opt

    def init_from_str(self):
        """Initialize optimizer from the `param` string"""
        r = r"([a-zA-Z0-9_]*)=([^,)]*)"
        opt_str = self.param.lower()
        kwargs = {i: _eval(j.strip()) for i, j in re.findall(r, opt_str)}
        if "sgd" in opt_str:
            optimizer = SGD(**kwargs)
        elif "adagrad" in opt_str:
            optimizer = AdaGrad(**kwargs)
        elif "rmsprop" in opt_str:
            optimizer = RMSProp(**kwargs)
        elif "adam" in opt_str:
            optimizer = Adam(**kwargs)
        else:
            raise NotImplementedError("{}".format(opt_str))
        return optimizer

    def init_from_dict(self):
        """Initialize optimizer from the `param` dictonary"""
        D = self.param
        op = D["hyperparameters"] if "hyperparameters" in D else None

        if op is None:
            raise ValueError("`param` dictionary has no `hyperparameters` key")

        if op["id"] == "SGD":
            optimizer = SGD()
        elif op["id"] == "RMSProp":
            optimizer = RMSProp()
        elif op["id"] == "AdaGrad":
            optimizer = AdaGrad()
        elif op["id"] == "Adam":
            optimizer = Adam()
        else:
            raise NotImplementedError("{}".format(op["id"]))
        optimizer.set_params(op)
        return optimizer


class WeightInitializer(object):
    def __init__(self, act_fn_str, mode="uniform"):
        """
        A factory for weight initializers.

        Parameters
        ----------
        act_fn_str : str
            The string representation for the layer activation function
        mode : str (default: 'uniform')
            The weight initialization strategy. Valid entries are {"uniform",
            "he_normal", "he_uniform", "glorot_normal", "glorot_uniform",
            "std_normal"}. "uniform" draws from Uniform(-1, 1).
        """
        if mode not in [
            "uniform",
            "he_normal",
            "he_uniform",
            "glorot_normal",
            "glorot_uniform",
            "std_normal",
        ]:
            raise ValueError("Unrecognize initialization mode: {}".format(mode))

        self.mode = mode
        self.act_fn = act_fn_str

        if mode == "uniform":
            self._fn = uniform
        elif mode == "glorot_uniform":
            self._fn = glorot_uniform
        elif mode == "glorot_normal":
            self._fn = glorot_normal
        elif mode == "he_uniform":
            self._fn = he_uniform
        elif mode == "he_normal":
            self._fn = he_normal
        elif mode == "std_normal":
            self._fn = std_normal

    def __call__(self, weight_shape, rng):
        """Initialize weights of shape `weight_shape` with draws from `rng`"""
        if "glorot" in self.mode:
            fn = partial(self._fn, gain=self._calc_glorot_gain())
        else:
            fn = self._fn
        return fn(weight_shape, rng)

    def _calc_glorot_gain(self):
        """
        Values from:
        https://pytorch.org/docs/stable/nn.html?#torch.nn.init.calculate_gain
        """
        gain = 1.0
        act_str = self.act_fn.lower()
        if act_str == "tanh":
            gain = 5.0 / 3.0
        elif act_str == "relu":
            gain = np.sqrt(2)
        elif "leaky relu" in act_str:
            r = r"leaky relu\(alpha=(.*)\)"
            alpha = re.match(r, act_str).groups()[0]
            gain = np.sqrt(2 / (1 + float(alpha) ** 2))
        return gain
