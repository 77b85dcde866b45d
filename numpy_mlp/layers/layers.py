"""A collection of composable layer objects for building neural networks"""
from abc import ABC, abstractmethod

import numpy as np

from ..initializers import WeightInitializer, ActivationInitializer
from ..utils import ShapeMismatchError, check_shape, check_random_state


class LayerBase(ABC):
    def __init__(self):
        """An abstract base class inherited by all neural network layers"""
        self.act_fn = None
        self.trainable = True
        self.optimizer_state = None

        self.gradients = {}
        self.parameters = {}
        self.derived_variables = {}

        super().__init__()

    @abstractmethod
    def forward(self, z, **kwargs):
        """Perform a forward pass through the layer"""
        raise NotImplementedError

    @abstractmethod
    def propagate_error(self, is_output_layer, next_error_signal, **kwargs):
        """Compute the layer's error signal and parameter gradients"""
        raise NotImplementedError

    def freeze(self):
        """
        Freeze the layer parameters at their current values so they can no
        longer be updated.
        """
        self.trainable = False

    def unfreeze(self):
        """Unfreeze the layer parameters so they can be updated."""
        self.trainable = True

    def clear_accumulators(self):
        """Reset every accumulated gradient to zeros of the parameter shape."""
        for k, v in self.parameters.items():
            self.gradients[k] = np.zeros_like(v, dtype=float)

    def summary(self):
        """Return a dict of the layer parameters, hyperparameters, and ID."""
        return {
            "layer": self.hyperparameters["layer"],
            "parameters": self.parameters,
            "hyperparameters": self.hyperparameters,
        }


class FullyConnected(LayerBase):
    def __init__(self, n_in, n_out, act_fn=None, init="uniform", random_state=None):
        r"""
        A fully-connected (dense) layer.

        Notes
        -----
        A fully connected layer computes the function

        .. math::

            \mathbf{Y} = f( \mathbf{WX} + \mathbf{b} )

        where `f` is the activation nonlinearity, **W** and **b** are
        parameters of the layer, and **X** holds one input example per
        column.

        Parameters
        ----------
        n_in : int
            The dimensionality of the layer input
        n_out : int
            The dimensionality of the layer output
        act_fn : str, :doc:`Activation <numpy_mlp.activations>` object, or None
            The output nonlinearity used in computing `Y`. If None, use the
            identity function :math:`f(X) = X`. Default is None.
        init : {'uniform', 'glorot_normal', 'glorot_uniform', 'he_normal', 'he_uniform', 'std_normal'}
            The initialization strategy for both weights and biases. Default
            is `'uniform'`, i.e., draws from Uniform(-1, 1).
        random_state : int, :class:`numpy.random.Generator`, or None
            Source of randomness for the initial parameters. Default is None.
        """  # noqa: E501
        super().__init__()

        if n_in < 1 or n_out < 1:
            fstr = "n_in and n_out must be positive, got n_in={}, n_out={}"
            raise ValueError(fstr.format(n_in, n_out))

        self.init = init
        self.act_fn = ActivationInitializer(act_fn)()

        rng = check_random_state(random_state)
        init_weights = WeightInitializer(str(self.act_fn), mode=self.init)

        W = init_weights((n_out, n_in), rng)
        b = init_weights((n_out, 1), rng)
        self._init_params(W, b)

    @classmethod
    def from_params(cls, W, b, act_fn=None):
        """
        Construct a layer from explicit parameter values.

        Parameters
        ----------
        W : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, n_in)`
            The layer weights.
        b : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, 1)` or `(n_out,)`
            The layer biases.
        act_fn : str, :doc:`Activation <numpy_mlp.activations>` object, or None
            The output nonlinearity. Default is None (identity).

        Returns
        -------
        layer : :class:`FullyConnected`
            The new layer. `W` and `b` are copied.
        """
        W = np.array(W, dtype=float)
        b = np.array(b, dtype=float)

        if W.ndim != 2:
            raise ShapeMismatchError("W must be 2D, got shape {}".format(W.shape))
        if b.size != W.shape[0]:
            fstr = "b must have {} entries to match W of shape {}, got shape {}"
            raise ShapeMismatchError(fstr.format(W.shape[0], W.shape, b.shape))

        layer = cls.__new__(cls)
        LayerBase.__init__(layer)
        layer.init = None
        layer.act_fn = ActivationInitializer(act_fn)()
        layer._init_params(W, b.reshape(-1, 1))
        return layer

    def _init_params(self, W, b):
        self.parameters = {"W": W, "b": b}
        self.derived_variables = {"Z": None, "Y": None}
        self.gradients = {"W": np.zeros_like(W), "b": np.zeros_like(b)}

    @property
    def hyperparameters(self):
        """Return a dictionary containing the layer hyperparameters."""
        return {
            "layer": "FullyConnected",
            "init": self.init,
            "n_in": self.n_in,
            "n_out": self.n_out,
            "act_fn": str(self.act_fn),
        }

    @property
    def n_in(self):
        return self.parameters["W"].shape[1]

    @property
    def n_out(self):
        return self.parameters["W"].shape[0]

    @property
    def shape(self):
        """The `(n_out, n_in)` shape of the weight matrix"""
        return self.parameters["W"].shape

    @property
    def weights(self):
        return self.parameters["W"]

    @property
    def biases(self):
        return self.parameters["b"]

    @property
    def errors(self):
        """The weight gradients accumulated over the current batch"""
        return self.gradients["W"]

    @property
    def deltas(self):
        """The bias gradients accumulated over the current batch"""
        return self.gradients["b"]

    @property
    def last_raw_output(self):
        return self.derived_variables["Z"]

    @property
    def last_activated_output(self):
        return self.derived_variables["Y"]

    def __str__(self):
        return "FullyConnected(n_in={}, n_out={}, act_fn={})".format(
            self.n_in, self.n_out, self.act_fn
        )

    def forward(self, X, retain_derived=True):
        """
        Compute the layer output on a set of examples.

        Parameters
        ----------
        X : :py:class:`ndarray <numpy.ndarray>` of shape `(n_in, width)`
            Layer input, one `n_in`-dimensional example per column. A 1D
            array is treated as a single column.
        retain_derived : bool
            Whether to cache the raw and activated outputs for use later
            during backprop. If False, the layer is left untouched, which
            makes the call safe for concurrent inference. Default is True.

        Returns
        -------
        Y : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, width)`
            Layer output for each example.
        """
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)

        if X.ndim != 2 or X.shape[0] != self.n_in:
            fstr = "Layer expects input with {} rows, got shape {}"
            raise ShapeMismatchError(fstr.format(self.n_in, X.shape))

        Y, Z = self._fwd(X)

        if retain_derived:
            self.derived_variables["Z"] = Z
            self.derived_variables["Y"] = Y

        return Y

    def _fwd(self, X):
        """Actual computation of forward pass"""
        W = self.parameters["W"]
        b = self.parameters["b"]

        Z = W @ X + b
        Y = self.act_fn(Z)
        return Y, Z

    def propagate_error(
        self,
        is_output_layer,
        next_error_signal,
        next_layer_weights=None,
        previous_layer_output=None,
    ):
        """
        Compute this layer's error signal and weight gradient for the most
        recent forward pass.

        Notes
        -----
        With :math:`g = f'(\\mathbf{Z})`, the error signal is

        .. math::

            \\delta &= g \\odot \\mathbf{e}  &&\\text{(output layer)} \\\\
            \\delta &= g \\odot (\\mathbf{W}_{next}^\\top \\mathbf{e})  &&\\text{(otherwise)}

        and the weight gradient is :math:`\\delta \\mathbf{X}_{prev}^\\top`.
        The accumulators are not modified; see :meth:`accumulate`.

        Parameters
        ----------
        is_output_layer : bool
            Whether this is the last layer of the network, in which case
            `next_error_signal` is the loss derivative wrt. the network output.
        next_error_signal : :py:class:`ndarray <numpy.ndarray>`
            The loss derivative (output layer) or the error signal of the
            following layer.
        next_layer_weights : :py:class:`ndarray <numpy.ndarray>` or None
            Weights of the following layer. Ignored for the output layer.
        previous_layer_output : :py:class:`ndarray <numpy.ndarray>` of shape `(n_in, width)`
            The input this layer received in the forward pass.

        Returns
        -------
        dW : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, n_in)`
            Gradient of the loss wrt. the layer weights.
        delta : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, width)`
            The layer's error signal; summed over columns it is the gradient
            wrt. the biases.
        """  # noqa: E501
        Z = self.derived_variables["Z"]
        if Z is None:
            raise ValueError("propagate_error called before any forward pass")

        if is_output_layer:
            carried = next_error_signal
        else:
            if next_layer_weights.shape[1] != self.n_out:
                fstr = "next_layer_weights should have {} columns, got shape {}"
                raise ShapeMismatchError(fstr.format(self.n_out, next_layer_weights.shape))
            carried = next_layer_weights.T @ next_error_signal

        check_shape(carried, Z.shape, "error signal")

        X_prev = np.asarray(previous_layer_output, dtype=float)
        if X_prev.ndim == 1:
            X_prev = X_prev.reshape(-1, 1)
        check_shape(X_prev, (self.n_in, Z.shape[1]), "previous_layer_output")

        delta = self.act_fn.grad(Z) * carried
        dW = delta @ X_prev.T
        return dW, delta

    def accumulate(self, dW, delta):
        """
        Add a weight gradient and an error signal into the layer's
        accumulators.

        Parameters
        ----------
        dW : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, n_in)`
            Weight gradient, as returned by :meth:`propagate_error`.
        delta : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, width)`
            Error signal, as returned by :meth:`propagate_error`. It is summed
            over columns before being added to the bias accumulator.
        """
        check_shape(dW, self.shape, "dW")
        if delta.ndim != 2 or delta.shape[0] != self.n_out:
            fstr = "delta should have {} rows, got shape {}"
            raise ShapeMismatchError(fstr.format(self.n_out, delta.shape))

        self.gradients["W"] = self.gradients["W"] + dW
        self.gradients["b"] = self.gradients["b"] + delta.sum(axis=1, keepdims=True)

    def apply_update(self, delta_weights, delta_biases):
        """
        Subtract an optimizer-computed step from the layer parameters.

        Parameters
        ----------
        delta_weights : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, n_in)`
            The step to subtract from the weights.
        delta_biases : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, 1)`
            The step to subtract from the biases.
        """
        assert self.trainable, "Layer is frozen"
        check_shape(delta_weights, self.parameters["W"].shape, "delta_weights")
        check_shape(delta_biases, self.parameters["b"].shape, "delta_biases")

        self.parameters["W"] = self.parameters["W"] - delta_weights
        self.parameters["b"] = self.parameters["b"] - delta_biases
