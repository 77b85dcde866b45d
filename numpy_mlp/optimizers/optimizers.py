from copy import deepcopy
from abc import ABC, abstractmethod

import numpy as np

from ..utils import MissingOptimizerStateError


#######################################################################
#                         Per-layer state                             #
#######################################################################


class MomentumState(object):
    def __init__(self, weights_update, biases_update):
        """The previous step taken for each parameter of a layer."""
        self.weights_update = weights_update
        self.biases_update = biases_update


class RMSPropState(object):
    def __init__(self, weights_moving_avg, biases_moving_avg):
        """Decaying averages of the squared gradients for a layer."""
        self.weights_moving_avg = weights_moving_avg
        self.biases_moving_avg = biases_moving_avg


class AdaGradState(object):
    def __init__(self, weights_cache, biases_cache):
        """Running sums of the squared gradients for a layer."""
        self.weights_cache = weights_cache
        self.biases_cache = biases_cache


class AdamState(object):
    def __init__(self, weights_mean, weights_var, biases_mean, biases_var, t=0):
        """First and second moment estimates and the step count for a layer."""
        self.t = t
        self.weights_mean = weights_mean
        self.weights_var = weights_var
        self.biases_mean = biases_mean
        self.biases_var = biases_var


#######################################################################
#                             Optimizers                              #
#######################################################################


class OptimizerBase(ABC):
    def __init__(self):
        """
        An abstract base class for all Optimizer objects.

        This should never be used directly.

        Notes
        -----
        An optimizer holds only global hyperparameters. Anything it needs to
        remember about a particular layer between updates lives in that
        layer's ``optimizer_state`` slot, so a single optimizer instance can
        drive any number of layers and models.
        """
        self.hyperparameters = {}

    def __call__(self, batch_size, layer, learning_rate):
        return self.update_params(batch_size, layer, learning_rate)

    def copy(self):
        """Return a copy of the optimizer object"""
        return deepcopy(self)

    def set_params(self, hparam_dict=None):
        """Set the hyperparameters of the optimizer object from a dictionary"""
        if hparam_dict is not None:
            for k, v in hparam_dict.items():
                if k in self.hyperparameters and k != "id":
                    self.hyperparameters[k] = v

    def _mean_gradients(self, batch_size, layer):
        """Convert a layer's summed-over-batch gradients into mean gradients"""
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1, got {}".format(batch_size))
        return layer.errors / batch_size, layer.deltas / batch_size

    def _get_state(self, layer, state_type):
        """Fetch the layer's optimizer state, failing if it was never set up"""
        state = layer.optimizer_state
        if not isinstance(state, state_type):
            fstr = "{} state missing on layer {}; call `initialize_layer_additional_params` first"
            raise MissingOptimizerStateError(fstr.format(self, layer))
        return state

    @staticmethod
    def _has_state(layer, state_type, attr):
        """True if `layer` already holds a compatible state of `state_type`"""
        state = layer.optimizer_state
        return (
            isinstance(state, state_type)
            and getattr(state, attr).shape == layer.weights.shape
        )

    @abstractmethod
    def initialize_layer_additional_params(self, layer):
        raise NotImplementedError

    @abstractmethod
    def update_params(self, batch_size, layer, learning_rate):
        raise NotImplementedError


class SGD(OptimizerBase):
    def __init__(self, momentum=0.0, **kwargs):
        """
        A stochastic gradient descent optimizer.

        Notes
        -----
        For model parameters :math:`\\theta`, averaged parameter gradients
        :math:`\\nabla_{\\theta} \\mathcal{L}`, and learning rate :math:`\\eta`,
        the SGD update at timestep `t` is

        .. math::

            \\text{update}^{(t)}
                &=  \\text{momentum} \\cdot \\text{update}^{(t-1)} + \\eta \\nabla_{\\theta} \\mathcal{L}\\\\
            \\theta^{(t+1)}
                &\\leftarrow  \\theta^{(t)} - \\text{update}^{(t)}

        With the default momentum of 0 this is plain gradient descent and no
        per-layer state is kept.

        Parameters
        ----------
        momentum : float in range [0, 1]
            The fraction of the previous update to add to the current update.
            If 0, no momentum is applied. Default is 0.
        """
        super().__init__()

        self.hyperparameters = {"id": "SGD", "momentum": momentum}

    def __str__(self):
        return "SGD(momentum={})".format(self.hyperparameters["momentum"])

    def initialize_layer_additional_params(self, layer):
        """Allocate the momentum buffers, if momentum is in use"""
        if self.hyperparameters["momentum"] == 0:
            return
        if not self._has_state(layer, MomentumState, "weights_update"):
            layer.optimizer_state = MomentumState(
                np.zeros_like(layer.weights), np.zeros_like(layer.biases)
            )

    def update_params(self, batch_size, layer, learning_rate):
        """
        Apply the SGD update to the parameters of `layer`.

        Parameters
        ----------
        batch_size : int
            The number of samples summed into the layer's gradients.
        layer : :class:`~numpy_mlp.layers.FullyConnected`
            The layer to update.
        learning_rate : float
            The step size.
        """
        momentum = self.hyperparameters["momentum"]
        dW, db = self._mean_gradients(batch_size, layer)

        update_W, update_b = learning_rate * dW, learning_rate * db
        if momentum != 0:
            S = self._get_state(layer, MomentumState)
            update_W = momentum * S.weights_update + update_W
            update_b = momentum * S.biases_update + update_b
            S.weights_update, S.biases_update = update_W, update_b

        layer.apply_update(update_W, update_b)


#######################################################################
#                      Adaptive Gradient Methods                      #
#######################################################################


class AdaGrad(OptimizerBase):
    def __init__(self, eps=1e-8, **kwargs):
        """
        An AdaGrad optimizer.

        Notes
        -----
        Weights that receive large gradients will have their effective learning
        rate reduced, while weights that receive small or infrequent updates
        will have their effective learning rate increased.

        Equations::

            cache[t] = cache[t-1] + grad[t] ** 2
            update[t] = lr * grad[t] / np.sqrt(cache[t] + eps)
            param[t+1] = param[t] - update[t]

        Note that the ``**`` and `/` operations are elementwise

        Parameters
        ----------
        eps : float
            Smoothing term to avoid divide-by-zero errors in the update calc.
            Default is 1e-8.
        """
        super().__init__()

        self.hyperparameters = {"id": "AdaGrad", "eps": eps}

    def __str__(self):
        return "AdaGrad(eps={})".format(self.hyperparameters["eps"])

    def initialize_layer_additional_params(self, layer):
        if not self._has_state(layer, AdaGradState, "weights_cache"):
            layer.optimizer_state = AdaGradState(
                np.zeros_like(layer.weights), np.zeros_like(layer.biases)
            )

    def update_params(self, batch_size, layer, learning_rate):
        """Apply the AdaGrad update to the parameters of `layer`."""
        eps = self.hyperparameters["eps"]
        S = self._get_state(layer, AdaGradState)
        dW, db = self._mean_gradients(batch_size, layer)

        S.weights_cache = S.weights_cache + dW ** 2
        S.biases_cache = S.biases_cache + db ** 2

        update_W = learning_rate * dW / np.sqrt(S.weights_cache + eps)
        update_b = learning_rate * db / np.sqrt(S.biases_cache + eps)
        layer.apply_update(update_W, update_b)


class RMSProp(OptimizerBase):
    def __init__(self, decay=0.9, eps=1e-8, **kwargs):
        """
        RMSProp optimizer.

        Notes
        -----
        RMSProp was proposed as a refinement of :class:`AdaGrad` to reduce its
        aggressive, monotonically decreasing learning rate.

        RMSProp uses a *decaying average* of the previous squared gradients
        (second moment) rather than the full history of squared gradients.

        Equations::

            grad[t] = grad_sum[t] / batch_size
            cache[t] = decay * cache[t-1] + (1 - decay) * grad[t] ** 2
            update[t] = lr * grad[t] / np.sqrt(cache[t] + eps)
            param[t+1] = param[t] - update[t]

        Note that the ``**`` and ``/`` operations are elementwise. The cache
        is refreshed with the current batch's gradient before it scales that
        same batch's step.

        Parameters
        ----------
        decay : float in [0, 1]
            Rate of decay for the moving average. Typical values are [0.9,
            0.99, 0.999]. Default is 0.9.
        eps : float
            Constant term to avoid divide-by-zero errors during the update
            calc, e.g. when a moving average is exactly zero. Default is 1e-8.
        """
        super().__init__()

        self.hyperparameters = {"id": "RMSProp", "decay": decay, "eps": eps}

    def __str__(self):
        H = self.hyperparameters
        return "RMSProp(decay={}, eps={})".format(H["decay"], H["eps"])

    def initialize_layer_additional_params(self, layer):
        """
        Attach zero-valued moving averages, shaped like the layer's weights
        and biases, to `layer`. Existing compatible state is left untouched.
        """
        if not self._has_state(layer, RMSPropState, "weights_moving_avg"):
            layer.optimizer_state = RMSPropState(
                np.zeros_like(layer.weights), np.zeros_like(layer.biases)
            )

    def update_params(self, batch_size, layer, learning_rate):
        """
        Apply the RMSProp update to the parameters of `layer`.

        Parameters
        ----------
        batch_size : int
            The number of samples summed into the layer's gradients.
        layer : :class:`~numpy_mlp.layers.FullyConnected`
            The layer to update. Must have been passed to
            :meth:`initialize_layer_additional_params` first.
        learning_rate : float
            The global step size.
        """
        H = self.hyperparameters
        decay, eps = H["decay"], H["eps"]
        S = self._get_state(layer, RMSPropState)
        dW, db = self._mean_gradients(batch_size, layer)

        S.weights_moving_avg = decay * S.weights_moving_avg + (1 - decay) * dW ** 2
        S.biases_moving_avg = decay * S.biases_moving_avg + (1 - decay) * db ** 2

        update_W = learning_rate * dW / np.sqrt(S.weights_moving_avg + eps)
        update_b = learning_rate * db / np.sqrt(S.biases_moving_avg + eps)
        layer.apply_update(update_W, update_b)


class Adam(OptimizerBase):
    def __init__(self, decay1=0.9, decay2=0.999, eps=1e-8, **kwargs):
        """
        Adam (adaptive moment estimation) optimization algorithm.

        Notes
        -----
        Designed to combine the advantages of :class:`AdaGrad`, which works
        well with sparse gradients, and :class:`RMSProp`, which works well in
        online and non-stationary settings.

        Parameters
        ----------
        decay1 : float
            The rate of decay to use for in running estimate of the first
            moment (mean) of the gradient. Default is 0.9.
        decay2 : float
            The rate of decay to use for in running estimate of the second
            moment (variance) of the gradient. Default is 0.999.
        eps : float
            Constant term to avoid divide-by-zero errors during the update
            calc. Default is 1e-8.
        """
        super().__init__()

        self.hyperparameters = {
            "id": "Adam",
            "eps": eps,
            "decay1": decay1,
            "decay2": decay2,
        }

    def __str__(self):
        H = self.hyperparameters
        d1, d2, eps = H["decay1"], H["decay2"], H["eps"]
        return "Adam(decay1={}, decay2={}, eps={})".format(d1, d2, eps)

    def initialize_layer_additional_params(self, layer):
        if not self._has_state(layer, AdamState, "weights_mean"):
            W, b = layer.weights, layer.biases
            layer.optimizer_state = AdamState(
                np.zeros_like(W), np.zeros_like(W), np.zeros_like(b), np.zeros_like(b)
            )

    def update_params(self, batch_size, layer, learning_rate):
        """Apply the Adam update to the parameters of `layer`."""
        H = self.hyperparameters
        d1, d2, eps = H["decay1"], H["decay2"], H["eps"]
        S = self._get_state(layer, AdamState)
        dW, db = self._mean_gradients(batch_size, layer)

        S.t += 1
        S.weights_mean = d1 * S.weights_mean + (1 - d1) * dW
        S.weights_var = d2 * S.weights_var + (1 - d2) * dW ** 2
        S.biases_mean = d1 * S.biases_mean + (1 - d1) * db
        S.biases_var = d2 * S.biases_var + (1 - d2) * db ** 2

        # calc unbiased moment estimates and Adam update
        c1, c2 = 1 - d1 ** S.t, 1 - d2 ** S.t
        update_W = learning_rate * (S.weights_mean / c1) / np.sqrt(S.weights_var / c2 + eps)
        update_b = learning_rate * (S.biases_mean / c1) / np.sqrt(S.biases_var / c2 + eps)
        layer.apply_update(update_W, update_b)
