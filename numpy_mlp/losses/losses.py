from abc import ABC, abstractmethod

import numpy as np

from ..utils import check_shape


class ObjectiveBase(ABC):
    def __init__(self):
        super().__init__()

    def __call__(self, y, y_pred):
        return self.loss(y, y_pred)

    @abstractmethod
    def loss(self, y_true, y_pred):
        pass

    @abstractmethod
    def grad(self, y_true, y_pred, **kwargs):
        pass


class SquaredError(ObjectiveBase):
    def __init__(self):
        """
        A squared-error / `L2` loss.

        Notes
        -----
        For real-valued target **y** and predictions :math:`\\hat{\\mathbf{y}}`, the
        squared error is

        .. math::
                \\mathcal{L}(\\mathbf{y}, \\hat{\\mathbf{y}})
                    = 0.5 ||\\hat{\\mathbf{y}} - \\mathbf{y}||_2^2
        """
        super().__init__()

    def __str__(self):
        return "SquaredError"

    @staticmethod
    def loss(y, y_pred):
        """
        Compute the squared error between `y` and `y_pred`.

        Parameters
        ----------
        y : :py:class:`ndarray <numpy.ndarray>` of shape (m, n)
            Ground truth values for each of `n` examples
        y_pred : :py:class:`ndarray <numpy.ndarray>` of shape (m, n)
            Predictions for the `n` examples.

        Returns
        -------
        loss : float
            The sum of the squared error across dimensions and examples.
        """
        check_shape(y_pred, y.shape, "y_pred")
        return 0.5 * np.sum((y_pred - y) ** 2)

    @staticmethod
    def grad(y, y_pred):
        """
        Gradient of the squared error loss with respect to the network
        output, `y_pred`.

        Returns
        -------
        grad : :py:class:`ndarray <numpy.ndarray>` of shape (m, n)
            ``y_pred - y``
        """
        check_shape(y_pred, y.shape, "y_pred")
        return y_pred - y


class MeanSquaredError(ObjectiveBase):
    def __init__(self):
        """
        A mean squared error loss, averaged over the examples (columns).

        Notes
        -----
        .. math::
                \\mathcal{L}(\\mathbf{y}, \\hat{\\mathbf{y}})
                    = \\frac{1}{n} ||\\hat{\\mathbf{y}} - \\mathbf{y}||_2^2

        The gradient is reported as :math:`\\hat{\\mathbf{y}} - \\mathbf{y}`,
        without the :math:`2 / n` factor; the factor is absorbed by the
        learning rate.
        """
        super().__init__()

    def __str__(self):
        return "MeanSquaredError"

    @staticmethod
    def loss(y, y_pred):
        check_shape(y_pred, y.shape, "y_pred")
        n = y.shape[1] if y.ndim > 1 else 1
        return np.sum((y_pred - y) ** 2) / n

    @staticmethod
    def grad(y, y_pred):
        check_shape(y_pred, y.shape, "y_pred")
        return y_pred - y


class CrossEntropy(ObjectiveBase):
    def __init__(self):
        """
        A cross-entropy loss.

        Notes
        -----
        For a one-hot target **y** and predicted class probabilities
        :math:`\\hat{\\mathbf{y}}`, the cross entropy is

        .. math::
                \\mathcal{L}(\\mathbf{y}, \\hat{\\mathbf{y}})
                    = -\\sum_i y_i \\log (\\hat{y}_i + 10^{-9})
        """
        super().__init__()

    def __str__(self):
        return "CrossEntropy"

    @staticmethod
    def loss(y, y_pred):
        """
        Compute the cross-entropy (log) loss.

        Notes
        -----
        This method returns the sum (not the average!) of the losses for each
        sample.

        Parameters
        ----------
        y : :py:class:`ndarray <numpy.ndarray>` of shape (m, n)
            Class labels (one-hot with `m` possible classes) for each of `n`
            examples.
        y_pred : :py:class:`ndarray <numpy.ndarray>` of shape (m, n)
            Probabilities of each of `m` classes for the `n` examples.

        Returns
        -------
        loss : float
            The sum of the cross-entropy across classes and examples.
        """
        check_shape(y_pred, y.shape, "y_pred")

        # prevent taking the log of 0
        eps = 1e-9
        return -np.sum(y * np.log(y_pred + eps))

    @staticmethod
    def grad(y, y_pred):
        """
        Error signal for a softmax output layer trained with cross-entropy.

        Notes
        -----
        Returns ``y - y_pred``. This is the negated gradient of the loss with
        respect to the softmax input; the sign is restored by the negative
        off-diagonal entries of :meth:`Softmax.grad
        <numpy_mlp.activations.Softmax.grad>`. Do not pair this loss with an
        elementwise output activation such as :class:`Sigmoid
        <numpy_mlp.activations.Sigmoid>`; use :class:`BinaryCrossEntropy`
        there instead.

        Parameters
        ----------
        y : :py:class:`ndarray <numpy.ndarray>` of shape `(m, n)`
            A one-hot encoding of the true class labels.
        y_pred : :py:class:`ndarray <numpy.ndarray>` of shape `(m, n)`
            The network predictions.

        Returns
        -------
        grad : :py:class:`ndarray <numpy.ndarray>` of shape (m, n)
            ``y - y_pred``
        """
        check_shape(y_pred, y.shape, "y_pred")
        return y - y_pred


class BinaryCrossEntropy(ObjectiveBase):
    def __init__(self, eps=1e-7):
        """
        A binary cross-entropy loss, averaged over every entry.

        Notes
        -----
        .. math::
                \\mathcal{L}(\\mathbf{y}, \\mathbf{p})
                    = -\\frac{1}{N} \\sum_i y_i \\log p_i + (1 - y_i) \\log (1 - p_i)

        where `p` is the prediction clipped to ``[eps, 1 - eps]``.

        Parameters
        ----------
        eps : float
            Clipping bound that keeps the logs and divisions finite.
            Default is 1e-7.
        """
        self.eps = eps
        super().__init__()

    def __str__(self):
        return "BinaryCrossEntropy(eps={})".format(self.eps)

    def loss(self, y, y_pred):
        check_shape(y_pred, y.shape, "y_pred")
        p = np.clip(y_pred, self.eps, 1 - self.eps)
        return np.mean(-y * np.log(p) - (1 - y) * np.log(1 - p))

    def grad(self, y, y_pred):
        """Elementwise derivative of the loss wrt. `y_pred` (unaveraged)."""
        check_shape(y_pred, y.shape, "y_pred")
        p = np.clip(y_pred, self.eps, 1 - self.eps)
        return -(y / p) + (1 - y) / (1 - p)
