from time import time

import numpy as np

from ..metrics import score, check_metrics
from ..initializers import LossInitializer, OptimizerInitializer
from ..utils import (
    minibatch,
    shuffle_dataset,
    check_random_state,
    ShapeMismatchError,
)


def _as_column_matrix(x):
    """Return `x` as a 2D float array, treating scalars and 1D input as a column"""
    x = np.asarray(x, dtype=float)
    if x.ndim == 0:
        return x.reshape(1, 1)
    if x.ndim == 1:
        return x.reshape(-1, 1)
    return x


class MLP(object):
    def __init__(self, layers, loss="squared_error"):
        """
        A feedforward network (multilayer perceptron) trained with minibatch
        backpropagation.

        Notes
        -----
        The network is an ordered stack of layers where the output of layer
        `i` is the input of layer `i + 1`. Examples are column matrices; a
        dataset is a pair of equal-length lists of inputs and targets.

        During :meth:`evaluate` the network records every intermediate output
        in ``derived_variables["activations"]`` (entry 0 is the network
        input). :meth:`backpropagate` reads each layer's input from that list
        rather than from the neighbouring layer.

        Parameters
        ----------
        layers : list of :class:`~numpy_mlp.layers.FullyConnected`
            The layers, input side first. Must be non-empty, hold each layer
            object at most once, and satisfy
            ``layers[i].n_out == layers[i + 1].n_in``.
        loss : str or :doc:`Loss <numpy_mlp.losses>` object
            The training objective. Default is `"squared_error"`.
        """
        layers = list(layers)
        if len(layers) == 0:
            raise ValueError("An MLP needs at least one layer")

        if len(set(id(l) for l in layers)) != len(layers):
            raise ValueError("Each layer object may appear only once in an MLP")

        for i, (l1, l2) in enumerate(zip(layers[:-1], layers[1:])):
            if l1.n_out != l2.n_in:
                fstr = "Layer {} outputs {} values but layer {} expects {}"
                raise ShapeMismatchError(fstr.format(i, l1.n_out, i + 1, l2.n_in))

        self.layers = layers
        self.loss = LossInitializer(loss)()
        self.derived_variables = {"activations": []}
        self.history = {"loss": [], "metrics": []}

    def __str__(self):
        layers = ", ".join(str(l) for l in self.layers)
        return "MLP(layers=[{}], loss={})".format(layers, self.loss)

    @property
    def hyperparameters(self):
        """Return a dictionary containing the model hyperparameters."""
        return {
            "model": "MLP",
            "loss": str(self.loss),
            "layers": [l.hyperparameters for l in self.layers],
        }

    @property
    def n_in(self):
        return self.layers[0].n_in

    @property
    def n_out(self):
        return self.layers[-1].n_out

    def evaluate(self, X):
        """
        Run a forward pass through every layer, caching the intermediate
        outputs needed for backprop.

        Parameters
        ----------
        X : :py:class:`ndarray <numpy.ndarray>` of shape `(n_in, width)`
            The network input, one example per column.

        Returns
        -------
        y_pred : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, width)`
            The output of the final layer.
        """
        out = _as_column_matrix(X)
        activations = [out]
        for layer in self.layers:
            out = layer.forward(out, retain_derived=True)
            activations.append(out)
        self.derived_variables["activations"] = activations
        return out

    def predict(self, X):
        """
        Compute the network output without caching anything.

        Notes
        -----
        Unlike :meth:`evaluate`, this leaves every layer untouched, so it is
        safe to call concurrently on a trained model.

        Parameters
        ----------
        X : :py:class:`ndarray <numpy.ndarray>` of shape `(n_in, width)`
            The network input, one example per column.

        Returns
        -------
        y_pred : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, width)`
            The output of the final layer.
        """
        out = _as_column_matrix(X)
        for layer in self.layers:
            out = layer.forward(out, retain_derived=False)
        return out

    def backpropagate(self, y, X, y_pred):
        """
        Backprop the loss for the most recent :meth:`evaluate` call through
        every layer, adding each layer's gradients to its accumulators.

        Notes
        -----
        Layers are visited last to first. Every layer sees the weights its
        successor had during the forward pass, as no parameter is updated
        until the whole batch has been backpropagated.

        Parameters
        ----------
        y : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, width)`
            The expected network output.
        X : :py:class:`ndarray <numpy.ndarray>` of shape `(n_in, width)`
            The network input passed to :meth:`evaluate`.
        y_pred : :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, width)`
            The value returned by :meth:`evaluate`.
        """
        activations = self.derived_variables["activations"]
        if len(activations) != len(self.layers) + 1:
            raise ValueError("backpropagate called before evaluate")

        n_layers = len(self.layers)
        error = self.loss.grad(_as_column_matrix(y), y_pred)

        for i in reversed(range(n_layers)):
            layer = self.layers[i]
            is_output_layer = i == n_layers - 1

            prev_output = _as_column_matrix(X) if i == 0 else activations[i]
            next_weights = None if is_output_layer else self.layers[i + 1].weights

            dW, error = layer.propagate_error(
                is_output_layer, error, next_weights, prev_output
            )
            layer.accumulate(dW, error)

    def update(self, optimizer, batch_size, learning_rate):
        """
        Apply the accumulated gradients of every trainable layer, then clear
        the accumulators of every layer.
        """
        for layer in self.layers:
            if layer.trainable:
                optimizer.update_params(batch_size, layer, learning_rate)
            layer.clear_accumulators()

    def fit(
        self,
        X,
        Y,
        batch_size=32,
        n_epochs=10,
        learning_rate=0.001,
        optimizer=None,
        random_state=None,
        metrics=None,
        verbose=True,
        callback=None,
    ):
        """
        Train the network with minibatch gradient descent.

        Notes
        -----
        Each epoch jointly shuffles a copy of `X` and `Y`, splits it into
        contiguous batches, and for every example runs :meth:`evaluate` and
        :meth:`backpropagate`. Parameters are updated once per batch, after
        its final example.

        Parameters
        ----------
        X : list of :py:class:`ndarray <numpy.ndarray>` of shape `(n_in, 1)`
            The training inputs.
        Y : list of :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, 1)`
            The training targets, paired with `X` by position.
        batch_size : int
            Examples per parameter update. The final batch of an epoch may be
            smaller. Default is 32.
        n_epochs : int
            Passes over the training set. Default is 10.
        learning_rate : float
            The step size handed to the optimizer. Default is 0.001.
        optimizer : str, :doc:`Optimizer <numpy_mlp.optimizers>` object, or None
            The update rule. If None, use :class:`~numpy_mlp.optimizers.RMSProp`
            with default parameters. Default is None.
        random_state : int, :class:`numpy.random.Generator`, or None
            Source of randomness for shuffling. Default is None.
        metrics : list of str or None
            Classification metrics (see :func:`numpy_mlp.metrics.score`) to
            compute on each epoch's training predictions. Default is None.
        verbose : bool
            Print batch and epoch information during training. Default is True.
        callback : callable or None
            If given, called at the end of every epoch as
            ``callback(epoch, loss, predictions, targets)``, where `predictions`
            and `targets` are the epoch's raw network outputs and expected
            outputs in training order. Default is None.

        Returns
        -------
        history : dict
            ``"loss"``: the mean batch loss of each epoch. ``"metrics"``: a
            dict of scores per epoch (empty if `metrics` is None).
        """
        X = [_as_column_matrix(x) for x in X]
        Y = [_as_column_matrix(y) for y in Y]

        if len(X) != len(Y):
            fstr = "X and Y must have the same length, got {} and {}"
            raise ValueError(fstr.format(len(X), len(Y)))
        if len(X) == 0:
            raise ValueError("Cannot fit on an empty dataset")
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1, got {}".format(batch_size))
        if n_epochs < 0:
            raise ValueError("n_epochs must be >= 0, got {}".format(n_epochs))
        if Y[0].shape[0] != self.n_out:
            fstr = "Targets have {} rows but the network outputs {}"
            raise ShapeMismatchError(fstr.format(Y[0].shape[0], self.n_out))
        if metrics is not None:
            metrics = check_metrics(metrics)

        rng = check_random_state(random_state)
        optimizer = OptimizerInitializer(optimizer)()

        for layer in self.layers:
            optimizer.initialize_layer_additional_params(layer)
            layer.clear_accumulators()

        history = {"loss": [], "metrics": []}
        prev_loss = np.inf
        for i in range(n_epochs):
            loss, estart = 0.0, time()
            shuffle_dataset(X, Y, rng)
            batch_generator, nb = minibatch(X, batch_size)

            predictions, targets = [], []
            for j, b_ix in enumerate(batch_generator):
                bsize, bstart = len(b_ix), time()

                batch_loss = 0.0
                for ix in b_ix:
                    y_pred = self.evaluate(X[ix])
                    batch_loss += self.loss(Y[ix], y_pred)
                    self.backpropagate(Y[ix], X[ix], y_pred)

                    predictions.append(y_pred)
                    targets.append(Y[ix])

                self.update(optimizer, bsize, learning_rate)

                batch_loss /= bsize
                loss += batch_loss

                if verbose:
                    fstr = "\t[Batch {}/{}] Train loss: {:.3f} ({:.1f}s/batch)"
                    print(fstr.format(j + 1, nb, batch_loss, time() - bstart))

            loss /= nb
            history["loss"].append(loss)

            scores = {}
            if metrics is not None:
                scores = score(predictions, targets, metrics)
                history["metrics"].append(scores)

            if verbose:
                fstr = "[Epoch {}] Avg. loss: {:.3f}  Delta: {:.3f} ({:.2f}m/epoch)"
                msg = fstr.format(i + 1, loss, prev_loss - loss, (time() - estart) / 60.0)
                print(msg + _format_scores(scores))

            if callback is not None:
                callback(i + 1, loss, predictions, targets)
            prev_loss = loss

        self.history = history
        return history

    def test(self, X, Y, metrics=None, verbose=True):
        """
        Score the network on a held-out dataset.

        Parameters
        ----------
        X : list of :py:class:`ndarray <numpy.ndarray>` of shape `(n_in, 1)`
            The test inputs.
        Y : list of :py:class:`ndarray <numpy.ndarray>` of shape `(n_out, 1)`
            The test targets.
        metrics : list of str or None
            Classification metrics to compute. Default is None.
        verbose : bool
            Print the results. Default is True.

        Returns
        -------
        results : dict
            ``"loss"`` (the mean per-example loss) plus one entry per metric.
        """
        if len(X) != len(Y):
            fstr = "X and Y must have the same length, got {} and {}"
            raise ValueError(fstr.format(len(X), len(Y)))
        if len(X) == 0:
            raise ValueError("Cannot test on an empty dataset")
        if metrics is not None:
            metrics = check_metrics(metrics)

        Y = [_as_column_matrix(y) for y in Y]
        predictions = [self.predict(x) for x in X]
        loss = np.mean([self.loss(y, y_pred) for y, y_pred in zip(Y, predictions)])

        results = {"loss": loss}
        if metrics is not None:
            results.update(score(predictions, Y, metrics))

        if verbose:
            scores = {k: v for k, v in results.items() if k != "loss"}
            print("[Test] Avg. loss: {:.3f}".format(loss) + _format_scores(scores))
        return results


def _format_scores(scores):
    return "".join("  {}: {:.0f}%".format(k, v * 100) for k, v in scores.items())
