# flake8: noqa
import numpy as np
import pytest
from numpy.testing import assert_almost_equal

from sklearn.metrics import log_loss, mean_squared_error

from numpy_mlp.losses import (
    CrossEntropy,
    SquaredError,
    MeanSquaredError,
    BinaryCrossEntropy,
)
from numpy_mlp.initializers import LossInitializer
from numpy_mlp.utils import ShapeMismatchError
from numpy_mlp.utils.testing import (
    random_tensor,
    random_one_hot_matrix,
    random_stochastic_matrix,
)


def test_squared_error(N=15):
    np.random.seed(12345)

    mine = SquaredError()
    gold = (
        lambda y, y_pred: mean_squared_error(y, y_pred)
        * y_pred.shape[0]
        * y_pred.shape[1]
        * 0.5
    )

    # ensure we get 0 when the two arrays are equal
    y = y_pred = random_tensor((5, 3))
    assert_almost_equal(mine.loss(y, y_pred), 0)

    i = 1
    while i < N:
        n_dims = np.random.randint(1, 100)
        n_examples = np.random.randint(1, 50)
        y = random_tensor((n_dims, n_examples))
        y_pred = random_tensor((n_dims, n_examples))
        assert_almost_equal(mine.loss(y, y_pred), gold(y, y_pred), decimal=5)
        assert_almost_equal(mine.grad(y, y_pred), y_pred - y)
        print("PASSED")
        i += 1


def test_mean_squared_error(N=15):
    np.random.seed(12345)

    mine = MeanSquaredError()

    i = 0
    while i < N:
        n_dims = np.random.randint(1, 20)
        n_examples = np.random.randint(1, 20)
        y = random_tensor((n_dims, n_examples), standardize=True)
        y_pred = random_tensor((n_dims, n_examples), standardize=True)

        # sklearn averages over every entry; we average over examples only
        gold = mean_squared_error(y, y_pred) * n_dims
        assert_almost_equal(mine.loss(y, y_pred), gold)
        assert_almost_equal(mine.grad(y, y_pred), y_pred - y)
        print("PASSED")
        i += 1


def test_cross_entropy(N=15):
    np.random.seed(12345)

    mine = CrossEntropy()

    i = 0
    while i < N:
        n_classes = np.random.randint(2, 20)
        n_examples = np.random.randint(1, 50)
        y = random_one_hot_matrix(n_examples, n_classes, rng=i)
        y_pred = random_stochastic_matrix(n_examples, n_classes, rng=i + 100)

        # keep every probability well away from 0 so the 1e-9 offset is negligible
        y_pred = 0.9 * y_pred + 0.1 / n_classes

        gold = log_loss(
            y.argmax(axis=0),
            y_pred.T,
            normalize=False,
            labels=np.arange(n_classes),
        )
        assert_almost_equal(mine.loss(y, y_pred), gold, decimal=4)
        print("PASSED")
        i += 1


def test_cross_entropy_grad_sign():
    y = np.array([[0.0], [1.0], [0.0]])
    y_pred = np.array([[0.2], [0.5], [0.3]])

    assert_almost_equal(CrossEntropy().grad(y, y_pred), y - y_pred)


def test_binary_cross_entropy(N=15):
    np.random.seed(12345)

    mine = BinaryCrossEntropy()

    i = 0
    while i < N:
        n_dims = np.random.randint(1, 5)
        n_examples = np.random.randint(1, 20)
        y = (np.random.rand(n_dims, n_examples) > 0.5).astype(float)
        p = np.random.uniform(0.05, 0.95, size=(n_dims, n_examples))

        gold = log_loss(y.ravel().astype(int), p.ravel(), labels=[0, 1])
        assert_almost_equal(mine.loss(y, p), gold)
        assert_almost_equal(mine.grad(y, p), -(y / p) + (1 - y) / (1 - p))
        print("PASSED")
        i += 1


def test_binary_cross_entropy_is_finite_at_bounds():
    y = np.array([[1.0, 0.0]])
    p = np.array([[0.0, 1.0]])

    mine = BinaryCrossEntropy()
    assert np.isfinite(mine.loss(y, p))
    assert np.all(np.isfinite(mine.grad(y, p)))


@pytest.mark.parametrize(
    "loss", [SquaredError(), MeanSquaredError(), CrossEntropy(), BinaryCrossEntropy()]
)
def test_loss_shape_mismatch(loss):
    y = np.zeros((3, 1))
    y_pred = np.zeros((2, 1))

    with pytest.raises(ShapeMismatchError):
        loss.loss(y, y_pred)
    with pytest.raises(ShapeMismatchError):
        loss.grad(y, y_pred)


def test_loss_initializer():
    assert isinstance(LossInitializer("squared_error")(), SquaredError)
    assert isinstance(LossInitializer("L2")(), SquaredError)
    assert isinstance(LossInitializer("MSE")(), MeanSquaredError)
    assert isinstance(LossInitializer("cross entropy")(), CrossEntropy)
    assert isinstance(LossInitializer("BinaryCrossEntropy(eps=1e-07)")(), BinaryCrossEntropy)

    loss = CrossEntropy()
    assert LossInitializer(loss)() is loss

    with pytest.raises(ValueError):
        LossInitializer("hinge")()
    with pytest.raises(ValueError):
        LossInitializer(None)()
