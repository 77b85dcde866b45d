# flake8: noqa
import numpy as np
import pytest
from numpy.testing import assert_almost_equal

# for testing sigmoid and softmax
from scipy.special import expit, softmax

from numpy_mlp.activations import (
    ReLU,
    Tanh,
    Affine,
    Sigmoid,
    Softmax,
    Identity,
    LeakyReLU,
)
from numpy_mlp.initializers import ActivationInitializer
from numpy_mlp.utils.testing import random_tensor, is_stochastic


#######################################################################
#                          Activations                                #
#######################################################################


def test_sigmoid_activation(N=15):
    np.random.seed(12345)

    mine = Sigmoid()
    gold = expit

    i = 0
    while i < N:
        n_dims = np.random.randint(1, 100)
        z = random_tensor((n_dims, np.random.randint(1, 10)), standardize=True)
        assert_almost_equal(mine.fn(z), gold(z))
        assert_almost_equal(mine.grad(z), gold(z) * (1 - gold(z)))
        print("PASSED")
        i += 1


def test_tanh_activation(N=15):
    np.random.seed(12345)

    mine = Tanh()

    i = 0
    while i < N:
        z = random_tensor((np.random.randint(1, 50), 3), standardize=True)
        assert_almost_equal(mine.fn(z), np.tanh(z))
        assert_almost_equal(mine.grad(z), 1 / np.cosh(z) ** 2)
        print("PASSED")
        i += 1


def test_relu_activation():
    mine = ReLU()
    z = np.array([[-2.0, 0.0], [0.5, 3.0]])

    assert_almost_equal(mine.fn(z), np.array([[0.0, 0.0], [0.5, 3.0]]))
    assert_almost_equal(mine.grad(z), np.array([[0.0, 0.0], [1.0, 1.0]]))
    assert mine.grad(z).dtype == float


def test_leaky_relu_activation():
    mine = LeakyReLU(alpha=0.1)
    z = np.array([[-2.0], [4.0]])

    assert_almost_equal(mine.fn(z), np.array([[-0.2], [4.0]]))
    assert_almost_equal(mine.grad(z), np.array([[0.1], [1.0]]))

    # the input must not be modified in place
    assert_almost_equal(z, np.array([[-2.0], [4.0]]))


def test_affine_and_identity():
    z = random_tensor((4, 2), rng=1)

    assert_almost_equal(Affine(slope=2, intercept=-1).fn(z), 2 * z - 1)
    assert_almost_equal(Affine(slope=2, intercept=-1).grad(z), 2 * np.ones_like(z))
    assert_almost_equal(Identity().fn(z), z)
    assert_almost_equal(Identity().grad(z), np.ones_like(z))


def test_1D_input_becomes_column():
    out = Sigmoid()(np.zeros(3))
    assert out.shape == (3, 1)
    assert_almost_equal(out, 0.5 * np.ones((3, 1)))


def test_softmax_activation(N=15):
    np.random.seed(12345)

    mine = Softmax()

    i = 0
    while i < N:
        n_classes = np.random.randint(2, 20)
        n_ex = np.random.randint(1, 10)
        z = random_tensor((n_classes, n_ex))
        out = mine.fn(z)
        assert is_stochastic(out)
        assert_almost_equal(out, softmax(z, axis=0))
        print("PASSED")
        i += 1


def test_softmax_large_inputs():
    out = Softmax().fn(np.array([[1000.0], [1000.0]]))
    assert np.all(np.isfinite(out))
    assert_almost_equal(out, np.array([[0.5], [0.5]]))


def test_softmax_grad_single_column():
    z = np.array([[1.0], [2.0], [0.5]])
    s = softmax(z, axis=0)

    expected = -s * s
    expected[0, 0] = s[0, 0] * (1 - s[0, 0])

    mine = Softmax().grad(z)
    assert mine.shape == z.shape
    assert_almost_equal(mine, expected)


def test_softmax_grad_square_input():
    z = random_tensor((3, 3), standardize=True, rng=7)
    s = softmax(z, axis=0)

    mine = Softmax().grad(z)
    for i in range(3):
        for j in range(3):
            if i == j:
                assert_almost_equal(mine[i, j], s[i, j] * (1 - s[i, j]))
            else:
                assert_almost_equal(mine[i, j], -s[i, j] ** 2)


#######################################################################
#                     Activation initializer                          #
#######################################################################


def test_activation_initializer():
    assert isinstance(ActivationInitializer()(), Identity)
    assert isinstance(ActivationInitializer("ReLU")(), ReLU)
    assert isinstance(ActivationInitializer("sigmoid")(), Sigmoid)
    assert isinstance(ActivationInitializer("softmax")(), Softmax)

    tanh = Tanh()
    assert ActivationInitializer(tanh)() is tanh

    # __str__ representations round-trip
    for act in [LeakyReLU(alpha=0.2), Affine(slope=3.0, intercept=0.5)]:
        act2 = ActivationInitializer(str(act))()
        assert type(act2) is type(act)
        assert str(act2) == str(act)

    with pytest.raises(ValueError):
        ActivationInitializer("swish")()
    with pytest.raises(ValueError):
        ActivationInitializer(42)()


def test_softmax_grad_1D_input():
    z = np.array([1.0, 2.0, 0.5])
    assert_almost_equal(Softmax().grad(z), Softmax().grad(z.reshape(-1, 1)))
