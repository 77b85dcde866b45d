# flake8: noqa
import numpy as np
import pytest
from numpy.testing import assert_almost_equal, assert_array_equal

from numpy_mlp.layers import FullyConnected
from numpy_mlp.optimizers import (
    SGD,
    Adam,
    AdaGrad,
    RMSProp,
    AdamState,
    AdaGradState,
    RMSPropState,
    MomentumState,
)
from numpy_mlp.initializers import OptimizerInitializer
from numpy_mlp.utils import MissingOptimizerStateError
from numpy_mlp.utils.testing import random_tensor


def _layer_with_grads(seed=0, n_in=3, n_out=2):
    """A layer whose accumulators hold a known (summed) gradient"""
    L = FullyConnected(n_in, n_out, random_state=seed)
    L.gradients["W"] = random_tensor((n_out, n_in), standardize=True, rng=seed + 1)
    L.gradients["b"] = random_tensor((n_out, 1), rng=seed + 2) / 100
    return L


def test_rmsprop_initialize():
    L = FullyConnected(3, 2, random_state=0)
    RMSProp().initialize_layer_additional_params(L)

    S = L.optimizer_state
    assert isinstance(S, RMSPropState)
    assert_array_equal(S.weights_moving_avg, np.zeros((2, 3)))
    assert_array_equal(S.biases_moving_avg, np.zeros((2, 1)))

    # re-initializing keeps the existing averages
    S.weights_moving_avg += 1
    RMSProp().initialize_layer_additional_params(L)
    assert L.optimizer_state is S
    assert_array_equal(L.optimizer_state.weights_moving_avg, np.ones((2, 3)))


def test_rmsprop_update(N=15):
    np.random.seed(12345)

    i = 0
    while i < N:
        decay, eps = np.random.uniform(0.5, 0.99), 1e-8
        lr = np.random.uniform(0.001, 0.5)
        batch_size = np.random.randint(1, 32)

        L = _layer_with_grads(seed=i)
        W0, b0 = L.weights.copy(), L.biases.copy()
        gW, gb = L.errors / batch_size, L.deltas / batch_size

        opt = RMSProp(decay=decay, eps=eps)
        opt.initialize_layer_additional_params(L)
        opt.update_params(batch_size, L, lr)

        ma_W = (1 - decay) * gW ** 2
        ma_b = (1 - decay) * gb ** 2
        assert_almost_equal(L.optimizer_state.weights_moving_avg, ma_W)
        assert_almost_equal(L.optimizer_state.biases_moving_avg, ma_b)
        assert_almost_equal(L.weights, W0 - lr * gW / np.sqrt(ma_W + eps))
        assert_almost_equal(L.biases, b0 - lr * gb / np.sqrt(ma_b + eps))

        # second step decays the first average
        opt.update_params(batch_size, L, lr)
        assert_almost_equal(
            L.optimizer_state.weights_moving_avg, decay * ma_W + (1 - decay) * gW ** 2
        )
        print("PASSED")
        i += 1


def test_update_without_state_raises():
    for opt in [RMSProp(), AdaGrad(), Adam(), SGD(momentum=0.9)]:
        L = _layer_with_grads()
        W0 = L.weights.copy()
        with pytest.raises(MissingOptimizerStateError):
            opt.update_params(1, L, 0.1)
        assert_array_equal(L.weights, W0)


def test_state_of_another_optimizer_is_not_reused():
    L = _layer_with_grads()
    Adam().initialize_layer_additional_params(L)
    with pytest.raises(MissingOptimizerStateError):
        RMSProp().update_params(1, L, 0.1)

    RMSProp().initialize_layer_additional_params(L)
    assert isinstance(L.optimizer_state, RMSPropState)


def test_invalid_batch_size():
    L = _layer_with_grads()
    opt = RMSProp()
    opt.initialize_layer_additional_params(L)
    with pytest.raises(ValueError):
        opt.update_params(0, L, 0.1)


def test_frozen_layer_rejects_update():
    L = _layer_with_grads()
    L.freeze()
    opt = SGD()
    opt.initialize_layer_additional_params(L)
    with pytest.raises(AssertionError):
        opt.update_params(1, L, 0.1)


def test_sgd_update():
    L = _layer_with_grads(seed=3)
    W0, b0 = L.weights.copy(), L.biases.copy()

    opt = SGD()
    opt.initialize_layer_additional_params(L)
    assert L.optimizer_state is None

    opt.update_params(4, L, 0.1)
    assert_almost_equal(L.weights, W0 - 0.1 * L.errors / 4)
    assert_almost_equal(L.biases, b0 - 0.1 * L.deltas / 4)


def test_sgd_momentum_update():
    L = _layer_with_grads(seed=4)
    W0 = L.weights.copy()
    gW = L.errors / 2

    opt = SGD(momentum=0.5)
    opt.initialize_layer_additional_params(L)
    assert isinstance(L.optimizer_state, MomentumState)

    opt.update_params(2, L, 0.1)
    step1 = 0.1 * gW
    assert_almost_equal(L.weights, W0 - step1)

    opt.update_params(2, L, 0.1)
    step2 = 0.5 * step1 + 0.1 * gW
    assert_almost_equal(L.weights, W0 - step1 - step2)


def test_adagrad_update():
    L = _layer_with_grads(seed=5)
    W0 = L.weights.copy()
    gW = L.errors

    opt = AdaGrad()
    opt.initialize_layer_additional_params(L)
    assert isinstance(L.optimizer_state, AdaGradState)

    opt.update_params(1, L, 0.01)
    assert_almost_equal(L.weights, W0 - 0.01 * gW / np.sqrt(gW ** 2 + 1e-8))

    opt.update_params(1, L, 0.01)
    assert_almost_equal(L.optimizer_state.weights_cache, 2 * gW ** 2)


def test_adam_update():
    L = _layer_with_grads(seed=6)
    W0 = L.weights.copy()
    gW = L.errors

    opt = Adam(decay1=0.9, decay2=0.999)
    opt.initialize_layer_additional_params(L)
    assert isinstance(L.optimizer_state, AdamState)

    # after bias correction the first step is lr * g / sqrt(g^2 + eps)
    opt.update_params(1, L, 0.01)
    assert L.optimizer_state.t == 1
    assert_almost_equal(L.weights, W0 - 0.01 * gW / np.sqrt(gW ** 2 + 1e-8))


def test_optimizer_initializer():
    assert isinstance(OptimizerInitializer()(), RMSProp)

    opt = OptimizerInitializer("RMSProp(decay=0.95, eps=1e-06)")()
    assert isinstance(opt, RMSProp)
    assert opt.hyperparameters["decay"] == 0.95
    assert opt.hyperparameters["eps"] == 1e-06

    for o in [SGD(momentum=0.3), AdaGrad(eps=1e-5), Adam(decay1=0.8)]:
        o2 = OptimizerInitializer(str(o))()
        assert type(o2) is type(o)
        assert o2.hyperparameters == o.hyperparameters

    o2 = OptimizerInitializer({"hyperparameters": Adam(decay2=0.99).hyperparameters})()
    assert isinstance(o2, Adam)
    assert o2.hyperparameters["decay2"] == 0.99

    sgd = SGD()
    assert OptimizerInitializer(sgd)() is sgd

    with pytest.raises(NotImplementedError):
        OptimizerInitializer("nesterov(lr=0.1)")()
    with pytest.raises(ValueError):
        OptimizerInitializer({"lr": 0.1})()
    with pytest.raises(ValueError):
        OptimizerInitializer(0.1)()


def test_missing_state_message_is_unquoted():
    L = _layer_with_grads()
    with pytest.raises(MissingOptimizerStateError) as excinfo:
        RMSProp().update_params(1, L, 0.1)

    msg = str(excinfo.value)
    assert msg.startswith("RMSProp(")
    assert str(MissingOptimizerStateError("no state")) == "no state"
    assert "initialize_layer_additional_params" in msg
