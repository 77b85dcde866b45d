# flake8: noqa
import numpy as np
import pytest
from numpy.testing import assert_almost_equal

torch = pytest.importorskip("torch")

from numpy_mlp.models import MLP
from numpy_mlp.layers import FullyConnected
from numpy_mlp.activations import Sigmoid, Tanh, ReLU, Affine
from numpy_mlp.utils.testing import random_tensor

from .nn_torch_models import TorchMLP, torch_gradient_generator


def err_fmt(params, golds, ix):
    mine, label = params[ix]
    err_msg = "-" * 25 + " DEBUG " + "-" * 25 + "\n"
    err_msg += "Mine [{}]:\n{}\n\nTheirs [{}]:\n{}".format(
        label, mine, label, golds[label]
    )
    err_msg += "\n" + "-" * 23 + " END DEBUG " + "-" * 23
    return err_msg


def test_activation_grads(N=15):
    np.random.seed(12345)

    acts = [
        (Sigmoid(), torch.sigmoid, "Sigmoid"),
        (Tanh(), torch.tanh, "Tanh"),
        (ReLU(), torch.relu, "ReLU"),
    ]

    i = 0
    while i < N:
        mine, torch_fn, name = acts[np.random.randint(0, len(acts))]
        z = random_tensor((np.random.randint(1, 20), np.random.randint(1, 5)), standardize=True)
        gold = torch_gradient_generator(torch_fn)

        assert_almost_equal(mine.grad(z), gold(z))
        print("PASSED {}".format(name))
        i += 1


def test_MLP_grads(N=15):
    np.random.seed(12345)

    acts = [
        (Tanh(), torch.tanh, "Tanh"),
        (Sigmoid(), torch.sigmoid, "Sigmoid"),
        (ReLU(), torch.relu, "ReLU"),
        (Affine(), lambda x: x, "Affine"),
    ]

    i = 1
    while i < N + 1:
        n_ex = np.random.randint(1, 10)
        dims = [np.random.randint(1, 20) for _ in range(np.random.randint(2, 5))]

        layers, torch_acts = [], []
        for ix, (n_in, n_out) in enumerate(zip(dims[:-1], dims[1:])):
            act_fn, torch_fn, _ = acts[np.random.randint(0, len(acts))]
            layers.append(
                FullyConnected(n_in, n_out, act_fn=act_fn, init="glorot_uniform", random_state=i + ix)
            )
            torch_acts.append(torch_fn)

        model = MLP(layers, loss="squared_error")
        gold_mod = TorchMLP(layers, torch_acts)

        X = random_tensor((dims[0], n_ex), standardize=True)
        Y = random_tensor((dims[-1], n_ex), standardize=True)

        # one example at a time: the accumulators hold the summed gradient
        y_preds = []
        for j in range(n_ex):
            x, y = X[:, [j]], Y[:, [j]]
            y_pred = model.evaluate(x)
            model.backpropagate(y, x, y_pred)
            y_preds.append(y_pred)

        golds = gold_mod.extract_grads(X, Y)

        params = [(np.hstack(y_preds), "y")]
        for ix, layer in enumerate(model.layers):
            params.append((layer.errors, "dLdW{}".format(ix)))
            params.append((layer.deltas, "dLdB{}".format(ix)))

        print("\nTrial {}".format(i))
        for ix, (mine, label) in enumerate(params):
            assert_almost_equal(
                mine, golds[label], err_msg=err_fmt(params, golds, ix), decimal=5
            )
            print("\tPASSED {}".format(label))
        i += 1
