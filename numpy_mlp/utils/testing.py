import numpy as np


#######################################################################
#                             Assertions                              #
#######################################################################


def is_stochastic(X):
    """True if `X` contains probabilities that sum to 1 along the columns"""
    msg = "Array should be stochastic along the columns"
    assert len(X[X < 0]) == len(X[X > 1]) == 0, msg
    assert np.allclose(np.sum(X, axis=0), np.ones(X.shape[1])), msg
    return True


def is_one_hot(x):
    """Return True if array `x` is a binary array with a single 1 per column"""
    msg = "Matrix should be one-hot binary"
    assert np.array_equal(x, x.astype(bool)), msg
    assert np.allclose(np.sum(x, axis=0), np.ones(x.shape[1])), msg
    return True


#######################################################################
#                           Data Generators                           #
#######################################################################


def random_one_hot_matrix(n_examples, n_classes, rng=None):
    """Create a random one-hot matrix of shape (`n_classes`, `n_examples`)"""
    rng = np.random.default_rng(rng)
    X = np.eye(n_classes)
    X = X[rng.choice(n_classes, n_examples)]
    return X.T


def random_stochastic_matrix(n_examples, n_classes, rng=None):
    """Create a random stochastic matrix of shape (`n_classes`, `n_examples`)"""
    rng = np.random.default_rng(rng)
    X = rng.random((n_classes, n_examples))
    X /= X.sum(axis=0, keepdims=True)
    return X


def random_tensor(shape, standardize=False, rng=None):
    """
    Create a random real-valued tensor of shape `shape`. If `standardize` is
    True, ensure each row has mean 0 and std 1.
    """
    rng = np.random.default_rng(rng)
    offset = rng.integers(-300, 300, shape)
    X = rng.random(shape) + offset

    if standardize:
        eps = np.finfo(float).eps
        X = (X - X.mean(axis=1, keepdims=True)) / (X.std(axis=1, keepdims=True) + eps)
    return X


def random_samples(n_examples, n_dims, rng=None):
    """
    Create a list of `n_examples` column samples of shape (`n_dims`, 1) with
    entries drawn from ``Uniform(-1, 1)``.
    """
    rng = np.random.default_rng(rng)
    return [rng.uniform(-1, 1, size=(n_dims, 1)) for _ in range(n_examples)]
