import numpy as np

#######################################################################
#                             Exceptions                              #
#######################################################################


class ShapeMismatchError(ValueError):
    """Raised when two matrices disagree on a dimension the math requires."""

    pass


class MissingOptimizerStateError(KeyError):
    """
    Raised when an optimizer is asked to update a layer whose optimizer state
    was never initialized via ``initialize_layer_additional_params``.
    """

    def __str__(self):
        # KeyError quotes its message; print it as written
        return str(self.args[0]) if self.args else ""


def check_shape(arr, shape, name):
    """
    Raise a :class:`ShapeMismatchError` if `arr` does not have shape `shape`.

    Parameters
    ----------
    arr : :py:class:`ndarray <numpy.ndarray>`
        The array to check.
    shape : tuple
        The expected shape.
    name : str
        The name of `arr` to use in the error message.
    """
    if arr.shape != tuple(shape):
        fstr = "`{}` should have shape {}, but got {}"
        raise ShapeMismatchError(fstr.format(name, tuple(shape), arr.shape))


#######################################################################
#                           Training Utils                            #
#######################################################################


def check_random_state(random_state=None):
    """
    Turn `random_state` into a :class:`numpy.random.Generator`.

    Parameters
    ----------
    random_state : int, :class:`numpy.random.Generator`, or None
        If a Generator, it is returned unchanged. Otherwise it is used to seed
        a new Generator. If None, the Generator is seeded from fresh OS
        entropy. Default is None.

    Returns
    -------
    rng : :class:`numpy.random.Generator`
        The random source.
    """
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


def shuffle_dataset(X, Y, rng):
    """
    Jointly shuffle two equal-length lists in place.

    Notes
    -----
    This is a single Fisher-Yates pass in which every swap is applied to both
    `X` and `Y`, so ``(X[i], Y[i])`` pairs are preserved.

    Parameters
    ----------
    X : list of length `N`
        The inputs. Modified in place.
    Y : list of length `N`
        The targets. Modified in place.
    rng : :class:`numpy.random.Generator`
        The random source used to draw swap indices.
    """
    if len(X) != len(Y):
        fstr = "X and Y must have the same length, got {} and {}"
        raise ValueError(fstr.format(len(X), len(Y)))

    for i in range(len(X) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        X[i], X[j] = X[j], X[i]
        Y[i], Y[j] = Y[j], Y[i]


def minibatch(X, batchsize=256):
    """
    Compute the minibatch indices for a training dataset.

    Parameters
    ----------
    X : sequence of length `N`
        The dataset to divide into minibatches.
    batchsize : int
        The desired size of each minibatch. Note, however, that if ``len(X) %
        batchsize > 0`` then the final batch will contain fewer than batchsize
        entries. Default is 256.

    Returns
    -------
    mb_generator : generator
        A generator which yields the contiguous indices into X for each batch
    n_batches: int
        The number of batches
    """
    if batchsize < 1:
        raise ValueError("batchsize must be >= 1, got {}".format(batchsize))

    N = len(X)
    ix = np.arange(N)
    n_batches = int(np.ceil(N / batchsize))

    def mb_generator():
        for i in range(n_batches):
            yield ix[i * batchsize : (i + 1) * batchsize]

    return mb_generator(), n_batches


#######################################################################
#                        Weight Initialization                        #
#######################################################################


def calc_fan(weight_shape):
    """
    Compute the fan-in and fan-out for a weight matrix.

    Parameters
    ----------
    weight_shape : tuple of `(n_out, n_in)`
        The dimensions of the weight matrix.

    Returns
    -------
    fan_in : int
        The number of input units in the weight matrix
    fan_out : int
        The number of output units in the weight matrix
    """
    if len(weight_shape) != 2:
        raise ValueError("Unrecognized weight dimension: {}".format(weight_shape))
    fan_out, fan_in = weight_shape
    return fan_in, fan_out


def uniform(weight_shape, rng):
    """
    Initialize network weights with draws from ``Uniform(-1, 1)``.

    Parameters
    ----------
    weight_shape : tuple
        The dimensions of the weight matrix.
    rng : :class:`numpy.random.Generator`
        The random source.

    Returns
    -------
    W : :py:class:`ndarray <numpy.ndarray>` of shape `weight_shape`
        The initialized weights.
    """
    return rng.uniform(-1.0, 1.0, size=weight_shape)


def std_normal(weight_shape, rng):
    """Initialize network weights with draws from a standard normal."""
    return rng.standard_normal(size=weight_shape)


def he_uniform(weight_shape, rng):
    """
    Initializes network weights `W` with using the He uniform initialization
    strategy.

    Notes
    -----
    The He uniform initialization strategy initializes the weights in `W`
    using draws from Uniform(-b, b) where

    .. math::

        b = \\sqrt{\\frac{6}{\\text{fan_in}}}

    Developed for deep networks with ReLU nonlinearities.

    Parameters
    ----------
    weight_shape : tuple
        The dimensions of the weight matrix.
    rng : :class:`numpy.random.Generator`
        The random source.

    Returns
    -------
    W : :py:class:`ndarray <numpy.ndarray>` of shape `weight_shape`
        The initialized weights.
    """
    fan_in, fan_out = calc_fan(weight_shape)
    b = np.sqrt(6 / fan_in)
    return rng.uniform(-b, b, size=weight_shape)


def he_normal(weight_shape, rng):
    """
    Initialize network weights `W` using the He normal initialization strategy.

    Notes
    -----
    The He normal initialization strategy initializes the weights in `W` using
    draws from TruncatedNormal(0, b) where the variance `b` is

    .. math::

        b = \\frac{2}{\\text{fan_in}}

    Parameters
    ----------
    weight_shape : tuple
        The dimensions of the weight matrix.
    rng : :class:`numpy.random.Generator`
        The random source.

    Returns
    -------
    W : :py:class:`ndarray <numpy.ndarray>` of shape `weight_shape`
        The initialized weights.
    """
    fan_in, fan_out = calc_fan(weight_shape)
    std = np.sqrt(2 / fan_in)
    return truncated_normal(0, std, weight_shape, rng)


def glorot_uniform(weight_shape, rng, gain=1.0):
    """
    Initialize network weights `W` using the Glorot uniform initialization
    strategy.

    Notes
    -----
    The Glorot uniform initialization strategy initializes weights using draws
    from ``Uniform(-b, b)`` where:

    .. math::

        b = \\text{gain} \\sqrt{\\frac{6}{\\text{fan_in} + \\text{fan_out}}}

    This initialization strategy was primarily developed for deep networks with
    tanh and logistic sigmoid nonlinearities.

    Parameters
    ----------
    weight_shape : tuple
        The dimensions of the weight matrix.
    rng : :class:`numpy.random.Generator`
        The random source.
    gain : float
        Scaling factor for the bound. Default is 1.

    Returns
    -------
    W : :py:class:`ndarray <numpy.ndarray>` of shape `weight_shape`
        The initialized weights.
    """
    fan_in, fan_out = calc_fan(weight_shape)
    b = gain * np.sqrt(6 / (fan_in + fan_out))
    return rng.uniform(-b, b, size=weight_shape)


def glorot_normal(weight_shape, rng, gain=1.0):
    """
    Initialize network weights `W` using the Glorot normal initialization strategy.

    Notes
    -----
    The Glorot normal initializaiton initializes weights with draws from
    TruncatedNormal(0, b) where the variance `b` is

    .. math::

        b = \\frac{2 \\text{gain}^2}{\\text{fan_in} + \\text{fan_out}}

    Parameters
    ----------
    weight_shape : tuple
        The dimensions of the weight matrix.
    rng : :class:`numpy.random.Generator`
        The random source.
    gain : float
        Scaling factor for the standard deviation. Default is 1.

    Returns
    -------
    W : :py:class:`ndarray <numpy.ndarray>` of shape `weight_shape`
        The initialized weights.
    """
    fan_in, fan_out = calc_fan(weight_shape)
    std = gain * np.sqrt(2 / (fan_in + fan_out))
    return truncated_normal(0, std, weight_shape, rng)


def truncated_normal(mean, std, out_shape, rng):
    """
    Generate draws from a truncated normal distribution via rejection sampling.

    Notes
    -----
    The rejection sampling regimen draws samples from a normal distribution
    with mean `mean` and standard deviation `std`, and resamples any values
    more than two standard deviations from `mean`.

    Parameters
    ----------
    mean : float
        The mean/center of the distribution
    std : float
        Standard deviation (spread or "width") of the distribution.
    out_shape : int or tuple of ints
        Output shape.
    rng : :class:`numpy.random.Generator`
        The random source.

    Returns
    -------
    samples : :py:class:`ndarray <numpy.ndarray>` of shape `out_shape`
        Samples from the truncated normal distribution parameterized by `mean`
        and `std`.
    """
    samples = rng.normal(loc=mean, scale=std, size=out_shape)
    reject = np.logical_or(samples >= mean + 2 * std, samples <= mean - 2 * std)
    while any(reject.flatten()):
        resamples = rng.normal(loc=mean, scale=std, size=reject.sum())
        samples[reject] = resamples
        reject = np.logical_or(samples >= mean + 2 * std, samples <= mean - 2 * std)
    return samples
