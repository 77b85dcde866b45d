import numpy as np
import pandas as pd


def to_columns(X):
    """
    Split a design matrix into a list of column samples.

    Parameters
    ----------
    X : :py:class:`ndarray <numpy.ndarray>` of shape `(N, d)` or `(N,)`
        One example per row. A 1D array is treated as `N` scalar examples.

    Returns
    -------
    samples : list of `N` :py:class:`ndarray <numpy.ndarray>` of shape `(d, 1)`
        The examples, each as a column matrix.
    """
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if X.ndim != 2:
        raise ValueError("X must be 1D or 2D, got shape {}".format(X.shape))
    return [x.reshape(-1, 1) for x in X]


class OneHotEncoder:
    def __init__(self):
        """
        Convert between category labels and their one-hot column
        representations.
        """
        self._is_fit = False
        self.hyperparameters = {}
        self.parameters = {"categories": None}

    def __call__(self, labels):
        return self.transform(labels)

    def fit(self, categories):
        """
        Create mappings between rows and category labels.

        Parameters
        ----------
        categories : list of length `C`
            List of the unique category labels for the items to encode.
        """
        self.parameters["categories"] = categories
        self.cat2idx = {c: i for i, c in enumerate(categories)}
        self.idx2cat = {i: c for i, c in enumerate(categories)}
        self._is_fit = True

    def transform(self, labels, categories=None):
        """
        Convert a list of labels into a list of one-hot column vectors.

        Parameters
        ----------
        labels : list of length `N`
            A list of category labels.
        categories : list of length `C`
            List of the unique category labels for the items to encode. If
            None and the encoder has not been fit, the sorted unique values of
            `labels` are used. Default is None.

        Returns
        -------
        Y : list of `N` :py:class:`ndarray <numpy.ndarray>` of shape `(C, 1)`
            The one-hot encoded labels, each with a single 1 in the row
            corresponding to the respective label.
        """
        if not self._is_fit:
            categories = sorted(set(labels)) if categories is None else categories
            self.fit(categories)

        unknown = list(set(labels) - set(self.cat2idx.keys()))
        if len(unknown) > 0:
            raise ValueError("Unrecognized label(s): {}".format(unknown))

        C = len(self.cat2idx)
        Y = []
        for label in labels:
            y = np.zeros((C, 1))
            y[self.cat2idx[label], 0] = 1
            Y.append(y)
        return Y

    def inverse_transform(self, Y):
        """
        Convert one-hot columns back into the corresponding labels

        Parameters
        ----------
        Y : list of :py:class:`ndarray <numpy.ndarray>` of shape `(C, 1)`
            One-hot encoded labels (or predicted class scores; the largest
            entry of each column wins).

        Returns
        -------
        labels : list of length `N`
            The list of category labels
        """
        C = len(self.cat2idx)
        labels = []
        for y in Y:
            y = np.asarray(y).ravel()
            if y.size != C:
                raise ValueError("Expected columns with {} entries, got {}".format(C, y.size))
            labels.append(self.idx2cat[int(np.argmax(y))])
        return labels


def read_labeled_csv(path, label_col=0, n_classes=None, scale=255.0, header=0):
    """
    Read a CSV file of labelled examples, e.g. MNIST in CSV form.

    Parameters
    ----------
    path : str
        Path to the CSV file.
    label_col : int
        Position of the integer class label column. Default is 0.
    n_classes : int or None
        The number of classes. If None, use ``max(label) + 1``. Default is
        None.
    scale : float
        Every feature is divided by `scale`. Default is 255, which maps 8-bit
        pixel intensities onto [0, 1].
    header : int or None
        Row number of the header, passed to :func:`pandas.read_csv`. Use None
        for files without a header. Default is 0.

    Returns
    -------
    X : list of :py:class:`ndarray <numpy.ndarray>` of shape `(n_features, 1)`
        The scaled feature columns.
    Y : list of :py:class:`ndarray <numpy.ndarray>` of shape `(n_classes, 1)`
        The one-hot encoded labels.
    """
    df = pd.read_csv(path, header=header)
    labels = df.iloc[:, label_col].to_numpy().astype(int)
    features = df.drop(columns=df.columns[label_col]).to_numpy(dtype=float)

    n_classes = int(labels.max()) + 1 if n_classes is None else n_classes
    if labels.min() < 0 or labels.max() >= n_classes:
        fstr = "Labels must lie in [0, {}), got range [{}, {}]"
        raise ValueError(fstr.format(n_classes, labels.min(), labels.max()))

    encoder = OneHotEncoder()
    encoder.fit(list(range(n_classes)))
    return to_columns(features / scale), encoder.transform(labels.tolist())
