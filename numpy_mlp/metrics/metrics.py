"""Classification metrics computed from network predictions and targets."""

import numpy as np

METRICS = ["accuracy", "precision", "recall", "f1-score"]


def class_index(m, threshold=0.5):
    """
    Return the class encoded by a single prediction or target column.

    Parameters
    ----------
    m : :py:class:`ndarray <numpy.ndarray>` of shape `(n_classes, 1)`
        A prediction or target. With more than one row, the class is the
        index of the largest entry (which, for a one-hot target, is the
        position of the 1). With a single row, the column is treated as a
        binary output: class 1 if the value is at least `threshold`, else 0.
    threshold : float
        Decision threshold for single-row columns. Default is 0.5.

    Returns
    -------
    ix : int
        The class index.
    """
    m = np.asarray(m).ravel()
    if m.size == 1:
        return int(m[0] >= threshold)
    return int(np.argmax(m))


def confusion_matrix(predictions, targets):
    """
    Tally predictions against targets.

    Parameters
    ----------
    predictions : list of :py:class:`ndarray <numpy.ndarray>` of shape `(n_classes, 1)`
        The network outputs.
    targets : list of :py:class:`ndarray <numpy.ndarray>` of shape `(n_classes, 1)`
        The expected outputs (one-hot, or scalar 0/1 for a single output).

    Returns
    -------
    C : :py:class:`ndarray <numpy.ndarray>` of shape `(n_classes, n_classes)`
        ``C[i, j]`` is the number of examples of class `i` predicted as class
        `j`.
    """  # noqa: E501
    if len(predictions) != len(targets):
        fstr = "predictions and targets must have the same length, got {} and {}"
        raise ValueError(fstr.format(len(predictions), len(targets)))
    if len(predictions) == 0:
        raise ValueError("Cannot compute a confusion matrix without examples")

    n_classes = max(np.asarray(predictions[0]).size, 2)
    C = np.zeros((n_classes, n_classes), dtype=int)
    for y_pred, y in zip(predictions, targets):
        C[class_index(y), class_index(y_pred)] += 1
    return C


class ClassConfusionMatrix(object):
    def __init__(self, true_positives, false_positives, false_negatives, true_negatives):
        """One-vs-rest counts for a single class."""
        self.true_positives = true_positives
        self.false_positives = false_positives
        self.false_negatives = false_negatives
        self.true_negatives = true_negatives

    @classmethod
    def from_confusion_matrix(cls, C, class_ix):
        """Collapse a multiclass confusion matrix onto class `class_ix`"""
        tp = C[class_ix, class_ix]
        col_sum = C[:, class_ix].sum()
        row_sum = C[class_ix, :].sum()
        return cls(
            true_positives=int(tp),
            false_positives=int(col_sum - tp),
            false_negatives=int(row_sum - tp),
            true_negatives=int(C.sum() + tp - col_sum - row_sum),
        )

    def __repr__(self):
        fstr = "ClassConfusionMatrix(tp={}, fp={}, fn={}, tn={})"
        return fstr.format(
            self.true_positives,
            self.false_positives,
            self.false_negatives,
            self.true_negatives,
        )

    def precision(self):
        denom = self.true_positives + self.false_positives
        return 0.0 if denom == 0 else self.true_positives / denom

    def recall(self):
        denom = self.true_positives + self.false_negatives
        return 0.0 if denom == 0 else self.true_positives / denom

    def f1_score(self):
        p, r = self.precision(), self.recall()
        return 0.0 if p + r == 0 else 2 * p * r / (p + r)


def class_confusion_matrices(C):
    """Return a :class:`ClassConfusionMatrix` for every class in `C`"""
    return [ClassConfusionMatrix.from_confusion_matrix(C, i) for i in range(C.shape[0])]


def accuracy(C):
    """Fraction of examples on the diagonal of confusion matrix `C`"""
    return np.trace(C) / C.sum()


def check_metrics(metrics=None):
    """
    Lowercase and validate a list of metric names.

    Parameters
    ----------
    metrics : list of str or None
        Names from :data:`METRICS`, in any case. If None, return all of them.

    Returns
    -------
    metrics : list of str
        The lowercased names.
    """
    metrics = list(METRICS) if metrics is None else [m.lower() for m in metrics]
    unknown = [m for m in metrics if m not in METRICS]
    if len(unknown) > 0:
        raise ValueError("Unknown metric(s): {}".format(unknown))
    return metrics


def score(predictions, targets, metrics=None):
    """
    Compute a set of classification metrics.

    Notes
    -----
    Precision, recall, and F1 are macro-averaged: computed one-vs-rest for
    each class and then averaged with equal class weights.

    Parameters
    ----------
    predictions : list of :py:class:`ndarray <numpy.ndarray>`
        The network outputs.
    targets : list of :py:class:`ndarray <numpy.ndarray>`
        The expected outputs.
    metrics : list of str or None
        Any of ``{"accuracy", "precision", "recall", "f1-score"}`` (case
        insensitive). If None, compute all of them. Default is None.

    Returns
    -------
    scores : dict
        Maps each requested metric name (lowercased) to its value in [0, 1].
    """
    metrics = check_metrics(metrics)

    C = confusion_matrix(predictions, targets)
    per_class = class_confusion_matrices(C)

    scores = {}
    for m in metrics:
        if m == "accuracy":
            scores[m] = accuracy(C)
        elif m == "precision":
            scores[m] = np.mean([cm.precision() for cm in per_class])
        elif m == "recall":
            scores[m] = np.mean([cm.recall() for cm in per_class])
        elif m == "f1-score":
            scores[m] = np.mean([cm.f1_score() for cm in per_class])
    return scores
