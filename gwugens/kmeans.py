"""K-means clustering and k-nearest-neighbour classification."""

from __future__ import annotations

import math
import random
import sys
from collections.abc import Sequence

_DBL_MAX = sys.float_info.max


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the squared Euclidean distance between two equal-length points."""
    return sum((x - y) * (x - y) for x, y in zip(a, b))


def sort_by_distance(distances: Sequence[float]) -> list[int]:
    """Return the indices of ``distances`` ordered from nearest to farthest.

    Equal distances keep their original relative order.
    """
    return sorted(range(len(distances)), key=distances.__getitem__)


def _squared_distance_reversed(point: Sequence[float], centroid: Sequence[float]) -> float:
    distance = 0.0
    for j in reversed(range(len(point))):
        diff = point[j] - centroid[j]
        distance += diff * diff
    return distance


def kmeans(
    data: Sequence[Sequence[float]],
    k: int,
    theta: float = 1e-4,
    centroids: list[list[float]] | None = None,
    initial_centroids: bool = False,
) -> list[int]:
    """Cluster ``data`` into ``k`` groups and return the label of each point.

    ``centroids`` is updated in place with the final cluster centres. Unless
    ``initial_centroids`` is true, it is first seeded with evenly spaced rows
    of ``data``. Iteration stops once the total squared error changes by no
    more than ``theta``.
    """
    if k < 1:
        raise ValueError("k must be at least 1")
    if not data:
        raise ValueError("data must not be empty")
    dims = len(data[0])
    if centroids is None:
        if initial_centroids:
            raise ValueError("initial centroids requested but none given")
        centroids = [[0.0] * dims for _ in range(k)]
    if len(centroids) < k:
        raise ValueError("not enough centroid rows for k clusters")

    if not initial_centroids:
        step = len(data) // k
        for i in range(k):
            centroids[i][:] = [float(v) for v in data[i * step]]

    labels = [0] * len(data)
    error = _DBL_MAX
    while True:
        old_error, error = error, 0.0
        counts = [0] * k
        sums = [[0.0] * dims for _ in range(k)]
        for h, point in enumerate(data):
            min_distance = _DBL_MAX
            for i in range(k):
                distance = _squared_distance_reversed(point, centroids[i])
                if distance < min_distance:
                    labels[h] = i
                    min_distance = distance
            target = sums[labels[h]]
            for j in range(dims):
                target[j] += point[j]
            counts[labels[h]] += 1
            error += min_distance
        for i in range(k):
            count = counts[i]
            centroids[i][:] = [s / count if count else s for s in sums[i]]
        if not abs(error - old_error) > theta:
            return labels


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def kmeans_refine(
    data: Sequence[Sequence[float]],
    iterations: int,
    n_points: int,
    n_labels: int,
    rng: random.Random | None = None,
) -> list[list[float]]:
    """Pick good starting centroids by clustering random subsamples.

    Runs k-means ``iterations`` times on ``n_points`` rows drawn at random
    from ``data`` and returns the ``n_labels`` centroids of the run whose
    subsample error was smallest.
    """
    if iterations < 1:
        raise ValueError("iterations must be at least 1")
    if n_points < 1:
        raise ValueError("n_points must be at least 1")
    if n_labels < 1:
        raise ValueError("n_labels must be at least 1")
    if not data:
        raise ValueError("data must not be empty")
    rng = rng if rng is not None else random.Random()
    dims = len(data[0])
    last = len(data) - 1

    best: list[list[float]] | None = None
    best_distance = math.inf
    for _ in range(iterations):
        sample = [list(data[_round_half_up(rng.random() * last)]) for _ in range(n_points)]
        centroids = [[0.0] * dims for _ in range(n_labels)]
        labels = kmeans(sample, n_labels, 1e-4, centroids)
        distance = sum(
            euclidean_distance(point, centroids[label]) for point, label in zip(sample, labels)
        )
        if best is None or distance < best_distance:
            best, best_distance = centroids, distance
    return best


def knn_classify(
    data: Sequence[Sequence[float]],
    labels: Sequence[int],
    n_labels: int,
    instance: Sequence[float],
    k: int,
) -> int:
    """Classify ``instance`` by majority vote among its ``k`` nearest rows.

    Ties between labels go to the smallest label.
    """
    if k < 1:
        raise ValueError("k must be at least 1")
    if k > len(data):
        raise ValueError("k exceeds the number of data rows")
    distances = [euclidean_distance(row, instance) for row in data]
    votes = [0] * n_labels
    for index in sort_by_distance(distances)[:k]:
        votes[labels[index]] += 1
    best_label, best_votes = 0, 0
    for label, count in enumerate(votes):
        if count > best_votes:
            best_label, best_votes = label, count
    return best_label


def knn_classify_multi(
    data: Sequence[Sequence[float]],
    labels: Sequence[int],
    n_labels: int,
    instances: Sequence[Sequence[float]],
    k: int,
) -> list[int]:
    """Classify every row of ``instances`` with :func:`knn_classify`."""
    return [knn_classify(data, labels, n_labels, instance, k) for instance in instances]