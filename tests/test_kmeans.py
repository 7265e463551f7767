import random

import pytest

from gwugens.kmeans import (
    euclidean_distance,
    kmeans,
    kmeans_refine,
    knn_classify,
    knn_classify_multi,
    sort_by_distance,
)

LABELS = [0, 1, 0, 1, 0, 1, 0, 1]
INSTANCE = [1, 1, 3]


@pytest.fixture
def data():
    return [
        [1.2, 1.1, 1.3],
        [3.2, 3.1, 3.3],
        [3.2, 3.1, 3.4],
        [3.2, 3.1, 3.3],
        [3.2, 3.1, 3.4],
        [1.2, 1.1, 1.3],
        [3.2, 3.1, 3.3],
        [3.2, 3.1, 3.4],
    ]


def test_euclidean_distance_is_squared():
    assert euclidean_distance([0.0, 0.0], [3.0, 4.0]) == 25.0


def test_euclidean_distance_symmetric(data):
    assert euclidean_distance(data[0], data[1]) == euclidean_distance(data[1], data[0])


def test_sort_by_distance_stable():
    assert sort_by_distance([3.0, 1.0, 2.0, 1.0]) == [1, 3, 2, 0]


def test_knn_classify(data):
    assert knn_classify(data, LABELS, 2, INSTANCE, 1) == 0


def test_knn_classify_multi(data):
    assert knn_classify_multi(data, LABELS, 2, [INSTANCE], 1) == [0]


def test_knn_classify_multi_matches_single(data):
    instances = [INSTANCE, [3.0, 3.0, 3.0]]
    expected = [knn_classify(data, LABELS, 2, inst, 3) for inst in instances]
    assert knn_classify_multi(data, LABELS, 2, instances, 3) == expected


def test_knn_rejects_zero_k(data):
    with pytest.raises(ValueError):
        knn_classify(data, LABELS, 2, INSTANCE, 0)


def test_knn_rejects_k_beyond_data(data):
    with pytest.raises(ValueError):
        knn_classify(data, LABELS, 2, INSTANCE, 9)


def test_kmeans_two_clusters(data):
    centroids = [[0.0] * 3 for _ in range(2)]
    labels = kmeans(data, 2, 1e-4, centroids, False)
    assert labels == [0, 1, 1, 1, 1, 0, 1, 1]
    assert centroids[0] == pytest.approx([1.2, 1.1, 1.3])
    assert centroids[1] == pytest.approx([3.2, 3.1, 3.35])


def test_kmeans_centroids_then_knn(data):
    centroids = [[0.0] * 3 for _ in range(2)]
    kmeans(data, 2, 1e-4, centroids, False)
    assert knn_classify(centroids, LABELS, 2, INSTANCE, 1) == 0


def test_kmeans_uses_given_initial_centroids(data):
    centroids = [[3.0, 3.0, 3.0], [1.0, 1.0, 1.0]]
    labels = kmeans(data, 2, 1e-4, centroids, True)
    assert labels == [1, 0, 0, 0, 0, 1, 0, 0]


def test_kmeans_rejects_zero_k(data):
    with pytest.raises(ValueError):
        kmeans(data, 0, 1e-4, None, False)


def test_kmeans_initial_requires_centroids(data):
    with pytest.raises(ValueError):
        kmeans(data, 2, 1e-4, None, True)


def test_kmeans_refine_then_kmeans(data):
    centroids = kmeans_refine(data, 3, 5, 2, random.Random(7))
    assert len(centroids) == 2
    assert all(len(row) == 3 for row in centroids)
    for row in centroids:
        for j, value in enumerate(row):
            column = [point[j] for point in data]
            assert min(column) <= value <= max(column)
    labels = kmeans(data, 2, 1e-4, centroids, True)
    assert len(labels) == len(data)
    assert set(labels) <= {0, 1}
    assert knn_classify_multi(centroids, LABELS, 2, [INSTANCE], 1)[0] in (0, 1)


def test_kmeans_refine_reproducible(data):
    first = kmeans_refine(data, 4, 5, 2, random.Random(3))
    second = kmeans_refine(data, 4, 5, 2, random.Random(3))
    assert first == second


def test_kmeans_refine_rejects_zero_iterations(data):
    with pytest.raises(ValueError):
        kmeans_refine(data, 0, 5, 2, random.Random(1))