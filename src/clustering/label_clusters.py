from __future__ import annotations

from contracts.geometry import clamp, distance, median_of
from contracts.labels import LabelCluster, LabelHit

from .config import ClusteringConfig


class _DisjointSet:
    __slots__ = ("_parent",)

    def __init__(self, n: int) -> None:
        self._parent = list(range(n))

    def find(self, i: int) -> int:
        root = i
        while self._parent[root] != root:
            root = self._parent[root]
        # Path compression, iterative.
        while self._parent[i] != root:
            nxt = self._parent[i]
            self._parent[i] = root
            i = nxt
        return root

    def union(self, a: int, b: int) -> None:
        ra = self.find(a)
        rb = self.find(b)
        if ra != rb:
            self._parent[ra] = rb


def median_label_height(hits: list[LabelHit]) -> float:
    return median_of((h.bbox.h for h in hits), default=30.0)


def compute_eps(median_height: float, config: ClusteringConfig) -> float:
    return clamp(config.eps_k * median_height, config.eps_min, config.eps_max)


def _partition(hits: list[LabelHit], eps: float) -> list[list[int]]:
    """
    Single-linkage partition of hit indices.

    Pairs are enumerated i ascending, then j > i ascending. Groups come out
    ordered by their first member's input index; members keep input order.
    """

    n = len(hits)
    ds = _DisjointSet(n)
    centers = [h.center for h in hits]

    for i in range(n):
        for j in range(i + 1, n):
            if distance(centers[i], centers[j]) <= eps:
                ds.union(i, j)

    groups: dict[int, list[int]] = {}
    for i in range(n):
        groups.setdefault(ds.find(i), []).append(i)
    return list(groups.values())


def build_clusters(hits: list[LabelHit], config: ClusteringConfig | None = None) -> list[LabelCluster]:
    """
    Cluster label hits into candidate title-block groups.

    Eligibility: both a number and a title label, or total weight >= min_eligible_weight.
    score = both_labels_bonus * [both] + total_weight + tightness_k / max(area, 1)
    """

    if config is None:
        config = ClusteringConfig()
    config.validate()

    if len(hits) < 2:
        return []

    eps = compute_eps(median_label_height(hits), config)

    clusters: list[LabelCluster] = []
    for idxs in _partition(hits, eps):
        if len(idxs) < config.min_cluster_size:
            continue

        cluster = LabelCluster.from_members(
            [hits[i] for i in idxs],
            both_labels_bonus=config.both_labels_bonus,
            tightness_k=config.tightness_k,
        )
        eligible = cluster.has_both_labels() or cluster.total_weight() >= config.min_eligible_weight
        if not eligible:
            continue
        clusters.append(cluster)

    return clusters
