from __future__ import annotations

from contracts.labels import LabelCluster

# Tie-break ladder, in priority order. Full ties fall back to input order.
_LADDER_KEYS = ("both_labels", "score", "area", "bottom_right_bias")


def _ladder_key(c: LabelCluster) -> tuple[int, float, float, float]:
    center = c.bbox.center()
    return (
        0 if c.has_both_labels() else 1,  # both labels first
        -c.score,  # higher score first
        c.area(),  # tighter first
        -(center.x + center.y),  # bottom-right first
    )


def rank_clusters(clusters: list[LabelCluster]) -> list[int]:
    """Indices of `clusters` in selection order (stable for full ties)."""
    return sorted(range(len(clusters)), key=lambda i: _ladder_key(clusters[i]))


def selected_cluster_index(clusters: list[LabelCluster]) -> int | None:
    ranked = rank_clusters(clusters)
    return ranked[0] if ranked else None


def _deciding_key(winner: LabelCluster, runner_up: LabelCluster | None) -> str:
    if runner_up is None:
        return "only_candidate"
    wk = _ladder_key(winner)
    rk = _ladder_key(runner_up)
    for name, a, b in zip(_LADDER_KEYS, wk, rk):
        if a != b:
            return name
    return "input_order"


def select_best_cluster(clusters: list[LabelCluster]) -> LabelCluster | None:
    """
    Pick the winning cluster and attach an audit string to it.

    Ladder: both labels > higher score > smaller bbox area > larger (cx + cy).
    """

    ranked = rank_clusters(clusters)
    if not ranked:
        return None

    winner = clusters[ranked[0]]
    runner_up = clusters[ranked[1]] if len(ranked) > 1 else None

    parts: list[str] = []
    if winner.has_both_labels():
        parts.append("has_both_labels")
    parts.append(f"score={winner.score:.2f}")
    parts.append(f"area={winner.area():.0f}")
    parts.append(f"decided_by={_deciding_key(winner, runner_up)}")

    return winner.with_why_selected(", ".join(parts))
