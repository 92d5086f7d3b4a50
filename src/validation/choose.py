from __future__ import annotations

from typing import Iterable, Protocol, TypeVar


class ScoredCandidate(Protocol):
    @property
    def valid(self) -> bool: ...

    @property
    def score(self) -> float: ...


C = TypeVar("C", bound=ScoredCandidate)


def choose_best_candidate(candidates: Iterable[C]) -> C | None:
    """Highest-scoring valid candidate; ties go to the earliest one."""
    best: C | None = None
    for c in candidates:
        if not c.valid:
            continue
        if best is None or c.score > best.score:
            best = c
    return best
