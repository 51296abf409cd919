"""Edit-distance lookup for names missing from the registry."""

from typing import Iterable, Optional


def edit_distance(a: str, b: str) -> int:
    """Insert/delete/substitute distance where swapping two adjacent
    characters also counts as a single edit (optimal string alignment).
    """
    if not a:
        return len(b)
    if not b:
        return len(a)

    before_previous: list[int] = []
    previous = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        current = [i]
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            best = min(previous[j - 1] + cost, previous[j] + 1, current[j - 1] + 1)
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                best = min(best, before_previous[j - 2] + 1)
            current.append(best)
        before_previous, previous = previous, current
    return previous[-1]


def max_distance_for(query: str) -> int:
    """Distance gate for a query: ``max(2, floor(len * 0.3))``."""
    return max(2, int(len(query) * 0.3))


def find_fuzzy_match(query: str, names: Iterable[str]) -> Optional[tuple[str, int]]:
    """Closest known name within the gate, as ``(name, distance)``.

    Candidates whose length differs from the query by more than the gate
    are not compared at all. Distances are computed case-insensitively.
    Only a strictly smaller distance replaces the current best, so ties go
    to the candidate met first in ``names`` order.
    """
    gate = max_distance_for(query)
    lowered = query.lower()
    best: Optional[tuple[str, int]] = None

    for name in names:
        if abs(len(name) - len(query)) > gate:
            continue
        distance = edit_distance(lowered, name.lower())
        if distance <= gate and (best is None or distance < best[1]):
            best = (name, distance)

    return best
