"""Cycle detection over dependency edges.

All checks run in memory against an already-loaded edge set; nothing here
touches a store.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from tasksched.logger import get_logger
from tasksched.models import Dependency

logger = get_logger()


def _adjacency(edges: Iterable[Dependency]) -> dict[str, list[str]]:
    """Successor lists keyed by predecessor, in edge order."""
    adjacency: dict[str, list[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.predecessor_id, []).append(edge.successor_id)
        adjacency.setdefault(edge.successor_id, [])
    return adjacency


def _find_back_edge(adjacency: dict[str, list[str]], roots: Iterable[str]) -> list[str] | None:
    """Depth-first search from each root, returning the first cycle found.

    Uses an explicit stack so deep chains do not hit the recursion limit.
    The returned path starts and ends on the same node.
    """
    visited: set[str] = set()

    for root in roots:
        if root in visited:
            continue

        path: list[str] = [root]
        on_stack: set[str] = {root}
        stack: list[Iterator[str]] = [iter(adjacency.get(root, []))]
        visited.add(root)

        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                on_stack.discard(path.pop())
                continue
            if child in on_stack:
                return path[path.index(child) :] + [child]
            if child in visited:
                continue
            visited.add(child)
            on_stack.add(child)
            path.append(child)
            stack.append(iter(adjacency.get(child, [])))

    return None


def would_create_cycle(existing_edges: Iterable[Dependency], candidate: Dependency) -> bool:
    """Check whether adding the candidate edge would close a directed cycle.

    Args:
        existing_edges: Dependencies already present in the project
        candidate: Dependency about to be inserted

    Returns:
        True if the graph formed by existing_edges plus candidate has a cycle
        reachable from the candidate's predecessor
    """
    if candidate.predecessor_id == candidate.successor_id:
        logger.checks(f"  Cycle check {candidate}: self-loop")
        return True

    adjacency = _adjacency([*existing_edges, candidate])
    cycle = _find_back_edge(adjacency, [candidate.predecessor_id])
    if cycle:
        logger.checks(f"  Cycle check {candidate}: cycle {' -> '.join(cycle)}")
        return True

    logger.checks(f"  Cycle check {candidate}: ok")
    return False


def find_cycle(edges: Iterable[Dependency]) -> list[str] | None:
    """Find any directed cycle in a complete edge set.

    Returns:
        The cycle as a list of task IDs whose first and last entries are the
        same task, or None if the edges are acyclic
    """
    adjacency = _adjacency(edges)
    return _find_back_edge(adjacency, list(adjacency))
