"""Navigation arithmetic over a step graph.

Backward moves are unrestricted; forward moves are limited to one step.
Steps outside the graph report "no step" rather than raising.
"""

from collections.abc import Sequence


def _index(step: str, graph: Sequence[str]) -> int:
    try:
        return graph.index(step)
    except ValueError:
        return -1


def next_step(current: str, graph: Sequence[str]) -> str | None:
    """Return the step after ``current``, or None at the end of the graph."""
    index = _index(current, graph)
    if 0 <= index < len(graph) - 1:
        return graph[index + 1]
    return None


def previous_step(current: str, graph: Sequence[str]) -> str | None:
    """Return the step before ``current``, or None at the start of the graph."""
    index = _index(current, graph)
    if index > 0:
        return graph[index - 1]
    return None


def is_accessible(target: str, current: str, graph: Sequence[str]) -> bool:
    """Check whether ``target`` may be entered from ``current``.

    Any visited step (at or before ``current``) is re-enterable, and exactly
    one step forward is allowed.

    Args:
        target: Step the visitor wants to enter
        current: Step recorded in the flow state
        graph: Ordered steps of the domain

    Returns:
        bool: False for skips of more than one step or unknown steps
    """
    target_index = _index(target, graph)
    current_index = _index(current, graph)
    if target_index < 0 or current_index < 0:
        return False

    if target_index <= current_index:
        return True

    return target_index == current_index + 1


def progress_percent(current: str, graph: Sequence[str]) -> float:
    """Position of ``current`` as a percentage, 0.0 for unknown steps."""
    index = _index(current, graph)
    if index < 0:
        return 0.0
    return (index + 1) * 100 / len(graph)
