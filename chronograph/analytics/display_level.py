"""
Display-level resolution — pure functions only.

Decides which single tree node represents a file path in the graph at the
current level of detail.  Ancestors are looked up by walking the path's own
prefixes against the keyed tree state, so each lookup is O(path depth).
"""
from __future__ import annotations

from .paths import ancestor_chain, path_parts
from .tree_state import DEFAULT_ROOT, CheckboxState, state_of


def find_half_checked_stop(path: str, tree_state: dict[str, dict], included_paths: set[str]) -> str | None:
    """Deepest half-checked node that is the path itself or one of its ancestors."""
    for candidate in ancestor_chain(path):
        node = tree_state.get(candidate)
        if node is None or candidate not in included_paths:
            continue
        if state_of(node) is CheckboxState.HALF_CHECKED:
            return candidate
    return None


def find_deepest_expanded_parent(path: str, expanded_folders: set[str], included_paths: set[str]) -> str | None:
    for candidate in ancestor_chain(path):
        if candidate in expanded_folders and candidate in included_paths:
            return candidate
    return None


def find_deepest_included_ancestor(path: str, included_paths: set[str]) -> str | None:
    for candidate in ancestor_chain(path):
        if candidate == DEFAULT_ROOT:
            continue
        if candidate in included_paths:
            return candidate
    return None


def project_below(path: str, expanded_folder: str) -> str:
    """
    Project `path` to exactly one level below `expanded_folder`.

    With lib expanded, lib/data/services/api/client.dart shows as lib/data.
    """
    parts = path_parts(path)
    target_depth = len(path_parts(expanded_folder)) + 1
    if len(parts) > target_depth:
        return "/".join(parts[:target_depth])
    return path


def resolve_display_level(
    path: str,
    tree_state: dict[str, dict],
    included_paths: set[str],
    expanded_folders: set[str],
) -> str | None:
    """
    The identifier that represents `path` in the graph, or None.

    First match wins:
      1. deepest half-checked ancestor-or-self — never descended past
      2. deepest expanded folder ancestor — projected one level below it
      3. deepest included ancestor-or-self of any type
    """
    if not path:
        return None

    stop = find_half_checked_stop(path, tree_state, included_paths)
    if stop is not None:
        return stop

    expanded = find_deepest_expanded_parent(path, expanded_folders, included_paths)
    if expanded is not None:
        return project_below(path, expanded)

    return find_deepest_included_ancestor(path, included_paths)
