"""
Commit dependency diff — pure functions only.

Compares the dependency lists of two snapshots.  Dependencies are matched
exactly by (source_file, target_file, relationship_type); weight is not part
of identity.
"""
from __future__ import annotations

ADDED     = "added"
REMOVED   = "removed"
UNCHANGED = "unchanged"


def dependency_key(dep: dict) -> str:
    return f"{dep.get('source_file')}→{dep.get('target_file')}→{dep.get('relationship_type')}"


def calculate_dependency_diff(deps_a: list[dict], deps_b: list[dict]) -> dict:
    """
    Diff snapshot A (older) against snapshot B (newer).

    Returns {added, removed, unchanged}: added are in B only, removed in A
    only, unchanged in both (B's copy).  Duplicate keys collapse to the last
    occurrence.
    """
    map_a = {dependency_key(d): d for d in deps_a}
    map_b = {dependency_key(d): d for d in deps_b}

    added     = [d for k, d in map_b.items() if k not in map_a]
    unchanged = [d for k, d in map_b.items() if k in map_a]
    removed   = [d for k, d in map_a.items() if k not in map_b]

    return {ADDED: added, REMOVED: removed, UNCHANGED: unchanged}


def get_diff_summary(diff: dict, deps_a: list[dict], deps_b: list[dict]) -> dict:
    return {
        "added_count":     len(diff.get(ADDED, [])),
        "removed_count":   len(diff.get(REMOVED, [])),
        "unchanged_count": len(diff.get(UNCHANGED, [])),
        "total_a":         len(deps_a),
        "total_b":         len(deps_b),
    }


def build_status_index(diff: dict) -> dict[str, str]:
    """
    {dependency_key: status} for a diff.  When a key is listed under more
    than one status, added beats removed beats unchanged.
    """
    index: dict[str, str] = {}
    for status in (UNCHANGED, REMOVED, ADDED):
        for dep in diff.get(status) or []:
            index[dependency_key(dep)] = status
    return index


def get_dependency_status(dep: dict, diff: dict) -> str | None:
    return build_status_index(diff).get(dependency_key(dep))
