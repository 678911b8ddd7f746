"""
View-root dependency filtering — pure functions only.

Zooms the dependency list into one folder and rolls paths up to a folder
depth relative to that view root.
"""
from __future__ import annotations

import logging

from .paths import is_ancestor_or_self, normalize_path, path_parts

logger = logging.getLogger(__name__)

ROOT = "/"


def is_path_within_folder(path: str, folder: str, extra_patterns=()) -> bool:
    return is_ancestor_or_self(normalize_path(folder), normalize_path(path, extra_patterns))


def get_relative_from_view_root(path: str, view_root: str, extra_patterns=()) -> str:
    """Path relative to the view root, '/'-prefixed; '/' for the root itself."""
    if not path or not isinstance(path, str):
        logger.warning("invalid path for view root %s: %r", view_root, path)
        return ROOT
    p = normalize_path(path, extra_patterns)
    if view_root == ROOT:
        return p
    root = normalize_path(view_root)
    if p == root:
        return ROOT
    if p.startswith(root + "/"):
        return p[len(root):] or ROOT
    return p


def filter_dependencies_for_view_root(dependencies: list[dict], view_root: str, extra_patterns=()) -> dict:
    """
    Keep only dependencies with both ends inside `view_root`.

    `extra_patterns` are the repo's configured prefix regexes, applied to
    dependency paths the same way the tree and graph builders apply them.
    Returns {filtered, strategy, stats}; stats counts internal, incoming
    (outside -> inside) and outgoing (inside -> outside) dependencies.
    """
    if not view_root or view_root == ROOT:
        return {
            "filtered": list(dependencies),
            "strategy": "root-show-all",
            "stats":    {"total": len(dependencies), "internal": 0, "incoming": 0, "outgoing": 0},
        }

    internal, incoming, outgoing = [], [], []
    for dep in dependencies:
        src_in = is_path_within_folder(dep.get("source_file") or "", view_root, extra_patterns)
        dst_in = is_path_within_folder(dep.get("target_file") or "", view_root, extra_patterns)
        if src_in and dst_in:
            internal.append(dep)
        elif dst_in:
            incoming.append(dep)
        elif src_in:
            outgoing.append(dep)

    stats = {
        "total":    len(dependencies),
        "internal": len(internal),
        "incoming": len(incoming),
        "outgoing": len(outgoing),
    }
    if internal:
        return {"filtered": internal, "strategy": "internal-only", "stats": stats}

    logger.warning("folder %s has no internal dependencies: %s", view_root, stats)
    return {"filtered": [], "strategy": "no-internal-dependencies", "stats": stats}


def get_folder_at_level(path: str, level: int) -> str:
    """Folder holding `path`, cut to at most `level` segments; '/' at level 0."""
    parts = path_parts(path)
    if level == 0 or not parts:
        return ROOT
    folder = parts[: min(level, len(parts) - 1)]
    return "/".join(folder) if folder else ROOT


def get_folder_at_level_relative_to_view_root(path: str, level: int, view_root: str, extra_patterns=()) -> str:
    if view_root == ROOT:
        return get_folder_at_level(normalize_path(path, extra_patterns), level)

    relative = get_relative_from_view_root(path, view_root, extra_patterns)
    if relative == ROOT:
        return view_root

    parts = path_parts(relative)
    if level == 0 or not parts:
        return view_root
    folder = parts[: min(level, len(parts) - 1)]
    if not folder:
        return view_root
    return f"{normalize_path(view_root)}/{'/'.join(folder)}"
