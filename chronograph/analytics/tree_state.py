"""
Project tree and checkbox state — pure functions only.

The tree state is a keyed table {node_id: node} rather than a linked tree.
Each node is a dict:
    id, label, type ("file" | "folder"), parent, children, checkbox_state

Builds the default tree for a snapshot, applies checkbox changes with the
up/down propagation rules, and partitions node ids into included/expanded
sets for the graph transform.
"""
from __future__ import annotations

import logging
import re
from enum import Enum

from .paths import normalize_path, path_parts

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "project"
APP_ROOT = "app"
_APP_LIKE_DIRS = ("lib", "test", "integration_test", "testing")

# Matched against normalized paths, which carry no leading "/".
_SYSTEM_PATHS = [
    re.compile(r"^var/tmp/"),
    re.compile(r"^var/log/"),
    re.compile(r"^proc/"),
    re.compile(r"^sys/"),
    re.compile(r"^dev/"),
    re.compile(r"^[A-Z]:/Windows/"),
    re.compile(r"^[A-Z]:/Users/.*/AppData/"),
    re.compile(r"(^|/)node_modules/.*/.*/.*/"),
    re.compile(r"(^|/)\.git/"),
    re.compile(r"(^|/)build/intermediates/"),
    re.compile(r"(^|/)target/debug/build/"),
    re.compile(r"(^|/)target/release/build/"),
]


class CheckboxState(str, Enum):
    CHECKED = "checked"
    UNCHECKED = "unchecked"
    HALF_CHECKED = "half-checked"


def state_of(node: dict) -> CheckboxState:
    """Checkbox state of a tree node; anything unrecognized counts as unchecked."""
    try:
        return CheckboxState(node.get("checkbox_state", CheckboxState.UNCHECKED))
    except ValueError:
        return CheckboxState.UNCHECKED


# ── Filtering info ────────────────────────────────────────────────────────────

def get_tree_filtering_info(tree_state: dict[str, dict]) -> tuple[set[str], set[str]]:
    """
    Partition tree node ids for the graph transform.

    Returns (included_paths, expanded_folders):
      included_paths   — checked or half-checked nodes
      expanded_folders — checked folders (rendered as containers)
    Unchecked nodes appear in neither set.
    """
    included: set[str] = set()
    expanded: set[str] = set()
    for node_id, node in tree_state.items():
        state = state_of(node)
        if state is CheckboxState.UNCHECKED:
            continue
        included.add(node_id)
        if state is CheckboxState.CHECKED and node.get("type") == "folder":
            expanded.add(node_id)
    return included, expanded


# ── Tree construction ─────────────────────────────────────────────────────────

def filter_system_paths(paths: list[str]) -> list[str]:
    """Drop obvious system/build paths; everything else is assumed to be project code."""
    kept = []
    for p in paths:
        if any(pattern.search(p) for pattern in _SYSTEM_PATHS):
            logger.debug("filtered out system path: %s", p)
            continue
        kept.append(p)
    return kept


def find_common_root(paths: list[str]) -> str:
    """
    Pick the tree root id from the data.

    A first segment shared by every path becomes the root.  Several top-level
    dirs that look like a Flutter/Dart app (lib/, test/, ...) get "app",
    anything else gets the synthetic "project" root.
    """
    if not paths:
        return DEFAULT_ROOT

    top_level = []
    for p in paths:
        parts = path_parts(p)
        if parts and parts[0] not in top_level:
            top_level.append(parts[0])

    if len(top_level) == 1:
        return top_level[0]
    if any(d in top_level for d in _APP_LIKE_DIRS):
        return APP_ROOT
    return DEFAULT_ROOT


def _make_node(node_id: str, label: str, node_type: str) -> dict:
    return {
        "id":             node_id,
        "label":          label,
        "type":           node_type,
        "parent":         None,
        "children":       [],
        "checkbox_state": CheckboxState.CHECKED,
    }


def build_project_tree(dependencies: list[dict], extra_patterns=()) -> dict:
    """
    Build the project tree for one snapshot's dependency list.

    Returns {"nodes": {id: node}, "root_id": str} with default checkbox states:
    root checked, first-level folders half-checked (descendants unchecked),
    first-level files checked, everything deeper unchecked.
    """
    seen: set[str] = set()
    raw_paths = []
    for dep in dependencies:
        for key in ("source_file", "target_file"):
            p = normalize_path(dep.get(key) or "", extra_patterns)
            if p and p not in seen:
                seen.add(p)
                raw_paths.append(p)

    paths = filter_system_paths(raw_paths)
    root_id = find_common_root(paths)
    logger.debug("building project tree: %d paths, root=%s", len(paths), root_id)

    nodes: dict[str, dict] = {root_id: _make_node(root_id, root_id, "folder")}
    for p in paths:
        parts = path_parts(p)
        for i in range(len(parts)):
            node_id = "/".join(parts[: i + 1])
            if node_id not in nodes:
                is_file = i == len(parts) - 1
                nodes[node_id] = _make_node(node_id, parts[i], "file" if is_file else "folder")

    _link_tree(nodes, root_id)
    _init_checkbox_states(nodes, root_id)
    return {"nodes": nodes, "root_id": root_id}


def _link_tree(nodes: dict[str, dict], root_id: str) -> None:
    root = nodes[root_id]
    for node in nodes.values():
        if node["id"] == root_id:
            continue
        parts = path_parts(node["id"])
        parent_id = root_id if len(parts) == 1 else "/".join(parts[:-1])
        parent = nodes.get(parent_id)
        if parent is None:
            logger.warning("parent %s not found for tree node %s", parent_id, node["id"])
            continue
        node["parent"] = parent_id
        if node["id"] not in parent["children"]:
            parent["children"].append(node["id"])

    # folders before files, then alphabetical
    for node in nodes.values():
        node["children"].sort(key=lambda c: (nodes[c]["type"] != "folder", nodes[c]["label"]))

    if not root["children"]:
        logger.debug("project tree root %s has no children", root_id)


def _init_checkbox_states(nodes: dict[str, dict], root_id: str) -> None:
    for node in nodes.values():
        node["checkbox_state"] = CheckboxState.UNCHECKED
    root = nodes[root_id]
    root["checkbox_state"] = CheckboxState.CHECKED
    for child_id in root["children"]:
        child = nodes[child_id]
        if child["type"] == "folder":
            child["checkbox_state"] = CheckboxState.HALF_CHECKED
        else:
            child["checkbox_state"] = CheckboxState.CHECKED


# ── Checkbox updates ──────────────────────────────────────────────────────────

def copy_tree_state(tree_state: dict[str, dict]) -> dict[str, dict]:
    return {
        node_id: {**node, "children": list(node.get("children", []))}
        for node_id, node in tree_state.items()
    }


def update_checkbox_state(
    tree_state: dict[str, dict],
    node_id: str,
    new_state: CheckboxState | str,
) -> dict[str, dict]:
    """
    Apply one checkbox change and propagate it; returns a new tree state.

    Downward: checked shows folder children half-checked and file children
    checked (one level); unchecked and half-checked hide every descendant.
    Upward: a parent is checked while any child is visible, else unchecked.
    """
    new_state = CheckboxState(new_state)
    updated = copy_tree_state(tree_state)
    node = updated.get(node_id)
    if node is None:
        return updated

    node["checkbox_state"] = new_state
    _propagate_down(node_id, new_state, updated)
    _propagate_up(node_id, updated)
    return updated


def _propagate_down(node_id: str, state: CheckboxState, nodes: dict[str, dict]) -> None:
    for child_id in nodes[node_id].get("children", []):
        child = nodes.get(child_id)
        if child is None:
            continue
        if state is CheckboxState.CHECKED:
            if child.get("type") == "folder":
                child["checkbox_state"] = CheckboxState.HALF_CHECKED
            else:
                child["checkbox_state"] = CheckboxState.CHECKED
        else:
            child["checkbox_state"] = CheckboxState.UNCHECKED
            _propagate_down(child_id, CheckboxState.UNCHECKED, nodes)


def _propagate_up(node_id: str, nodes: dict[str, dict]) -> None:
    current = nodes.get(node_id)
    while current is not None and current.get("parent"):
        parent = nodes.get(current["parent"])
        if parent is None:
            return
        any_visible = any(
            state_of(nodes[c]) is not CheckboxState.UNCHECKED
            for c in parent.get("children", [])
            if c in nodes
        )
        new_state = CheckboxState.CHECKED if any_visible else CheckboxState.UNCHECKED
        if state_of(parent) is new_state:
            return
        parent["checkbox_state"] = new_state
        current = parent
