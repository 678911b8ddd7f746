"""
Tree-driven compound graph — pure functions only.

Turns one snapshot's file-level dependency list plus the user's tree state
into a level-of-detail graph: collapsed folders become single nodes,
expanded folders become containers, and every real dependency is attributed
to whichever nodes are currently visible.  With a diff, edges carry an
added/removed/unchanged status and changed nodes are flagged up through
their containers.
"""
from __future__ import annotations

import logging

from .commit_diff import ADDED, REMOVED, UNCHANGED, build_status_index, dependency_key
from .display_level import resolve_display_level
from .paths import ancestor_chain, label_of, normalize_path, path_parts
from .tree_state import get_tree_filtering_info

logger = logging.getLogger(__name__)

_CHANGED = (ADDED, REMOVED)


def transform_to_tree_graph(
    dependencies: list[dict],
    tree_state: dict[str, dict],
    diff: dict | None = None,
    extra_patterns=(),
) -> dict:
    """
    Build renderable graph elements for the current tree state.

    dependencies — [{source_file, target_file, relationship_type, weight?}]
    tree_state   — {node_id: {id, label, type, checkbox_state, ...}}
    diff         — optional {added, removed, unchanged} dependency lists
    Returns {"elements": [...], "diagnostics": [...]}; elements are
    {"kind": "node"|"edge", "data": {...}} with containers first, then leaf
    nodes, then edges.  Inputs are never mutated.
    """
    included, expanded = get_tree_filtering_info(tree_state)
    status_index = build_status_index(diff) if diff is not None else None
    logger.debug(
        "tree graph: %d deps, %d tree nodes, %d included, %d expanded",
        len(dependencies), len(tree_state), len(included), len(expanded),
    )

    nodes: dict[str, dict] = {}
    edges: dict[str, dict] = {}
    edge_types: dict[str, list[str]] = {}

    for dep in dependencies:
        source_path = normalize_path(dep.get("source_file") or "", extra_patterns)
        target_path = normalize_path(dep.get("target_file") or "", extra_patterns)
        source_id = resolve_display_level(source_path, tree_state, included, expanded)
        target_id = resolve_display_level(target_path, tree_state, included, expanded)

        if source_id is None or target_id is None:
            continue
        if source_id not in included or target_id not in included:
            continue
        if source_id == target_id:
            continue

        _ensure_node(nodes, source_id, source_path, tree_state)
        _ensure_node(nodes, target_id, target_path, tree_state)

        status = status_index.get(dependency_key(dep)) if status_index is not None else None
        _upsert_edge(edges, edge_types, source_id, target_id, dep, status, diff_mode=status_index is not None)

    assemble_containers(nodes, tree_state, included, expanded)
    if status_index is not None:
        propagate_changes(nodes, edges)

    diagnostics = _diagnostics(dependencies, nodes, edge_types)
    elements = _to_elements(nodes, edges)
    logger.debug("tree graph: %d nodes, %d edges", len(nodes), len(edges))
    return {"elements": elements, "diagnostics": diagnostics}


def dependency_weight(dep: dict) -> int:
    """Caller-supplied weight as a positive int; missing or unusable weights count as 1."""
    try:
        weight = int(dep.get("weight", 1))
    except (TypeError, ValueError):
        return 1
    return weight if weight > 0 else 1


# ── Nodes and edges ───────────────────────────────────────────────────────────

def _make_graph_node(node_id: str, label: str, node_type: str, is_leaf: bool) -> dict:
    return {
        "id":          node_id,
        "label":       label,
        "type":        node_type,
        "path":        node_id,
        "parent":      None,
        "is_leaf":     is_leaf,
        "is_expanded": not is_leaf,
    }


def _ensure_node(nodes: dict[str, dict], node_id: str, original_path: str, tree_state: dict[str, dict]) -> None:
    if node_id in nodes:
        return
    tree_node = tree_state.get(node_id) or {}
    node_type = "file" if node_id == original_path else "folder"
    nodes[node_id] = _make_graph_node(node_id, tree_node.get("label") or label_of(node_id), node_type, True)


def _upsert_edge(
    edges: dict[str, dict],
    edge_types: dict[str, list[str]],
    source: str,
    target: str,
    dep: dict,
    status: str | None,
    diff_mode: bool,
) -> None:
    edge_id = f"{source}->{target}"
    weight = dependency_weight(dep)
    rel_type = dep.get("relationship_type")

    existing = edges.get(edge_id)
    if existing is None:
        edge = {
            "id":                    edge_id,
            "source":                source,
            "target":                target,
            "weight":                weight,
            "relationship_type":     rel_type,
            "original_dependencies": [dict(dep)],
        }
        if diff_mode:
            edge["diff_status"] = status
        edges[edge_id] = edge
        edge_types[edge_id] = [rel_type]
        return

    existing["weight"] += weight
    existing["original_dependencies"].append(dict(dep))
    if rel_type not in edge_types[edge_id]:
        edge_types[edge_id].append(rel_type)
    if diff_mode and status in _CHANGED and existing.get("diff_status") in (None, UNCHANGED):
        existing["diff_status"] = status


# ── Containment ───────────────────────────────────────────────────────────────

def _nearest_container(node_id: str, containers: set[str]) -> str | None:
    for candidate in ancestor_chain(node_id, include_self=False):
        if candidate in containers:
            return candidate
    return None


def assemble_containers(
    nodes: dict[str, dict],
    tree_state: dict[str, dict],
    included: set[str],
    expanded: set[str],
) -> None:
    """
    Turn expanded, included folders into containers and parent every other
    node into its nearest container ancestor.  Parents are always strict
    path prefixes, so containment is a forest.
    """
    containers = expanded & included

    for folder_id in sorted(containers, key=lambda f: len(path_parts(f))):
        node = nodes.get(folder_id)
        if node is None:
            tree_node = tree_state.get(folder_id) or {}
            node = _make_graph_node(folder_id, tree_node.get("label") or label_of(folder_id), "folder", False)
            nodes[folder_id] = node
        node["type"] = "folder"
        node["is_leaf"] = False
        node["is_expanded"] = True
        node["parent"] = _nearest_container(folder_id, containers)

    for node_id, node in nodes.items():
        if node_id in containers or node["parent"] is not None:
            continue
        node["parent"] = _nearest_container(node_id, containers)


def propagate_changes(nodes: dict[str, dict], edges: dict[str, dict]) -> None:
    """Flag endpoints of added/removed edges and every container above them."""
    for node in nodes.values():
        node["has_changes"] = False

    changed: set[str] = set()
    for edge in edges.values():
        if edge.get("diff_status") in _CHANGED:
            changed.add(edge["source"])
            changed.add(edge["target"])

    for node_id in changed:
        current = nodes.get(node_id)
        seen: set[str] = set()
        while current is not None and current["id"] not in seen:
            seen.add(current["id"])
            current["has_changes"] = True
            parent = current.get("parent")
            current = nodes.get(parent) if parent else None


# ── Output ────────────────────────────────────────────────────────────────────

def _diagnostics(dependencies: list[dict], nodes: dict[str, dict], edge_types: dict[str, list[str]]) -> list[dict]:
    diagnostics = []
    if dependencies and not nodes:
        logger.warning(
            "no visible nodes for %d dependencies; tree state and dependency paths may not match",
            len(dependencies),
        )
        diagnostics.append({"code": "no_visible_nodes", "dependency_count": len(dependencies)})

    for edge_id, types in edge_types.items():
        if len(types) > 1:
            logger.info("edge %s aggregates relationship types %s; keeping %s", edge_id, types, types[0])
            diagnostics.append({"code": "mixed_relationship_types", "edge": edge_id, "types": types})
    return diagnostics


def _to_elements(nodes: dict[str, dict], edges: dict[str, dict]) -> list[dict]:
    containers = [n for n in nodes.values() if not n["is_leaf"]]
    leaves     = [n for n in nodes.values() if n["is_leaf"]]
    containers.sort(key=lambda n: len(path_parts(n["id"])))

    return (
        [{"kind": "node", "data": n} for n in containers] +
        [{"kind": "node", "data": n} for n in leaves] +
        [{"kind": "edge", "data": e} for e in edges.values()]
    )
