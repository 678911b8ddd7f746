"""
Visible-graph statistics — pure functions only.

Summarizes a tree graph element list: sizes, nesting depth, diff counts and
dependency cycles among the nodes currently on screen.
"""
from __future__ import annotations

import networkx as nx


def split_elements(elements: list[dict]) -> tuple[list[dict], list[dict]]:
    nodes = [e["data"] for e in elements if e.get("kind") == "node"]
    edges = [e["data"] for e in elements if e.get("kind") == "edge"]
    return nodes, edges


def containment_graph(nodes: list[dict]) -> nx.DiGraph:
    """parent -> child DiGraph of the compound containment."""
    G = nx.DiGraph()
    for n in nodes:
        G.add_node(n["id"])
    for n in nodes:
        if n.get("parent"):
            G.add_edge(n["parent"], n["id"])
    return G


def dependency_graph(nodes: list[dict], edges: list[dict]) -> nx.DiGraph:
    G = nx.DiGraph()
    for n in nodes:
        G.add_node(n["id"])
    for e in edges:
        G.add_edge(e["source"], e["target"], weight=e.get("weight", 1))
    return G


def find_visible_cycles(nodes: list[dict], edges: list[dict], max_results: int = 20) -> list[dict]:
    """Strongly connected groups of visible nodes (size > 1), largest first."""
    G = dependency_graph(nodes, edges)
    sccs = [scc for scc in nx.strongly_connected_components(G) if len(scc) > 1]

    results = []
    for scc in sorted(sccs, key=len, reverse=True)[:max_results]:
        intra = [(u, v, d) for u, v, d in G.edges(scc, data=True) if v in scc]
        weakest = min(intra, key=lambda e: e[2].get("weight", 0)) if intra else None
        results.append({
            "size":  len(scc),
            "nodes": sorted(scc),
            "break_suggestion": {
                "source": weakest[0],
                "target": weakest[1],
                "weight": weakest[2].get("weight", 0),
            } if weakest else None,
        })
    return results


def compute_tree_graph_stats(elements: list[dict]) -> dict:
    nodes, edges = split_elements(elements)
    containers = [n for n in nodes if not n.get("is_leaf")]

    # container levels on the longest parent chain
    C = containment_graph(containers)
    max_depth = nx.dag_longest_path_length(C) + 1 if containers else 0

    diff_counts: dict[str, int] = {}
    for e in edges:
        status = e.get("diff_status")
        if status:
            diff_counts[status] = diff_counts.get(status, 0) + 1

    return {
        "containers":      len(containers),
        "leaves":          len(nodes) - len(containers),
        "edges":           len(edges),
        "total_weight":    sum(e.get("weight", 0) for e in edges),
        "nesting_depth":   max_depth,
        "diff":            diff_counts,
        "changed_nodes":   sum(1 for n in nodes if n.get("has_changes")),
        "cycles":          find_visible_cycles(nodes, edges),
    }
