from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from .. import db
from ..analytics.commit_diff import REMOVED, calculate_dependency_diff, get_diff_summary
from ..analytics.graph_stats import compute_tree_graph_stats
from ..analytics.tree_graph import transform_to_tree_graph
from ..analytics.view_root import filter_dependencies_for_view_root
from .tree import load_snapshot, prefix_patterns

router = APIRouter()


class TreeGraphRequest(BaseModel):
    commit:     str
    tree_state: dict[str, dict]
    compare_to: Optional[str] = None
    view_root:  Optional[str] = None


class DependencyDiffBody(BaseModel):
    added:     list[dict] = []
    removed:   list[dict] = []
    unchanged: list[dict] = []


class InlineTreeGraphRequest(BaseModel):
    dependencies: list[dict]
    tree_state:   dict[str, dict]
    diff:         Optional[DependencyDiffBody] = None
    repo_id:      Optional[str]                = None


def _respond(result: dict, **extra) -> dict:
    return {
        **extra,
        "elements":    result["elements"],
        "diagnostics": result["diagnostics"],
        "stats":       compute_tree_graph_stats(result["elements"]),
    }


@router.post("/api/repos/{repo_id}/tree-graph")
def repo_tree_graph(repo_id: str, req: TreeGraphRequest):
    """
    Level-of-detail graph for a stored commit.

    With compare_to, the older commit's removed dependencies are drawn too
    and every edge carries a diff status.
    """
    conn = db.get_db(repo_id)
    deps = load_snapshot(conn, repo_id, req.commit)
    diff = summary = None
    if req.compare_to:
        older = load_snapshot(conn, repo_id, req.compare_to)
        diff = calculate_dependency_diff(older, deps)
        summary = get_diff_summary(diff, older, deps)
        deps = deps + diff[REMOVED]
    conn.close()

    patterns  = prefix_patterns(repo_id)
    view_root = req.view_root or db.read_view_config(repo_id)["default_view_root"]
    scoped = filter_dependencies_for_view_root(deps, view_root, patterns)
    result = transform_to_tree_graph(scoped["filtered"], req.tree_state, diff, patterns)
    return _respond(
        result,
        repo_id=repo_id,
        commit=req.commit,
        compare_to=req.compare_to,
        view_root=view_root,
        filter_strategy=scoped["strategy"],
        diff_summary=summary,
    )


@router.post("/api/tree-graph")
def tree_graph(req: InlineTreeGraphRequest):
    """Level-of-detail graph for caller-supplied dependencies and tree state."""
    diff = req.diff.model_dump() if req.diff is not None else None
    result = transform_to_tree_graph(req.dependencies, req.tree_state, diff, prefix_patterns(req.repo_id))
    return _respond(result)
