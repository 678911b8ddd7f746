from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from .. import db
from ..analytics.paths import compile_prefix_patterns
from ..analytics.tree_state import CheckboxState, build_project_tree, update_checkbox_state
from ..queries.snapshots import fetch_commit, fetch_dependencies

router = APIRouter()


def load_snapshot(conn, repo_id: str, commit: str) -> list[dict]:
    """Dependencies of one stored commit; 404 when the commit is unknown."""
    if fetch_commit(conn, commit) is None:
        conn.close()
        raise HTTPException(status_code=404, detail=f"Commit '{commit}' not found in repo '{repo_id}'")
    return fetch_dependencies(conn, commit)


def prefix_patterns(repo_id: Optional[str]) -> list:
    if not repo_id:
        return []
    return compile_prefix_patterns(db.read_view_config(repo_id)["extra_prefix_patterns"])


@router.get("/api/repos/{repo_id}/commits/{commit}/tree")
def project_tree(repo_id: str, commit: str):
    conn = db.get_db(repo_id)
    deps = load_snapshot(conn, repo_id, commit)
    conn.close()
    tree = build_project_tree(deps, prefix_patterns(repo_id))
    return {"repo_id": repo_id, "commit": commit, **tree}


class CheckboxRequest(BaseModel):
    tree_state: dict[str, dict]
    node_id:    str
    state:      CheckboxState


@router.post("/api/tree/checkbox")
def set_checkbox(req: CheckboxRequest):
    """Apply one checkbox change with up/down propagation."""
    if req.node_id not in req.tree_state:
        raise HTTPException(status_code=400, detail=f"Unknown tree node: {req.node_id}")
    return {"nodes": update_checkbox_state(req.tree_state, req.node_id, req.state)}
