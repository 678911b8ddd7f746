from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from .. import db
from ..analytics.paths import compile_prefix_patterns
from ..queries.snapshots import fetch_commits, fetch_repo_list

router = APIRouter()


@router.get("/api/repos")
def list_repos():
    return {"repos": fetch_repo_list(db.DATA_DIR)}


@router.get("/api/repos/{repo_id}/commits")
def list_commits(repo_id: str):
    conn = db.get_db(repo_id)
    commits = fetch_commits(conn)
    conn.close()
    return {"repo_id": repo_id, "commits": commits, "total": len(commits)}


@router.get("/api/repos/{repo_id}/view-config")
def get_view_config(repo_id: str):
    return db.read_view_config(repo_id)


class ViewConfigRequest(BaseModel):
    extra_prefix_patterns: Optional[list[str]] = None
    default_view_root:     Optional[str]       = None


@router.put("/api/repos/{repo_id}/view-config")
def update_view_config(repo_id: str, req: ViewConfigRequest):
    if not db.db_path(repo_id).exists():
        raise HTTPException(status_code=404, detail=f"Repo '{repo_id}' not found.")
    config = db.read_view_config(repo_id)
    if req.extra_prefix_patterns is not None:
        if len(compile_prefix_patterns(req.extra_prefix_patterns)) != len(req.extra_prefix_patterns):
            raise HTTPException(status_code=400, detail="Invalid regex in extra_prefix_patterns")
        config["extra_prefix_patterns"] = req.extra_prefix_patterns
    if req.default_view_root is not None:
        config["default_view_root"] = req.default_view_root
    db.write_view_config(repo_id, config)
    return {"ok": True, "config": config}
