from fastapi import APIRouter, Query

from .. import db
from ..analytics.commit_diff import calculate_dependency_diff, get_diff_summary
from .tree import load_snapshot

router = APIRouter()


@router.get("/api/repos/{repo_id}/commit-diff")
def commit_diff(
    repo_id:     str,
    from_commit: str = Query(...),
    to_commit:   str = Query(...),
    limit:       int = Query(100, ge=0, le=1000),
):
    conn = db.get_db(repo_id)
    deps_a = load_snapshot(conn, repo_id, from_commit)
    deps_b = load_snapshot(conn, repo_id, to_commit)
    conn.close()
    diff = calculate_dependency_diff(deps_a, deps_b)
    return {
        "repo_id":     repo_id,
        "from_commit": from_commit,
        "to_commit":   to_commit,
        "summary":     get_diff_summary(diff, deps_a, deps_b),
        "added":       diff["added"][:limit],
        "removed":     diff["removed"][:limit],
    }
