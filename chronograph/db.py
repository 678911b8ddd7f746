"""
Database and config helpers shared across queries and routers.
No analysis logic lives here — only I/O primitives.
"""
import json
import os
import sqlite3
from pathlib import Path

from fastapi import HTTPException

DATA_DIR = Path(os.environ.get("CHRONOGRAPH_DATA_DIR", Path(__file__).parent.parent / "data"))
CONFIG_DIR = DATA_DIR  # view configs stored alongside .db files

DEFAULT_VIEW_CONFIG = {"extra_prefix_patterns": [], "default_view_root": "/"}


def row_to_dict(row) -> dict:
    return dict(row)


def db_path(repo_id: str) -> Path:
    return DATA_DIR / f"{repo_id}.db"


def get_db(repo_id: str) -> sqlite3.Connection:
    path = db_path(repo_id)
    if not path.exists():
        raise HTTPException(
            status_code=404,
            detail=f"Repo '{repo_id}' not found. Export its snapshots to data/{repo_id}.db first.",
        )
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


# ── View config ──────────────────────────────────────────────────────────────

def view_config_path(repo_id: str) -> Path:
    return CONFIG_DIR / f"{repo_id}.view.json"


def read_view_config(repo_id: str) -> dict:
    p = view_config_path(repo_id)
    if p.exists():
        return {**DEFAULT_VIEW_CONFIG, **json.loads(p.read_text())}
    return dict(DEFAULT_VIEW_CONFIG)


def write_view_config(repo_id: str, config: dict) -> None:
    view_config_path(repo_id).write_text(json.dumps(config, indent=2))
