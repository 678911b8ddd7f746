"""
Commit snapshot queries — DB I/O only.

Schema (written by the snapshot walker):
    commits(hash, timestamp, author, message)
    dependencies(commit_hash, source_file, target_file, relationship_type, weight)
"""
from __future__ import annotations

import sqlite3
from pathlib import Path

from ..db import row_to_dict


def fetch_repo_list(data_dir: Path) -> list[dict]:
    """Scan data_dir for snapshot stores and return basic counts for each."""
    repos = []
    for db_file in sorted(data_dir.glob("*.db")):
        repo_id = db_file.stem
        conn = sqlite3.connect(db_file)
        conn.row_factory = sqlite3.Row
        try:
            commit_count = conn.execute("SELECT COUNT(*) AS n FROM commits").fetchone()["n"]
            dep_count    = conn.execute("SELECT COUNT(*) AS n FROM dependencies").fetchone()["n"]
        except sqlite3.Error:
            continue
        finally:
            conn.close()
        repos.append({
            "id":               repo_id,
            "name":             repo_id,
            "commit_count":     commit_count,
            "dependency_count": dep_count,
            "db_path":          str(db_file),
        })
    return repos


def fetch_commits(conn: sqlite3.Connection) -> list[dict]:
    """All commits, oldest first, with their dependency counts."""
    rows = conn.execute(
        """
        SELECT c.hash, c.timestamp, c.author, c.message,
               COUNT(d.commit_hash) AS dependency_count
        FROM commits c
        LEFT JOIN dependencies d ON d.commit_hash = c.hash
        GROUP BY c.hash
        ORDER BY c.timestamp, c.hash
        """
    ).fetchall()
    return [row_to_dict(r) for r in rows]


def fetch_commit(conn: sqlite3.Connection, commit_hash: str) -> dict | None:
    row = conn.execute(
        "SELECT hash, timestamp, author, message FROM commits WHERE hash = ?",
        (commit_hash,),
    ).fetchone()
    return row_to_dict(row) if row else None


def fetch_dependencies(conn: sqlite3.Connection, commit_hash: str) -> list[dict]:
    """The dependency list of one snapshot, in insertion order."""
    rows = conn.execute(
        """
        SELECT source_file, target_file, relationship_type,
               COALESCE(weight, 1) AS weight
        FROM dependencies
        WHERE commit_hash = ?
        ORDER BY rowid
        """,
        (commit_hash,),
    ).fetchall()
    return [row_to_dict(r) for r in rows]
