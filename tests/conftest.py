"""
Shared fixtures and helpers for chronograph tests.

Analytics tests are pure: dependencies and tree states are built in memory.
Router tests run against throwaway SQLite snapshot stores in tmp_path.
"""
import sqlite3
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from chronograph.analytics.tree_state import CheckboxState  # noqa: E402


# --------------------------------------------------------------------------
# Builders
# --------------------------------------------------------------------------

def dep(source, target, rel="imports", weight=None):
    d = {"source_file": source, "target_file": target, "relationship_type": rel}
    if weight is not None:
        d["weight"] = weight
    return d


def tree_state(states: dict[str, str], files: set[str] = frozenset()) -> dict[str, dict]:
    """
    Minimal tree state from {id: state}.  Ids listed in `files` are files,
    every other id is a folder.  Parents are derived from the path.
    """
    nodes = {}
    for node_id, state in states.items():
        parts = node_id.split("/")
        nodes[node_id] = {
            "id":             node_id,
            "label":          parts[-1],
            "type":           "file" if node_id in files else "folder",
            "parent":         "/".join(parts[:-1]) or None,
            "children":       [],
            "checkbox_state": CheckboxState(state),
        }
    return nodes


def node_elements(result: dict) -> dict[str, dict]:
    return {e["data"]["id"]: e["data"] for e in result["elements"] if e["kind"] == "node"}


def edge_elements(result: dict) -> dict[str, dict]:
    return {e["data"]["id"]: e["data"] for e in result["elements"] if e["kind"] == "edge"}


# --------------------------------------------------------------------------
# Snapshot store fixtures
# --------------------------------------------------------------------------

SCHEMA = """
CREATE TABLE commits (
    hash      TEXT PRIMARY KEY,
    timestamp INTEGER,
    author    TEXT,
    message   TEXT
);
CREATE TABLE dependencies (
    commit_hash       TEXT,
    source_file       TEXT,
    target_file       TEXT,
    relationship_type TEXT,
    weight            INTEGER
);
"""


def write_store(path: Path, commits: dict[str, list[dict]]) -> None:
    """Write a snapshot store: {commit_hash: [dependency, ...]} in commit order."""
    conn = sqlite3.connect(path)
    conn.executescript(SCHEMA)
    for i, (commit_hash, deps) in enumerate(commits.items()):
        conn.execute(
            "INSERT INTO commits VALUES (?, ?, ?, ?)",
            (commit_hash, 1_700_000_000 + i, "dev", f"commit {i}"),
        )
        conn.executemany(
            "INSERT INTO dependencies VALUES (?, ?, ?, ?, ?)",
            [
                (commit_hash, d["source_file"], d["target_file"],
                 d["relationship_type"], d.get("weight", 1))
                for d in deps
            ],
        )
    conn.commit()
    conn.close()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point chronograph.db at an empty temporary data dir."""
    from chronograph import db
    monkeypatch.setattr(db, "DATA_DIR", tmp_path)
    monkeypatch.setattr(db, "CONFIG_DIR", tmp_path)
    return tmp_path
