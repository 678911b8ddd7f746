"""
Router tests — FastAPI TestClient against a temporary snapshot store.

Each test writes its own data/<repo>.db into tmp_path; no server required.
"""
import json
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient

from chronograph.main import app
from conftest import dep, write_store

C1 = [
    dep("lib/main.dart",           "lib/ui/home/home_screen.dart"),
    dep("lib/ui/home/home_screen.dart", "lib/data/repo/user_repo.dart", weight=2),
    dep("test/home_test.dart",     "lib/ui/home/home_screen.dart"),
]
C2 = [
    dep("lib/main.dart",           "lib/ui/home/home_screen.dart"),
    dep("lib/ui/home/home_screen.dart", "lib/data/repo/user_repo.dart", weight=2),
    dep("lib/ui/login/login.dart", "lib/data/repo/auth_repo.dart"),
]


@pytest.fixture
def client(data_dir):
    write_store(data_dir / "sample.db", {"c1": C1, "c2": C2})
    return TestClient(app)


def lib_expanded(client):
    tree = client.get("/api/repos/sample/commits/c1/tree").json()
    return client.post(
        "/api/tree/checkbox",
        json={"tree_state": tree["nodes"], "node_id": "lib", "state": "checked"},
    ).json()["nodes"]


class TestRepos:
    def test_list_repos(self, client):
        repos = client.get("/api/repos").json()["repos"]
        assert [r["id"] for r in repos] == ["sample"]
        assert repos[0]["commit_count"] == 2
        assert repos[0]["dependency_count"] == 6

    def test_unreadable_store_skipped(self, client, data_dir):
        (data_dir / "broken.db").write_text("not a database")
        repos = client.get("/api/repos").json()["repos"]
        assert [r["id"] for r in repos] == ["sample"]

    def test_list_commits(self, client):
        body = client.get("/api/repos/sample/commits").json()
        assert [c["hash"] for c in body["commits"]] == ["c1", "c2"]
        assert body["commits"][0]["dependency_count"] == 3

    def test_unknown_repo(self, client):
        assert client.get("/api/repos/missing/commits").status_code == 404


class TestTree:
    def test_default_tree(self, client):
        body = client.get("/api/repos/sample/commits/c1/tree").json()
        assert body["root_id"] == "app"
        assert body["nodes"]["lib"]["checkbox_state"] == "half-checked"
        assert body["nodes"]["lib/ui"]["checkbox_state"] == "unchecked"

    def test_unknown_commit(self, client):
        assert client.get("/api/repos/sample/commits/nope/tree").status_code == 404

    def test_checkbox_update(self, client):
        nodes = lib_expanded(client)
        assert nodes["lib"]["checkbox_state"] == "checked"
        assert nodes["lib/ui"]["checkbox_state"] == "half-checked"

    def test_checkbox_unknown_node(self, client):
        resp = client.post("/api/tree/checkbox", json={"tree_state": {}, "node_id": "x", "state": "checked"})
        assert resp.status_code == 400

    def test_checkbox_invalid_state(self, client):
        resp = client.post("/api/tree/checkbox", json={"tree_state": {}, "node_id": "x", "state": "maybe"})
        assert resp.status_code == 422


class TestTreeGraph:
    def test_stored_commit(self, client):
        body = client.post(
            "/api/repos/sample/tree-graph",
            json={"commit": "c2", "tree_state": lib_expanded(client)},
        ).json()
        edges = {e["data"]["id"]: e["data"] for e in body["elements"] if e["kind"] == "edge"}
        assert set(edges) == {"lib/main.dart->lib/ui", "lib/ui->lib/data"}
        assert edges["lib/ui->lib/data"]["weight"] == 3
        assert body["stats"]["edges"] == 2
        assert body["filter_strategy"] == "root-show-all"

    def test_compare_to_marks_changes(self, client):
        body = client.post(
            "/api/repos/sample/tree-graph",
            json={"commit": "c2", "compare_to": "c1", "tree_state": lib_expanded(client)},
        ).json()
        edges = {e["data"]["id"]: e["data"] for e in body["elements"] if e["kind"] == "edge"}
        nodes = {e["data"]["id"]: e["data"] for e in body["elements"] if e["kind"] == "node"}
        assert edges["lib/ui->lib/data"]["diff_status"] == "added"
        assert edges["lib/main.dart->lib/ui"]["diff_status"] == "unchanged"
        assert edges["test->lib/ui"]["diff_status"] == "removed"
        assert nodes["lib"]["has_changes"] is True
        assert body["diff_summary"]["added_count"] == 1
        assert body["diff_summary"]["removed_count"] == 1

    def test_view_root(self, client):
        body = client.post(
            "/api/repos/sample/tree-graph",
            json={"commit": "c2", "tree_state": lib_expanded(client), "view_root": "lib/ui"},
        ).json()
        assert body["filter_strategy"] == "no-internal-dependencies"
        assert body["elements"][0]["data"]["id"] in ("app", "lib")

    def test_view_config_extra_prefix(self, client, data_dir):
        write_store(data_dir / "prefixed.db", {"c1": [
            dep("/home/ci/work/lib/main.dart", "/home/ci/work/lib/ui/a.dart"),
            dep("/home/ci/work/test/a_test.dart", "/home/ci/work/lib/main.dart"),
        ]})
        (data_dir / "prefixed.view.json").write_text(json.dumps(
            {"extra_prefix_patterns": [r"^home/ci/work/"]}
        ))
        tree = client.get("/api/repos/prefixed/commits/c1/tree").json()
        assert tree["root_id"] == "app"
        body = client.post(
            "/api/repos/prefixed/tree-graph",
            json={"commit": "c1", "tree_state": tree["nodes"]},
        ).json()
        edges = [e["data"]["id"] for e in body["elements"] if e["kind"] == "edge"]
        assert edges == ["test->lib"]

    def test_inline(self, client):
        tree_state = {
            "lib":      {"id": "lib", "label": "lib", "type": "folder", "checkbox_state": "checked"},
            "lib/data": {"id": "lib/data", "label": "data", "type": "folder", "checkbox_state": "half-checked"},
            "lib/main.dart": {"id": "lib/main.dart", "label": "main.dart", "type": "file",
                              "checkbox_state": "checked"},
        }
        added = dep("lib/data/api/client.dart", "lib/main.dart")
        body = client.post("/api/tree-graph", json={
            "dependencies": [added],
            "tree_state":   tree_state,
            "diff":         {"added": [added]},
        }).json()
        edge = [e["data"] for e in body["elements"] if e["kind"] == "edge"][0]
        assert edge["id"] == "lib/data->lib/main.dart"
        assert edge["diff_status"] == "added"
        assert body["diagnostics"] == []


class TestCommitDiff:
    def test_summary(self, client):
        body = client.get(
            "/api/repos/sample/commit-diff",
            params={"from_commit": "c1", "to_commit": "c2"},
        ).json()
        assert body["summary"]["added_count"] == 1
        assert body["summary"]["removed_count"] == 1
        assert body["summary"]["unchanged_count"] == 2
        assert body["added"][0]["target_file"] == "lib/data/repo/auth_repo.dart"

    def test_unknown_commit(self, client):
        resp = client.get(
            "/api/repos/sample/commit-diff",
            params={"from_commit": "c1", "to_commit": "zzz"},
        )
        assert resp.status_code == 404


class TestViewConfig:
    def test_defaults(self, client):
        assert client.get("/api/repos/sample/view-config").json() == {
            "extra_prefix_patterns": [], "default_view_root": "/",
        }

    def test_update_persists(self, client, data_dir):
        resp = client.put("/api/repos/sample/view-config", json={"default_view_root": "lib/ui"})
        assert resp.json()["config"]["default_view_root"] == "lib/ui"
        assert json.loads((data_dir / "sample.view.json").read_text())["default_view_root"] == "lib/ui"
        body = client.post(
            "/api/repos/sample/tree-graph",
            json={"commit": "c2", "tree_state": lib_expanded(client)},
        ).json()
        assert body["view_root"] == "lib/ui"

    def test_invalid_pattern(self, client):
        resp = client.put("/api/repos/sample/view-config", json={"extra_prefix_patterns": ["("]})
        assert resp.status_code == 400

    def test_unknown_repo(self, client):
        assert client.put("/api/repos/missing/view-config", json={}).status_code == 404

    def test_view_root_with_configured_prefix(self, client, data_dir):
        write_store(data_dir / "ci.db", {"c1": [
            dep("/ci/work/proj/lib/a.dart", "/ci/work/proj/lib/b.dart"),
            dep("/ci/work/proj/lib/b.dart", "/ci/work/proj/lib/c.dart"),
        ]})
        client.put("/api/repos/ci/view-config", json={"extra_prefix_patterns": [r"^ci/work/proj/"]})
        tree = client.get("/api/repos/ci/commits/c1/tree").json()
        assert tree["root_id"] == "lib"
        body = client.post(
            "/api/repos/ci/tree-graph",
            json={"commit": "c1", "tree_state": tree["nodes"], "view_root": "lib"},
        ).json()
        edges = [e["data"]["id"] for e in body["elements"] if e["kind"] == "edge"]
        assert body["filter_strategy"] == "internal-only"
        assert sorted(edges) == ["lib/a.dart->lib/b.dart", "lib/b.dart->lib/c.dart"]


class TestCommitDiffLimit:
    def test_negative_limit_rejected(self, client):
        resp = client.get(
            "/api/repos/sample/commit-diff",
            params={"from_commit": "c1", "to_commit": "c2", "limit": -1},
        )
        assert resp.status_code == 422

    def test_zero_limit_keeps_summary(self, client):
        body = client.get(
            "/api/repos/sample/commit-diff",
            params={"from_commit": "c1", "to_commit": "c2", "limit": 0},
        ).json()
        assert body["added"] == []
        assert body["summary"]["added_count"] == 1
