"""
Chronograph — FastAPI Backend
Serves level-of-detail dependency graphs from exported commit snapshots.
"""
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from .routers import commit_diff, repos, tree, tree_graph

app = FastAPI(title="Chronograph API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(repos.router)
app.include_router(tree.router)
app.include_router(tree_graph.router)
app.include_router(commit_diff.router)


# ── Serve frontend (must be last) ───────────────────────────────────────────

FRONTEND_DIST = Path(__file__).parent.parent / "frontend" / "dist"

if FRONTEND_DIST.exists():
    app.mount("/assets", StaticFiles(directory=FRONTEND_DIST / "assets"), name="assets")

    @app.get("/{full_path:path}")
    async def serve_spa(full_path: str):
        """Serve the SPA — return index.html for all non-API routes."""
        return FileResponse(FRONTEND_DIST / "index.html")
