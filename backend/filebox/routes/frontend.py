"""Serves the built single-page UI. Registered last so /api routes win."""
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse


def build_frontend_router(public_dir: Path) -> APIRouter:
    """Static files from `public_dir`, with index.html as the SPA fallback."""
    root = Path(public_dir).resolve()
    index = root / "index.html"
    router = APIRouter(tags=["frontend"])

    @router.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str):
        if full_path == "api" or full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not found")

        candidate = (root / full_path).resolve()
        if full_path and candidate.is_relative_to(root) and candidate.is_file():
            return FileResponse(candidate)
        if not index.is_file():
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(index)

    return router
