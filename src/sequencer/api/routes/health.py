"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/matrix", status_code=status.HTTP_200_OK)
def health_matrix() -> dict:
    """Report whether the stored changeover matrix can be read."""
    from ...data.matrix_repository import load_matrix_entries

    if settings.matrix_file is None:
        return {"configured": False, "entries": 0}
    try:
        entries = load_matrix_entries()
        return {"configured": True, "healthy": True, "entries": len(entries)}
    except (FileNotFoundError, ValueError) as exc:
        return {"configured": True, "healthy": False, "error": str(exc)}
