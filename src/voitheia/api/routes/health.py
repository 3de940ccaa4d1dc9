"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...data.requests_repository import RequestRepository, SupabaseRequestRepository
from ...exceptions import StorageUnavailable
from ..dependencies import get_request_repository

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database(requests: RequestRepository = Depends(get_request_repository)) -> dict:
    """Report which request store is active and whether it answers."""
    backend = "supabase" if isinstance(requests, SupabaseRequestRepository) else "memory"
    try:
        open_count = len(requests.fetch_open_requests())
    except StorageUnavailable as exc:
        return {
            "backend": backend,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "backend": backend,
        "connected": True,
        "open_requests": open_count,
        "message": f"Storage reachable. Found {open_count} open request(s).",
    }
