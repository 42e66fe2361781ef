"""
Doula JSON Backend — Aggregate Route
======================================

What:  GET /api/all returns every configured collection in one response.
How:   Reads each collection file in turn; no shared snapshot, so the
       collections may reflect slightly different instants.
Who:   Dashboard-style clients that want everything at once.
"""

from typing import Any, Dict, List, Sequence

from fastapi import APIRouter

from doula_api.routes.collections import READ_ERROR, SERVER_ERROR, failures_as
from doula_api.services.collection_store import CollectionStore
from doula_api.services.record_service import snapshot_collections


def make_aggregate_router(store: CollectionStore, names: Sequence[str]) -> APIRouter:
    """Create the GET /api/all route over `names`."""
    router = APIRouter(prefix="/api", tags=["aggregate"])
    collection_names = list(names)

    @router.get(
        "/all",
        response_model=None,
        responses=SERVER_ERROR,
        summary="Read every collection",
        description="Object keyed by collection name. Any single read failure fails the whole request.",
    )
    async def read_all() -> Dict[str, List[Dict[str, Any]]]:
        async with failures_as(READ_ERROR, "all"):
            return await snapshot_collections(store, collection_names)

    return router
