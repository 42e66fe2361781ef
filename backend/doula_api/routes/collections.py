"""
Doula JSON Backend — Collection Route Factory
===============================================

What:  Builds the four CRUD endpoints for one collection.
How:   `make_collection_router(service)` returns an APIRouter bound to a
       RecordService. main.py calls it once per configured collection, so
       every collection shares exactly the same handler code.

Routes (for a collection named {name}):
    GET    /api/{name}        → 200 JSON array           | 500 {"error": "read error"}
    POST   /api/{name}        → 201 created record       | 500 {"error": "write error"}
    PUT    /api/{name}/{id}   → 200 merged record        | 404 / 500 {"error": "update error"}
    DELETE /api/{name}/{id}   → 200 {"success": true}    | 404 / 500 {"error": "delete error"}
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Body

from doula_api.exceptions import OperationFailedError, RecordNotFoundError
from doula_api.schemas.responses import DeleteResponse, ErrorResponse
from doula_api.services.record_service import RecordService

READ_ERROR = "read error"
WRITE_ERROR = "write error"
UPDATE_ERROR = "update error"
DELETE_ERROR = "delete error"

SERVER_ERROR = {500: {"description": "Storage failure", "model": ErrorResponse}}
NOT_FOUND = {404: {"description": "No record with this id", "model": ErrorResponse}}


@asynccontextmanager
async def failures_as(message: str, collection: str) -> AsyncIterator[None]:
    """
    Re-raise anything but RecordNotFoundError as OperationFailedError(message).

    The client only ever sees the static message; the original exception is
    chained for the server-side log.
    """
    try:
        yield
    except RecordNotFoundError:
        raise
    except Exception as exc:
        raise OperationFailedError(
            message=message,
            context={"collection": collection, "cause": repr(exc)},
        ) from exc


def make_collection_router(service: RecordService) -> APIRouter:
    """
    Create the list/create/update/delete routes for `service.name`.

    Returns:
        APIRouter mounted at /api/{name}, tagged with the collection name.
    """
    name = service.name
    router = APIRouter(prefix=f"/api/{name}", tags=[name])

    @router.get(
        "",
        summary=f"List all {name}",
        response_model=None,
        responses=SERVER_ERROR,
    )
    async def list_records() -> List[Dict[str, Any]]:
        async with failures_as(READ_ERROR, name):
            return await service.list_records()

    @router.post(
        "",
        status_code=201,
        summary=f"Create a record in {name}",
        description="Any JSON object is accepted. A missing or falsy `id` is replaced by the current epoch milliseconds.",
        responses=SERVER_ERROR,
    )
    async def create_record(
        payload: Optional[Dict[str, Any]] = Body(default=None),
    ) -> Dict[str, Any]:
        async with failures_as(WRITE_ERROR, name):
            return await service.create_record(payload or {})

    @router.put(
        "/{record_id}",
        summary=f"Merge fields into a record in {name}",
        responses={**NOT_FOUND, **SERVER_ERROR},
    )
    async def update_record(
        record_id: str,
        changes: Optional[Dict[str, Any]] = Body(default=None),
    ) -> Dict[str, Any]:
        async with failures_as(UPDATE_ERROR, name):
            return await service.update_record(record_id, changes or {})

    @router.delete(
        "/{record_id}",
        response_model=DeleteResponse,
        summary=f"Delete a record from {name}",
        responses={**NOT_FOUND, **SERVER_ERROR},
    )
    async def delete_record(record_id: str) -> DeleteResponse:
        async with failures_as(DELETE_ERROR, name):
            await service.delete_record(record_id)
        return DeleteResponse(success=True)

    return router
