"""
Doula JSON Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for collection storage faults and
       unknown record ids.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"error": "<static text>"}` bodies with the right status code.

Exception Hierarchy:
    DoulaApiError (base)
    ├── StorageError
    │   ├── CollectionReadError   → file present but unreadable / not a JSON array
    │   └── CollectionWriteError  → file could not be written
    ├── RecordNotFoundError       → 404 Not Found
    └── OperationFailedError      → 500 Internal Server Error

    StorageError never reaches the client directly: route handlers re-raise
    it as OperationFailedError carrying the static per-operation message
    ("read error", "write error", "update error", "delete error").
"""

from typing import Any, Dict, Optional


class DoulaApiError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Short description (only the static operation messages are
                  ever returned to clients)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class StorageError(DoulaApiError):
    """Raised when a collection file cannot be read or written."""

    def __init__(
        self,
        message: str = "Collection storage operation failed",
        collection: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if collection:
            ctx["collection"] = collection
        super().__init__(message=message, context=ctx)
        self.collection = collection


class CollectionReadError(StorageError):
    """
    The collection file exists but could not be loaded.

    When:    Permission denied, I/O error, invalid JSON, or valid JSON that is
             not an array.
    Recovery: None. The file is left as-is for an operator to inspect.
    A *missing* file is not an error; the store creates it as `[]`.
    """

    def __init__(
        self,
        collection: Optional[str] = None,
        reason: str = "unreadable",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(
            message=f"Could not read collection '{collection}': {reason}",
            collection=collection,
            context=ctx,
        )


class CollectionWriteError(StorageError):
    """
    The collection file could not be written.

    Writes truncate and rewrite the whole file, so a failure part-way
    through can leave it truncated. Nothing is retried or rolled back.
    """

    def __init__(
        self,
        collection: Optional[str] = None,
        reason: str = "unwritable",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(
            message=f"Could not write collection '{collection}': {reason}",
            collection=collection,
            context=ctx,
        )


class RecordNotFoundError(DoulaApiError):
    """
    Raised when update/delete finds no record with the requested id.

    HTTP:    404 Not Found, body `{"error": "not found"}`
    """

    def __init__(
        self,
        collection: Optional[str] = None,
        record_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if collection:
            ctx["collection"] = collection
        if record_id is not None:
            ctx["record_id"] = record_id
        super().__init__(
            message=f"Record '{record_id}' was not found in '{collection}'",
            context=ctx,
        )
        self.collection = collection
        self.record_id = record_id


class OperationFailedError(DoulaApiError):
    """
    A collection operation failed for any reason other than a missing id.

    HTTP:    500 Internal Server Error, body `{"error": <message>}`
    The message is one of the static operation texts; the original
    exception is chained as `__cause__` and only logged.
    """

    def __init__(
        self,
        message: str = "internal error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
