"""
Doula JSON Backend — Collection Store
=======================================

What:  Reads and writes one JSON array per named collection.
How:   `<data_dir>/<name>.json` holds the whole collection. Every call loads
       or rewrites the entire file with async file I/O (aiofiles), so the
       event loop keeps serving other requests while the disk works.
Who:   Used by RecordService (CRUD) and the aggregate endpoint.

File lifecycle:
    missing      → first read creates it containing `[]` and returns []
    empty        → read as [] (file left untouched)
    JSON array   → returned as a list of dicts, order preserved
    anything else→ CollectionReadError, file left untouched

Known weaknesses (kept on purpose, callers must not assume otherwise):
    - No caching: each read hits the disk.
    - No locking: a read-modify-write by one request can interleave with
      another's, and the last write wins for the whole file.
    - No temp-file-then-rename: a crash mid-write can truncate the file.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles

from doula_api.config import COLLECTION_NAME_PATTERN
from doula_api.exceptions import CollectionReadError, CollectionWriteError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

EMPTY_COLLECTION = "[]"


class CollectionStore:
    """
    File-per-collection JSON storage rooted at a data directory.

    The store is stateless apart from its root path; it is safe to share one
    instance across all collections and requests.
    """

    def __init__(self, data_dir: Union[str, Path], indent: Optional[int] = 2):
        """
        Args:
            data_dir: Directory for collection files (created if missing).
            indent:   Pretty-print indent for written files.
        """
        self.data_dir = Path(data_dir).resolve()
        self.indent = indent
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info("CollectionStore initialized with data_dir=%s", self.data_dir)

    def path_for(self, name: str) -> Path:
        """Absolute path of the file backing `name`."""
        if not COLLECTION_NAME_PATTERN.match(name):
            raise ValueError(f"Invalid collection name: {name!r}")
        return self.data_dir / f"{name}.json"

    def is_writable(self) -> bool:
        return self.data_dir.is_dir() and os.access(self.data_dir, os.W_OK)

    async def read(self, name: str) -> List[Record]:
        """
        Load the full collection.

        Raises:
            CollectionReadError if the file exists but cannot be read or
            does not hold a JSON array.
        """
        path = self.path_for(name)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            await self._initialize(name, path)
            return []
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read collection %s at %s: %s", name, path, str(e))
            raise CollectionReadError(
                collection=name,
                reason="unreadable",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.error("Collection %s at %s is not valid JSON: %s", name, path, str(e))
            raise CollectionReadError(
                collection=name,
                reason="invalid JSON",
                context={"path": str(path), "parse_error": str(e)},
            ) from e

        if not isinstance(data, list):
            logger.error(
                "Collection %s at %s holds %s, expected a JSON array",
                name,
                path,
                type(data).__name__,
            )
            raise CollectionReadError(
                collection=name,
                reason="not a JSON array",
                context={"path": str(path)},
            )
        return data

    async def write(self, name: str, records: List[Record]) -> None:
        """
        Overwrite the collection file with `records`, pretty-printed.

        Raises:
            CollectionWriteError on any OS or serialization failure. The file
            may be left truncated.
        """
        path = self.path_for(name)
        try:
            payload = json.dumps(records, indent=self.indent, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise CollectionWriteError(
                collection=name,
                reason="not serializable",
                context={"path": str(path), "error": str(e)},
            ) from e

        try:
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(payload)
        except OSError as e:
            logger.error("Failed to write collection %s at %s: %s", name, path, str(e))
            raise CollectionWriteError(
                collection=name,
                reason="unwritable",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.debug("Wrote %d record(s) to %s", len(records), path.name)

    async def _initialize(self, name: str, path: Path) -> None:
        """Create a missing collection file holding an empty array."""
        try:
            # "x" fails if a concurrent request created the file first
            async with aiofiles.open(path, "x", encoding="utf-8") as f:
                await f.write(EMPTY_COLLECTION)
        except FileExistsError:
            return
        except OSError as e:
            logger.error("Failed to create collection %s at %s: %s", name, path, str(e))
            raise CollectionReadError(
                collection=name,
                reason="could not create file",
                context={"path": str(path), "os_error": str(e)},
            ) from e
        logger.info("Created empty collection file %s", path)
