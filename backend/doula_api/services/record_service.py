"""
Doula JSON Backend — Record Service
=====================================

What:  CRUD semantics for a single collection: list, create, update, delete.
How:   Each operation reads the whole collection through CollectionStore,
       mutates the in-memory list, and writes it back in full.
Who:   One instance per collection, built by the route factory.

Id rules:
    - Create keeps a truthy supplied `id` verbatim; otherwise the record gets
      the current epoch time in milliseconds.
    - Update/delete compare ids numerically on both sides (see `to_number`),
      so "5" and 5 address the same record and non-numeric ids never match.
    - Uniqueness is not enforced at insert time.

Concurrency:
    There is no lock between the read and the write of an operation. Two
    concurrent creates can both read the same list and the second write
    drops the first record.
"""

import logging
import math
import re
import time
from typing import Any, Dict, Iterable, List

from doula_api.exceptions import RecordNotFoundError
from doula_api.services.collection_store import CollectionStore, Record

logger = logging.getLogger(__name__)

_MISSING = object()

_DECIMAL_LITERAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_PREFIXED_LITERAL = re.compile(r"^0([xXoObB])([0-9a-fA-F]+)$")
_PREFIX_BASES = {"x": 16, "o": 8, "b": 2}


def to_number(value: Any) -> float:
    """
    Coerce an id to a number the way a JavaScript `Number(value)` call would.

    Returns NaN for anything that is not numeric, so comparisons against it
    are always False.
    """
    if value is _MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if not isinstance(value, str):
        return math.nan

    text = value.strip()
    if not text:
        return 0.0
    if _DECIMAL_LITERAL.match(text):
        return float(text)
    if text in ("Infinity", "+Infinity"):
        return math.inf
    if text == "-Infinity":
        return -math.inf
    prefixed = _PREFIXED_LITERAL.match(text)
    if prefixed:
        try:
            parsed = int(prefixed.group(2), _PREFIX_BASES[prefixed.group(1).lower()])
        except ValueError:
            return math.nan
        try:
            return float(parsed)
        except OverflowError:
            return math.inf
    return math.nan


def ids_match(record: Any, wanted: float) -> bool:
    # NaN != NaN, so non-numeric ids never match; non-object elements have no id
    if not isinstance(record, dict):
        return False
    return to_number(record.get("id", _MISSING)) == wanted


def needs_generated_id(value: Any) -> bool:
    """True for a missing id or one of the JSON values JavaScript treats as falsy."""
    if value is _MISSING or value is None or value is False or value == "":
        return True
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0


def current_millis() -> int:
    return int(time.time() * 1000)


class RecordService:
    """
    Collection-level operations for one named collection.

    Stateless beyond its name and store; every call is a fresh
    read-modify-write against the backing file.
    """

    def __init__(self, name: str, store: CollectionStore):
        self.name = name
        self.store = store

    async def list_records(self) -> List[Record]:
        return await self.store.read(self.name)

    async def create_record(self, payload: Dict[str, Any]) -> Record:
        """
        Append `payload` as a new record.

        The body is not validated; any JSON object is accepted as-is.
        Returns the stored record (with its id populated).
        """
        records = await self.store.read(self.name)
        record = dict(payload)
        if needs_generated_id(record.get("id", _MISSING)):
            record["id"] = current_millis()
        records.append(record)
        await self.store.write(self.name, records)
        logger.info("Created %s record id=%s", self.name, record["id"])
        return record

    async def delete_record(self, record_id: str) -> None:
        """
        Remove every record whose id matches `record_id` numerically.

        Raises:
            RecordNotFoundError if nothing matched (file left untouched).
        """
        wanted = to_number(record_id)
        records = await self.store.read(self.name)
        remaining = [record for record in records if not ids_match(record, wanted)]
        if len(remaining) == len(records):
            raise RecordNotFoundError(collection=self.name, record_id=record_id)
        await self.store.write(self.name, remaining)
        logger.info(
            "Deleted %d %s record(s) id=%s",
            len(records) - len(remaining),
            self.name,
            record_id,
        )

    async def update_record(self, record_id: str, changes: Dict[str, Any]) -> Record:
        """
        Shallow-merge `changes` onto the first record matching `record_id`.

        Fields in `changes` win, except `id`, which stays as stored.

        Raises:
            RecordNotFoundError if nothing matched.
        """
        wanted = to_number(record_id)
        records = await self.store.read(self.name)
        for index, existing in enumerate(records):
            if ids_match(existing, wanted):
                merged = {**existing, **changes, "id": existing["id"]}
                records[index] = merged
                await self.store.write(self.name, records)
                logger.info("Updated %s record id=%s", self.name, merged["id"])
                return merged
        raise RecordNotFoundError(collection=self.name, record_id=record_id)


async def snapshot_collections(
    store: CollectionStore, names: Iterable[str]
) -> Dict[str, List[Record]]:
    """
    Read every named collection, one after another.

    Not a consistent snapshot: each file is read at a slightly different
    instant. Any single read failure propagates.
    """
    return {name: await store.read(name) for name in names}
