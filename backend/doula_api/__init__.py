"""
Doula JSON Backend — Application Package Initializer
====================================================

What: Marks the `doula_api` directory as a Python package.
Who:  Imported by uvicorn (`doula_api.main:app`), the console script, and pytest.

Architecture Note:
    The backend is a thin CRUD layer over flat JSON files:

    ┌─────────────────────────────────────┐
    │      Routes (generated per name)    │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   RecordService (one per collection)│  ← id assignment, merge, match
    ├─────────────────────────────────────┤
    │         CollectionStore             │  ← one JSON array file per name
    └─────────────────────────────────────┘

    Every collection (bookings, doulas, services, paychecks) runs through the
    same three layers; nothing in the stack knows a collection by name.
"""

__version__ = "1.0.0"
