# Services package init
"""
Doula JSON Backend — Services Layer
=====================================

What:  Persistence and CRUD logic sitting between routes (HTTP) and the disk.

Service Inventory:
    - CollectionStore: whole-file JSON array read/write per collection
    - RecordService: list/create/update/delete for one collection
    - snapshot_collections: read several collections for GET /api/all
"""
