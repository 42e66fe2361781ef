# Routes package init
"""
Doula JSON Backend — API Routes Package
=========================================

Route Inventory:
    - collections.py: make_collection_router(): GET/POST /api/{name},
                      PUT/DELETE /api/{name}/{id}, one router per collection
    - aggregate.py:   GET /api/all
    - health.py:      GET /health

Routes stay thin: they translate failures into the static error messages
and leave record handling to RecordService.
"""
