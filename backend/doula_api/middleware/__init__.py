# Middleware package init
"""
Doula JSON Backend — Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID first so every log line of the request can carry it
    - Logging sees the final status code and total duration
    - CORS answers preflight OPTIONS requests before any route runs
"""
