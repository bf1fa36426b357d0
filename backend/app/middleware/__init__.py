# Middleware package init
"""
SnapShare Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs, error bodies and the response header
    2. Logging: one access line per request, tagged with that ID

Authentication is not middleware. It runs as per-route dependencies
(app/dependencies.py) so public routes never touch the gate.
"""
