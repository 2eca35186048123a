"""
Book Catalog Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: assigns the correlation ID used in logs and error bodies
    2. Logging: one access line per request, tagged with that ID

    Responses travel back through the chain in reverse, so the access log
    sees the final status code and the request ID lands in the headers.
"""
