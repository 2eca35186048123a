"""
Book Catalog Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - books.py:       GET/POST /books, GET/PUT/DELETE /books/{id}
    - categories.py:  GET/POST /categories, GET/PUT/DELETE /categories/{id}
    - health.py:      GET /health, GET /

Design Principle:
    Routes are thin: they extract path/query/body data, call a service with
    the request's database session, and pick the status code. Validation
    failures and service exceptions are turned into responses by the global
    handlers in main.py.
"""
