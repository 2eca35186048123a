"""
Book Catalog Backend — Application Package Initializer
======================================================

What: Marks the `bookcatalog` directory as a Python package.
Why:  Enables module imports like `from bookcatalog.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Queries & Mapping)      │  ← Existence checks, search dispatch
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP into service calls, services own every query and
    the book/category composition, and the database layer only manages
    connection lifecycle.
"""

__version__ = "1.0.0"
