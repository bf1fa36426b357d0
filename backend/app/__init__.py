"""
SnapShare Backend — Application Package Initializer
===================================================

What: Marks the `app` directory as a Python package.
Why:  Enables module imports like `from app.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is the authentication/authorization core of the photo-sharing
    API, laid out in the same layers as the rest of the service:

    ┌─────────────────────────────────────┐
    │     Routes + Dependencies (HTTP)    │  ← status codes, header parsing
    ├─────────────────────────────────────┤
    │  Services (hasher, tokens, gate,    │  ← credential and access rules
    │  credential store, auth workflow)   │
    ├─────────────────────────────────────┤
    │       Schemas & Models (Data)       │  ← Pydantic records + SQLAlchemy table
    ├─────────────────────────────────────┤
    │   Repositories (user persistence)   │  ← in-memory or async SQLAlchemy
    └─────────────────────────────────────┘

    Routes never touch a repository directly; they call AuthService or the
    gate dependencies, which receive their collaborators at construction.
"""

__version__ = "1.0.0"
