"""
Microposts Backend - Application Package Initializer
=====================================================

What: Marks the `microposts` directory as a Python package.
Who:  Used by uvicorn (`microposts.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Middleware (Identity, Logging)    │  ← Per-request context
    ├─────────────────────────────────────┤
    │       Services (Use Cases)          │  ← Registration, follows, posts
    ├─────────────────────────────────────┤
    │     Repositories (Row Store)        │  ← get/create/update/delete by id
    ├─────────────────────────────────────┤
    │   Models & Schemas / Database       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never build responses.
"""

__version__ = "1.0.0"
