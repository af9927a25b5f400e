"""
CV Site Backend — Application Package Initializer
===================================================

What: Marks the `cvsite` directory as a Python package.
Who:  Imported by uvicorn (`cvsite.main:app`), Alembic and pytest.

Package Layout:

    ┌─────────────────────────────────────┐
    │      Routes (API Layer)             │  ← health + mounted resources
    ├─────────────────────────────────────┤
    │      CRUD route builder             │  ← verb → handler chains
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database (Persistence)         │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    store/  Resume section store: a pure reducer with no HTTP or DB access.
"""

__version__ = "1.0.0"
