"""
Noteful Backend — Application Package Initializer
==================================================

What: Marks the `noteful` directory as a Python package.
Who:  Imported by uvicorn (`noteful.main:app`), Alembic, pytest, and the seed script.

Architecture Note:
    The backend is split into layers, each depending only on the ones below it:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │   Services (Ownership, Cascade,     │  ← Business rules, reference integrity
    │   Request Validation, Orchestration)│
    ├─────────────────────────────────────┤
    │   Repositories, Models & Schemas    │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every folder, tag, and note row carries an owning user id. The store has no
    foreign keys between notes and folders/tags; the ownership validator in
    `noteful.services.ownership` and the cascade coordinator keep those references honest.
"""

__version__ = "1.0.0"
