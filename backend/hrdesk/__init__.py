"""
HR Desk Backend - Application Package
=====================================

What: Two independent JSON backends sharing one codebase:
      an attendance clock-in/out tracker and a recruitment applicant-tracking system.
Who:  Imported by uvicorn (hrdesk.main:attendance_app / hrdesk.main:recruitment_app),
      Alembic, and pytest.

Architecture Note:
    Both applications follow the same layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, aggregation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Persistence                       │  ← Async SQLAlchemy (attendance)
    │                                     │    In-memory store (recruitment)
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
