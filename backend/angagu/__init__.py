"""
ANGAGU Backend — Application Package Initializer
=================================================

What: Marks the `angagu` directory as a Python package.
Who:  Used by uvicorn (`uvicorn angagu.main:app`), Alembic and pytest.

Architecture Note:
    The backend is split into the same layers for every principal
    (customer, company, admin):

    ┌─────────────────────────────────────┐
    │      Routes (customer/company/admin)│  ← validate → call service → envelope
    ├─────────────────────────────────────┤
    │   Services (ServiceResult per call) │  ← one method per query/mutation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never talk to the database directly; services never build HTTP
    responses. The status tag of a ServiceResult is the only contract
    between the two layers.
"""

__version__ = "1.0.0"
