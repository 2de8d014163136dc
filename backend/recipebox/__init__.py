"""
RecipeBox Backend — Application Package Initializer
====================================================

What: Marks the `recipebox` directory as a Python package.
Why:  Enables module imports like `from recipebox.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows a thin layered architecture:

    ┌─────────────────────────────────────┐
    │   Routes (JSON API + HTML views)    │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    Storage Adapter (interface)      │  ← read/list/search/create/update/delete
    ├─────────────────────────────────────┤
    │  memory │ mongodb │ sql (variants)  │  ← one shared connection per process
    └─────────────────────────────────────┘

    Routes never talk to a driver directly. Each handler makes exactly one
    Storage Adapter call and turns the outcome into a JSON body, a rendered
    template, or a redirect. Errors travel as typed exceptions and are turned
    into status codes by the handlers registered in main.py.
"""

__version__ = "1.0.0"
