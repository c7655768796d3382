"""
API module for FastAPI routes.

Each route module defines a FastAPI APIRouter that is mounted by
``api.app.create_app``.
"""
