"""
FastAPI entry point.

Run with:
    uvicorn asgi:app --reload
"""

from app import create_app

app = create_app()
