"""Root-level entry point for the API.

This file allows running the API with: uvicorn main:app
Instead of: uvicorn local_auth.main:app
"""
from local_auth.main import app

__all__ = ["app"]
