"""
API Module

This module provides the FastAPI application and all REST endpoints
for the light logger.

To run the API server:
    uvicorn lightlogger.api.main:app --reload

Or use the convenience script:
    python -m lightlogger.api.main
"""

from .main import app, create_app

__all__ = ['app', 'create_app']
