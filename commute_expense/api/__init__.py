"""
FastAPI Backend for Commute Expenses

Provides REST API endpoints for the expense form and the admin panel.
"""

from .main import app

__all__ = ["app"]
