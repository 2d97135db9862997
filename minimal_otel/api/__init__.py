"""API - FastAPI application factory and routes"""
from .main import create_app

__all__ = ["create_app"]
