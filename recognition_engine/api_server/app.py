"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn recognition_engine.api_server.app:app --host 0.0.0.0 --port 8000
"""

from recognition_engine.api_server.server import app

__all__ = ["app"]
