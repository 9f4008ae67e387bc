"""HTTP service boundary (FastAPI application, routers, dependencies)."""
