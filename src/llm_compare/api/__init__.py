"""HTTP API: FastAPI application and dependency wiring."""
