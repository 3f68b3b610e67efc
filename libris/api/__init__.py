"""HTTP API (FastAPI routers, dependencies, envelope)."""
