"""HTTP surface: FastAPI app, routes and wire models."""
