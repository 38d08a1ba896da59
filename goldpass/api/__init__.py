"""HTTP API routers for the Gold Pass service."""
