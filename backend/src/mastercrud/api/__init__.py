"""HTTP surface: dispatcher and FastAPI application."""
