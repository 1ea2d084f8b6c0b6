"""MasterCRUD - metadata-driven CRUD service for master tables."""

__version__ = "0.1.0"
