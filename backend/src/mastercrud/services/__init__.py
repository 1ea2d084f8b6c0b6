"""Operation executors."""

from mastercrud.services.crud import EntityService, Page

__all__ = ["EntityService", "Page"]
