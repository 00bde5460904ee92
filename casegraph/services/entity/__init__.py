from casegraph.services.entity.resolver import EntityResolver

__all__ = ["EntityResolver"]
