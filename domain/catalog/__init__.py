from domain.catalog.cache import ReferenceCache

__all__ = ["ReferenceCache"]
