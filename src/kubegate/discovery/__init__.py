from .kind_resolver import KindResolver

__all__ = ["KindResolver"]
