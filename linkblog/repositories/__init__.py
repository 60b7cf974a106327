from linkblog.repositories.links import LinkRepository

__all__ = ["LinkRepository"]
