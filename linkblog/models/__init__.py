from linkblog.models.base import Base
from linkblog.models.link import Link

__all__ = ["Base", "Link"]
