# Model modules import from this package; never import them back here.

from app.core.db.base import Base, BaseModel

__all__ = ["Base", "BaseModel"]
