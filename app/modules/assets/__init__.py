"""Assets module"""

from .models import Asset
from .service import AssetsService
from .router import router

__all__ = ["Asset", "AssetsService", "router"]
