# hyroxbox/db/models/__init__.py
"""
Import all model modules so SQLModel registers their tables
when init_db() calls SQLModel.metadata.create_all(engine).
"""

from .box import HyroxBox, HyroxBoxCreate, HyroxBoxUpdate  # noqa: F401
from .region import Region, RegionCreate, RegionUpdate  # noqa: F401

__all__ = [
    "Region",
    "RegionCreate",
    "RegionUpdate",
    "HyroxBox",
    "HyroxBoxCreate",
    "HyroxBoxUpdate",
]
