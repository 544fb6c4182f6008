"""SQLAlchemy ORM models for Condition Records.

Models:
- Condition
"""

from condition_records.core.database import Base
from condition_records.models.condition import Condition

__all__ = [
    "Base",
    "Condition",
]
