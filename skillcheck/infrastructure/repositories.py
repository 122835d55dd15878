"""
Repository entry point.

Re-exports the entity repositories so callers can write
``from skillcheck.infrastructure.repositories import CustomerRepo``.
"""

from __future__ import annotations

from .repositories_base import BaseRepository
from .repositories_customer import CustomerRepo
from .repositories_skillcheck import SkillCheckRepo

__all__ = [
    "BaseRepository",
    "CustomerRepo",
    "SkillCheckRepo",
]
