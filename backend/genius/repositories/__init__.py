"""
Data access repositories.
"""
from genius.repositories.quota_repository import QuotaRepository, QuotaSnapshot

__all__ = [
    "QuotaRepository",
    "QuotaSnapshot",
]
