"""
Storage Package for ClipStack.

Provides the history storage contract and its backends.
"""

from clipstack.database.base import HistoryStorage
from clipstack.database.json_storage import JsonHistoryStorage
from clipstack.database.memory import MemoryHistoryStorage
from clipstack.database.redis_storage import RedisHistoryStorage

__all__ = [
    'HistoryStorage',
    'JsonHistoryStorage',
    'MemoryHistoryStorage',
    'RedisHistoryStorage',
]
