"""
Dialect strategies, looked up by SQLAlchemy dialect name.
"""
from functools import lru_cache

from dbshim.strategy.base import _STRATEGY_REGISTRY, DialectStrategy
from dbshim.strategy.mysql import MySQLStrategy
from dbshim.strategy.sqlite import SQLiteStrategy

__all__ = [
    'DialectStrategy',
    'MySQLStrategy',
    'SQLiteStrategy',
    'get_strategy',
    'get_available_dialects',
    'is_supported_dialect',
]


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> DialectStrategy:
    """Shared strategy instance for a dialect name, case-insensitive.

    Raises
        ValueError: If no strategy is registered for the dialect
    """
    try:
        return _STRATEGY_REGISTRY[dialect.lower()]()
    except KeyError:
        raise ValueError(f'Unsupported dialect: {dialect}. '
                         f'Available: {get_available_dialects()}') from None


def get_available_dialects() -> list[str]:
    return sorted(_STRATEGY_REGISTRY)


def is_supported_dialect(dialect: str) -> bool:
    return dialect.lower() in _STRATEGY_REGISTRY
