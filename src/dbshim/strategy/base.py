"""
Base strategy interface for dialect-specific adapter policy.

Each dialect decides how tables are listed, how a table is described, how
string literals are escaped, and where the raw server version comes from.
Describe output is always normalized to the six positional fields the column
descriptor parser consumes::

    (field, type, null, key, default, extra)
"""
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Dialect

# Registry of dialect name -> strategy class
_STRATEGY_REGISTRY: dict[str, type['DialectStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('mysql')
        class MySQLStrategy(DialectStrategy):
            ...
    """
    def decorator(cls: type['DialectStrategy']) -> type['DialectStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DialectStrategy(ABC):
    """Base class for dialect-specific adapter policy.
    """

    @abstractmethod
    def list_tables_sql(self) -> str:
        """Introspection query whose first column is a table name.
        """

    @abstractmethod
    def describe_table_sql(self, table: str, schema: str | None,
                           quote_identifier: Callable[..., str]) -> str:
        """Query describing the columns of a table.

        Args:
            table: Table name
            schema: Optional schema name
            quote_identifier: Identifier quoting function of the adapter
        """

    def normalize_describe_rows(self, rows: Sequence[Sequence[Any]]) -> list[tuple]:
        """Convert raw describe rows to the six positional fields.
        """
        return [tuple(row[:6]) for row in rows]

    def quote_literal(self, value: str, native_connection: Any, dialect: Dialect) -> str:
        """Quote a string literal the way the dialect renders string literals.

        Dialects whose escaping depends on live session state read it from
        the native connection instead.
        """
        return sa.String().literal_processor(dialect)(value)

    @abstractmethod
    def last_insert_id_sql(self) -> str:
        """Query returning the last generated identity value of the session.
        """

    @abstractmethod
    def server_version_attribute(self, native_connection: Any) -> str:
        """Raw server version text read from the native DB-API connection.
        """
