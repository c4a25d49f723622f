"""
The legacy adapter contract as an explicit interface.

Calling code written for the old monolithic adapter expects this capability
set. ``dbshim.adapter.Adapter`` implements it on top of a modern connection.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dbshim.describe import ColumnDescriptor
    from dbshim.statement import Statement
    from dbshim.types import FetchMode


@runtime_checkable
class QueryBuilder(Protocol):
    """Opaque select builder: only its SQL text and bind values are used.
    """

    def assemble(self) -> str: ...

    def get_bind(self) -> list[Any] | dict[str, Any]: ...


class LegacyAdapter(ABC):
    """Operations legacy callers invoke on a database adapter.
    """

    @abstractmethod
    def connect(self) -> None:
        """Open the connection if it is not open yet."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the connection is open."""

    @abstractmethod
    def close_connection(self) -> None:
        """Force the connection to close."""

    @abstractmethod
    def prepare(self, sql: 'str | QueryBuilder') -> 'Statement':
        """Prepare a statement."""

    @abstractmethod
    def quote(self, value: Any, type: str | int | None = None) -> Any:
        """Quote a value for safe inclusion in SQL text."""

    @abstractmethod
    def limit(self, sql: str, count: int, offset: int = 0) -> str:
        """Add a LIMIT clause to a SELECT statement."""

    @abstractmethod
    def list_tables(self) -> list[str]:
        """Names of the tables in the database."""

    @abstractmethod
    def describe_table(self, table_name: str,
                       schema_name: str | None = None) -> dict[str, 'ColumnDescriptor']:
        """Column descriptors of a table keyed by column name."""

    @abstractmethod
    def last_insert_id(self, table_name: str | None = None,
                       primary_key: str | None = None) -> Any:
        """Last value generated for an identity column."""

    @abstractmethod
    def set_fetch_mode(self, mode: 'FetchMode | int') -> None:
        """Set the default fetch mode of new statements."""

    @abstractmethod
    def get_server_version(self) -> str | None:
        """Server version, or None when it cannot be determined."""

    @abstractmethod
    def supports_parameters(self, kind: str) -> bool:
        """Whether 'positional' or 'named' parameters are supported."""

    @abstractmethod
    def get_quote_identifier_symbol(self) -> str:
        """Character used to quote identifiers."""

    @abstractmethod
    def begin_transaction(self) -> 'LegacyAdapter':
        """Leave autocommit mode and begin a transaction."""

    @abstractmethod
    def commit(self) -> 'LegacyAdapter':
        """Commit and return to autocommit mode."""

    @abstractmethod
    def rollback(self) -> 'LegacyAdapter':
        """Roll back and return to autocommit mode."""
