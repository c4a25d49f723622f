"""
SQLite dialect policy.

SQLite has no DESCRIBE statement. ``PRAGMA table_info`` returns
``(cid, name, type, notnull, dflt_value, pk)``, which is rewritten into the
MySQL describe layout so the same column descriptor parser applies.
"""
import logging
import sqlite3
from collections.abc import Callable, Sequence
from typing import Any

from dbshim.strategy.base import DialectStrategy, register_strategy

logger = logging.getLogger(__name__)


@register_strategy('sqlite')
class SQLiteStrategy(DialectStrategy):
    """SQLite adapter policy.
    """

    def list_tables_sql(self) -> str:
        return ("SELECT name FROM sqlite_master WHERE type = 'table' "
                "AND name NOT LIKE 'sqlite_%' ORDER BY name")

    def describe_table_sql(self, table: str, schema: str | None,
                           quote_identifier: Callable[..., str]) -> str:
        if schema:
            return f'PRAGMA {quote_identifier(schema)}.table_info({quote_identifier(table)})'
        return f'PRAGMA table_info({quote_identifier(table)})'

    def normalize_describe_rows(self, rows: Sequence[Sequence[Any]]) -> list[tuple]:
        """Rewrite table_info rows as (field, type, null, key, default, extra).

        A lone INTEGER primary key aliases the rowid and is reported as
        auto_increment.
        """
        pk_count = sum(1 for row in rows if row[5])
        result = []
        for _, name, type_text, notnull, default, pk in rows:
            rowid_alias = bool(pk) and pk_count == 1 and str(type_text).upper() == 'INTEGER'
            result.append((
                name,
                type_text,
                'NO' if notnull or rowid_alias else 'YES',
                'PRI' if pk else '',
                default,
                'auto_increment' if rowid_alias else '',
                ))
        return result

    def last_insert_id_sql(self) -> str:
        return 'SELECT last_insert_rowid()'

    def server_version_attribute(self, native_connection: Any) -> str:
        return sqlite3.sqlite_version
