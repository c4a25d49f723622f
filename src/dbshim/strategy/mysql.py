"""
MySQL dialect policy.
"""
import logging
from collections.abc import Callable
from typing import Any

from dbshim.strategy.base import DialectStrategy, register_strategy
from sqlalchemy.engine import Dialect

logger = logging.getLogger(__name__)


@register_strategy('mysql')
class MySQLStrategy(DialectStrategy):
    """MySQL/MariaDB adapter policy.
    """

    def list_tables_sql(self) -> str:
        return 'SHOW TABLES'

    def describe_table_sql(self, table: str, schema: str | None,
                           quote_identifier: Callable[..., str]) -> str:
        # TODO: read INFORMATION_SCHEMA.COLUMNS instead of DESCRIBE
        if schema:
            return 'DESCRIBE ' + quote_identifier(f'{schema}.{table}', True)
        return 'DESCRIBE ' + quote_identifier(table, True)

    def quote_literal(self, value: str, native_connection: Any, dialect: Dialect) -> str:
        """Quote with the driver, which follows the session's NO_BACKSLASH_ESCAPES mode.
        """
        return native_connection.escape(value)

    def last_insert_id_sql(self) -> str:
        return 'SELECT LAST_INSERT_ID()'

    def server_version_attribute(self, native_connection: Any) -> str:
        version = native_connection.get_server_info()
        if isinstance(version, bytes):
            version = version.decode()
        logger.debug(f'MySQL server reports version {version!r}')
        return version
