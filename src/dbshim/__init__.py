"""
Legacy database adapter contract on top of a SQLAlchemy connection.

Code written against the old adapter API keeps working:

    db = dbshim.connect(drivername='mysql', hostname='localhost', database='shop')
    stmt = db.query('SELECT * FROM orders WHERE id = ?', [42])
    row = stmt.fetch()
    columns = db.describe_table('orders')
"""
__version__ = '0.1.0'

import logging
from typing import Any

import sqlalchemy as sa
from dbshim.adapter import Adapter
from dbshim.contract import LegacyAdapter, QueryBuilder
from dbshim.describe import CaseFolding, ColumnDescriptor
from dbshim.driver import Connection
from dbshim.exceptions import AdapterError, DatabaseError, DriverError
from dbshim.exceptions import NoActiveTransaction, NotSupportedError
from dbshim.exceptions import StatementError, ValidationError
from dbshim.options import AdapterOptions, create_url_from_options
from dbshim.statement import Statement
from dbshim.types import FetchMode, FetchOrientation, NumericClass, ParamType

logger = logging.getLogger(__name__)


def connect(options: AdapterOptions | dict[str, Any] | None = None, **kw: Any) -> Adapter:
    """Create an engine, a modern connection, and an adapter over it.

    Args:
        options: AdapterOptions, a dict of options, or None to read
                 ``DBSHIM_*`` environment variables
        **kw: Options overriding the ones given

    Returns
        Adapter for the configured database
    """
    if options is None:
        options = AdapterOptions(**kw)
    elif isinstance(options, dict):
        options = AdapterOptions(**{**options, **kw})
    elif kw:
        options = options.model_copy(update=kw)

    engine = sa.create_engine(create_url_from_options(options), echo=options.echo)
    logger.debug(f'Created engine for {options.drivername}')
    return Adapter.from_options(Connection(engine), options)


__all__ = [
    'connect',
    'Adapter',
    'AdapterOptions',
    'Connection',
    'Statement',
    'LegacyAdapter',
    'QueryBuilder',
    'ColumnDescriptor',
    'CaseFolding',
    'FetchMode',
    'FetchOrientation',
    'NumericClass',
    'ParamType',
    'DatabaseError',
    'AdapterError',
    'ValidationError',
    'StatementError',
    'NotSupportedError',
    'DriverError',
    'NoActiveTransaction',
]
