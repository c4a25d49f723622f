"""
Adapter configuration.

Options can be given as keyword arguments, a dict, or ``DBSHIM_*``
environment variables, e.g. ``DBSHIM_DRIVERNAME=mysql``.
"""
from typing import Any

import sqlalchemy as sa
from dbshim.describe import CaseFolding
from dbshim.strategy import get_available_dialects, is_supported_dialect
from dbshim.types import FetchMode
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ['AdapterOptions', 'create_url_from_options']


class AdapterOptions(BaseSettings):
    """Options

    supported driver names: `mysql`, `sqlite`

    Adapter behaviour:
    - fetch_mode: Default fetch mode of new statements (default: ASSOC)
    - case_folding: Case folding of describe output keys (default: natural)
    - auto_quote_identifiers: Quote identifiers in generated SQL (default: True)
    """
    model_config = SettingsConfigDict(env_prefix='DBSHIM_', extra='ignore')

    drivername: str = 'mysql'
    hostname: str | None = None
    username: str | None = None
    password: str | None = None
    database: str | None = None
    port: int = 0
    charset: str = 'utf8mb4'
    fetch_mode: FetchMode = FetchMode.ASSOC
    case_folding: CaseFolding = CaseFolding.NATURAL
    auto_quote_identifiers: bool = True
    echo: bool = False

    @field_validator('drivername')
    @classmethod
    def _check_drivername(cls, value: str) -> str:
        value = value.lower()
        if not is_supported_dialect(value):
            raise ValueError(f'drivername must be one of: {get_available_dialects()}')
        return value

    @model_validator(mode='after')
    def _check_database(self) -> 'AdapterOptions':
        if not self.database:
            raise ValueError('database is required')
        if self.drivername == 'mysql' and not self.hostname:
            raise ValueError('hostname is required for mysql')
        return self


def create_url_from_options(options: AdapterOptions) -> sa.URL:
    """Convert AdapterOptions to a SQLAlchemy URL.
    """
    if options.drivername == 'sqlite':
        database = None if options.database == ':memory:' else options.database
        return sa.URL.create(drivername='sqlite', database=database)

    query: dict[str, Any] = {'charset': options.charset} if options.charset else {}
    return sa.URL.create(
        drivername='mysql+pymysql',
        username=options.username,
        password=options.password,
        host=options.hostname,
        port=options.port or None,
        database=options.database,
        query=query,
        )
