"""
Legacy statement shim over a modern prepared statement handle.

The handle is created once, when the statement is constructed, and reused by
every later execute. Errors from the handle are re-raised as
``StatementError`` with the original error chained.
"""
import logging
import time
from collections.abc import Iterator, Mapping, Sequence
from functools import wraps
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

from dbshim.contract import QueryBuilder
from dbshim.driver import PreparedStatement
from dbshim.exceptions import DELEGATED_ERRORS, NotSupportedError
from dbshim.exceptions import StatementError, error_code, error_message
from dbshim.types import FetchMode, FetchOrientation, ParamType
from dbshim.types import infer_param_type

if TYPE_CHECKING:
    from dbshim.adapter import Adapter

logger = logging.getLogger(__name__)

__all__ = ['Statement', 'validate_fetch_mode']


def validate_fetch_mode(mode: Any) -> FetchMode | None:
    """Return mode as a FetchMode, or None when it is not one of the five styles.
    """
    if isinstance(mode, bool):
        return None
    try:
        return FetchMode(mode)
    except (ValueError, TypeError):
        return None


def dumpsql(func):
    """Decorator for logging statement execution and timing."""
    @wraps(func)
    def wrapper(self, params: Any = None):
        start = time.time()
        logger.debug(f'SQL:\n{self.sql}\nparams: {params if params is not None else self.bound_params}')
        try:
            return func(self, params)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{self.sql}\nparams: {params}')
            raise
        finally:
            elapsed = time.time() - start
            self.adapter.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class Statement:
    """Prepared statement with legacy fetch and bind semantics.
    """

    def __init__(self, adapter: 'Adapter', sql: str | QueryBuilder) -> None:
        if isinstance(sql, QueryBuilder):
            sql = sql.assemble()
        self.adapter = adapter
        self.sql = sql
        self._fetch_mode = FetchMode.ASSOC
        self._bind_param: dict[int | str, Any] = {}
        self._stmt: PreparedStatement | None = None
        self._prepare()

    def __iter__(self) -> Iterator[Any]:
        return iter(self.driver_statement)

    def __repr__(self) -> str:
        return f'Statement(sql={self.sql!r})'

    def _prepare(self) -> None:
        if self._stmt is not None:
            return
        try:
            self._stmt = self.adapter.get_connection().prepare(self.sql)
        except DELEGATED_ERRORS as err:
            raise StatementError(error_message(err), error_code(err)) from err

    @property
    def driver_statement(self) -> PreparedStatement:
        self._prepare()
        return self._stmt

    @property
    def bound_params(self) -> dict[int | str, Any]:
        """Values bound so far, keyed by position or ``:name``.
        """
        return dict(self._bind_param)

    def get_fetch_mode(self) -> FetchMode:
        return self._fetch_mode

    def set_fetch_mode(self, mode: FetchMode | int) -> None:
        fetch_mode = validate_fetch_mode(mode)
        if fetch_mode is None:
            raise StatementError(f"Invalid fetch mode '{mode}' specified")
        self._fetch_mode = fetch_mode

    @dumpsql
    def execute(self, params: Sequence[Any] | Mapping[str, Any] | None = None) -> bool:
        """Execute the statement with optional positional or named values.
        """
        if isinstance(params, Mapping):
            params = {_named(name): value for name, value in params.items()}
        elif params is not None:
            params = list(params)
        try:
            return self.driver_statement.execute(params)
        except DELEGATED_ERRORS as err:
            raise StatementError(error_message(err), error_code(err)) from err

    def fetch(self, style: FetchMode | int | None = None,
              cursor: FetchOrientation | int | None = None,
              offset: int | None = None) -> Any:
        """Fetch the next row, or None when there are no more rows.

        Only the default forward cursor is available; any other cursor
        orientation or a non-zero offset is rejected.
        """
        if cursor is not None and cursor != FetchOrientation.NEXT:
            raise NotSupportedError('Cursor parameters provided, but not supported')
        if offset:
            raise NotSupportedError('Offset parameters provided, but not supported')
        if style is None:
            style = self._fetch_mode
        elif validate_fetch_mode(style) is None:
            raise StatementError(f"Invalid fetch mode '{style}' specified")
        try:
            return self.driver_statement.fetch(style)
        except DELEGATED_ERRORS as err:
            raise StatementError(error_message(err), error_code(err)) from err

    def fetch_all(self, style: FetchMode | int | None = None,
                  column: int | None = None) -> list[Any]:
        """All remaining rows, or one column of them when ``column`` is given.
        """
        if column is not None:
            return [row[column] for row in iter(lambda: self.fetch(FetchMode.NUM), None)]
        return list(iter(lambda: self.fetch(style), None))

    def fetch_column(self, column: int = 0) -> Any:
        row = self.fetch(FetchMode.NUM)
        if row is None:
            return None
        return row[column]

    def fetch_object(self, cls: type = SimpleNamespace, **config: Any) -> Any:
        """Next row as an instance of ``cls`` built from the column values.
        """
        row = self.fetch(FetchMode.ASSOC)
        if row is None:
            return None
        return cls(**row, **config)

    def next_rowset(self) -> bool:
        raise NotSupportedError('next_rowset() is not implemented')

    def bind_param(self, parameter: int | str, variable: Any,
                   type: ParamType | int | None = None, length: int | None = None,
                   options: Any = None) -> bool:
        """Bind a variable to a placeholder, inferring its type when not given.
        """
        if options is not None:
            raise NotSupportedError('Options parameters provided, but not supported')
        parameter = _named(parameter)
        if type is None:
            type = infer_param_type(variable)
        self._bind_param[parameter] = variable
        try:
            return self.driver_statement.bind_param(parameter, variable, type, length)
        except DELEGATED_ERRORS as err:
            raise StatementError(error_message(err), error_code(err)) from err

    def bind_column(self, column: int | str, param: Any,
                    type: ParamType | int | None = None) -> bool:
        """Bind a variable to a column placeholder.

        Legacy callers use this interchangeably with bind_param, so it binds
        the placeholder named or numbered by ``column``.
        """
        column = _named(column)
        self._bind_param[column] = param
        try:
            return self.driver_statement.bind_param(column, param, type)
        except DELEGATED_ERRORS as err:
            raise StatementError(error_message(err), error_code(err)) from err

    def bind_value(self, parameter: int | str, value: Any,
                   type: ParamType | int | None = None) -> bool:
        parameter = _named(parameter)
        self._bind_param[parameter] = value
        try:
            return self.driver_statement.bind_value(parameter, value, type)
        except DELEGATED_ERRORS as err:
            raise StatementError(error_message(err), error_code(err)) from err

    def row_count(self) -> int:
        return self.driver_statement.row_count()

    def column_count(self) -> int:
        return self.driver_statement.column_count()

    def close_cursor(self) -> bool:
        """Close the cursor, allowing the statement to be executed again.
        """
        return self.driver_statement.close_cursor()

    def error_code(self) -> str:
        return self.driver_statement.error_code()

    def error_info(self) -> tuple:
        return self.driver_statement.error_info()


def _named(parameter: int | str) -> int | str:
    if isinstance(parameter, str) and not parameter.startswith(':'):
        return f':{parameter}'
    return parameter
