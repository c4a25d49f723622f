"""
Prepared statement handle of the modern connection layer.

Results are buffered when the statement executes, the way the MySQL client
buffers by default, so ``row_count()`` after a SELECT is the number of rows
and fetching is forward only over the buffer.
"""
import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from dbshim.driver.sql import compile_sql, positional_name
from dbshim.exceptions import DELEGATED_ERRORS, DriverError, error_code
from dbshim.exceptions import error_message
from dbshim.types import FetchMode, FetchOrientation, ParamType, coerce_param
from dbshim.types import shape_row

if TYPE_CHECKING:
    from dbshim.driver.connection import Connection

logger = logging.getLogger(__name__)

SQLSTATE_OK = '00000'
SQLSTATE_GENERAL = 'HY000'
SQLSTATE_BAD_PARAMETER = 'HY093'


class PreparedStatement:
    """Prepared statement bound to one modern connection.
    """

    def __init__(self, connection: 'Connection', sql: str) -> None:
        self.connection = connection
        self.sql = sql
        try:
            self._compiled = compile_sql(sql)
        except ValueError as err:
            raise DriverError(str(err), SQLSTATE_BAD_PARAMETER) from err
        self._bound: dict[str, Any] = {}
        self._keys: tuple[str, ...] = ()
        self._rows: list[Any] | None = None
        self._position = 0
        self._rowcount = 0
        self._error: tuple[str, Any, str | None] = (SQLSTATE_OK, None, None)
        self.fetch_mode = FetchMode.ASSOC

    def __iter__(self) -> Iterator[Any]:
        while True:
            row = self.fetch(self.fetch_mode)
            if row is None:
                return
            yield row

    def _param_key(self, parameter: int | str) -> str:
        """Translate a 1-based position or a (colon prefixed) name to a bind name.
        """
        if isinstance(parameter, int):
            if not 1 <= parameter <= self._compiled.positional_count:
                raise DriverError(f'Invalid parameter number: {parameter}', SQLSTATE_BAD_PARAMETER)
            return positional_name(parameter)
        name = parameter.lstrip(':')
        if name not in self._compiled.names:
            raise DriverError(f'Invalid parameter name: {parameter}', SQLSTATE_BAD_PARAMETER)
        return name

    def bind_value(self, parameter: int | str, value: Any,
                   type: ParamType | int | None = None) -> bool:
        """Bind a value to a positional or named placeholder.
        """
        key = self._param_key(parameter)
        try:
            self._bound[key] = coerce_param(value, type)
        except (TypeError, ValueError) as err:
            raise DriverError(f'Cannot bind {value!r} to {parameter}: {err}', SQLSTATE_BAD_PARAMETER) from err
        return True

    def bind_param(self, parameter: int | str, variable: Any,
                   type: ParamType | int | None = ParamType.STR,
                   length: int | None = None) -> bool:
        """Bind a variable; the value is captured when bound.
        """
        if length is not None and isinstance(variable, (str, bytes)) and len(variable) > length:
            raise DriverError(f'Parameter {parameter} exceeds length {length}', SQLSTATE_BAD_PARAMETER)
        return self.bind_value(parameter, variable, type)

    def execute(self, params: Sequence[Any] | Mapping[str, Any] | None = None) -> bool:
        """Run the statement, buffering any result rows.
        """
        if params is not None:
            self._bound = {}
            if isinstance(params, Mapping):
                for name, value in params.items():
                    self.bind_value(name, value)
            else:
                for position, value in enumerate(params, start=1):
                    self.bind_value(position, value)

        try:
            result = self.connection.run(self._compiled.clause, dict(self._bound))
        except DELEGATED_ERRORS as err:
            self._error = (SQLSTATE_GENERAL, error_code(err), error_message(err))
            self._rows = None
            raise

        self._error = (SQLSTATE_OK, None, None)
        self._keys, self._rows, self._rowcount = result
        self._position = 0
        return True

    def fetch(self, style: FetchMode | int = FetchMode.ASSOC,
              orientation: FetchOrientation | int = FetchOrientation.NEXT,
              offset: int = 0) -> Any:
        """Next row in the requested shape, or None when exhausted.
        """
        if orientation != FetchOrientation.NEXT or offset:
            raise DriverError('Only forward cursors are supported', SQLSTATE_GENERAL)
        if self._rows is None or self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return shape_row(row, FetchMode(style))

    def fetch_all(self, style: FetchMode | int = FetchMode.ASSOC) -> list[Any]:
        return list(iter(lambda: self.fetch(style), None))

    def row_count(self) -> int:
        return self._rowcount

    def column_count(self) -> int:
        return len(self._keys)

    def close_cursor(self) -> bool:
        """Drop any unread rows so the statement can be executed again.
        """
        self._rows = None
        self._position = 0
        return True

    def error_code(self) -> str:
        return self._error[0]

    def error_info(self) -> tuple[str, Any, str | None]:
        return self._error
