"""
Exception classes for the adapter and statement shims.

Legacy callers catch adapter-level and statement-level errors separately, so
every failure coming out of the modern layer is re-typed into one of those two
branches with the original error chained as ``__cause__``.
"""
import sqlite3

import sqlalchemy.exc as sa_exc


class DatabaseError(Exception):
    """Base class for all dbshim errors.
    """

    def __init__(self, message: str = '', code: int | str | None = None) -> None:
        super().__init__(message)
        self.code = code


class AdapterError(DatabaseError):
    """Error raised by the adapter shim.
    """


class ValidationError(AdapterError):
    """Invalid argument rejected before the connection is touched.
    """


class StatementError(DatabaseError):
    """Error raised by the statement shim.
    """


class NotSupportedError(StatementError):
    """Feature the underlying statement handle cannot provide.
    """


class DriverError(DatabaseError):
    """Error raised by the modern connection layer itself.
    """


class NoActiveTransaction(DriverError):
    """Commit or rollback requested without an active transaction.
    """


DELEGATED_ERRORS = (
    sa_exc.SQLAlchemyError,
    sqlite3.Error,
    DriverError,
    )


def error_code(exc: BaseException) -> int | str | None:
    """Best driver error code available on a delegated exception.
    """
    orig = getattr(exc, 'orig', None) or exc
    code = getattr(orig, 'sqlite_errorcode', None)
    if code is not None:
        return code
    if isinstance(orig, DatabaseError):
        return orig.code
    args = getattr(orig, 'args', ())
    if args and isinstance(args[0], int):
        return args[0]
    return getattr(exc, 'code', None)


def error_message(exc: BaseException) -> str:
    """Driver message without SQLAlchemy's statement/parameter trailer.
    """
    orig = getattr(exc, 'orig', None)
    if orig is not None:
        return str(orig)
    return str(exc)
