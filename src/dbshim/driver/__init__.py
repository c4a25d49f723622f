"""
Modern connection layer: SQLAlchemy-backed connection and statement handles.
"""
from dbshim.driver.connection import BufferedResult, Connection
from dbshim.driver.sql import CompiledSql, compile_sql
from dbshim.driver.statement import PreparedStatement

__all__ = [
    'BufferedResult',
    'CompiledSql',
    'Connection',
    'PreparedStatement',
    'compile_sql',
]
