"""
Placeholder compilation for legacy SQL text.

Legacy statements use either positional ``?`` or named ``:name``
placeholders. SQLAlchemy ``text()`` only understands the named form, so
positional markers are rewritten to numbered names (``:p1``, ``:p2`` ...).
Colons inside quoted literals are escaped so they are never mistaken for
bind parameters.
"""
import re
from dataclasses import dataclass

import sqlalchemy as sa

__all__ = ['CompiledSql', 'compile_sql', 'positional_name']

_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^'\\]|\\.|'')*'|"(?:[^"\\]|\\.|"")*"|`(?:[^`]|``)*`)
    |(?P<named>(?<![:\w]):(?P<pname>[A-Za-z_]\w*))
    |(?P<qmark>\?)
""", re.VERBOSE | re.DOTALL)


def positional_name(position: int) -> str:
    """Bind name used for a 1-based positional placeholder.
    """
    return f'p{position}'


@dataclass(frozen=True, slots=True)
class CompiledSql:
    """SQL text compiled once per prepared statement.
    """
    sql: str
    clause: sa.TextClause
    positional_count: int
    names: tuple[str, ...]

    def parameter_names(self) -> tuple[str, ...]:
        """All bind names the statement accepts.
        """
        if self.positional_count:
            return tuple(positional_name(i) for i in range(1, self.positional_count + 1))
        return self.names


def compile_sql(sql: str) -> CompiledSql:
    """Rewrite placeholders and wrap the SQL in a text clause.

    Raises
        ValueError: If positional and named placeholders are mixed
    """
    parts = []
    last_end = 0
    positional = 0
    names: list[str] = []

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()
        parts.append(sql[last_end:start])
        if match.group('string'):
            parts.append(match.group('string').replace(':', r'\:'))
        elif match.group('named'):
            name = match.group('pname')
            if name not in names:
                names.append(name)
            parts.append(match.group('named'))
        else:
            positional += 1
            parts.append(':' + positional_name(positional))
        last_end = end
    parts.append(sql[last_end:])

    if positional and names:
        raise ValueError('Cannot mix positional and named parameters in one statement')

    rewritten = ''.join(parts)
    return CompiledSql(sql=rewritten, clause=sa.text(rewritten),
                       positional_count=positional, names=tuple(names))
