import sqlite3
from types import SimpleNamespace

import pytest
from dbshim import FetchMode
from dbshim.exceptions import StatementError, ValidationError


def test_fetch_styles(sqlite_adapter):
    sql = 'SELECT id, name FROM orders WHERE id = ?'

    assert sqlite_adapter.fetch_row(sql, [1]) == {'id': 1, 'name': 'widget'}
    assert sqlite_adapter.fetch_row(sql, [1], FetchMode.NUM) == (1, 'widget')
    assert sqlite_adapter.fetch_row(sql, [1], FetchMode.BOTH) == {0: 1, 1: 'widget', 'id': 1, 'name': 'widget'}

    obj = sqlite_adapter.fetch_row(sql, [1], FetchMode.OBJ)
    assert isinstance(obj, SimpleNamespace)
    assert obj.name == 'widget'

    lazy = sqlite_adapter.fetch_row(sql, [1], FetchMode.LAZY)
    assert lazy.name == 'widget'
    assert lazy[0] == 1


def test_adapter_fetch_mode_applies(sqlite_adapter):
    sqlite_adapter.set_fetch_mode(FetchMode.NUM)
    rows = sqlite_adapter.fetch_all('SELECT id FROM orders ORDER BY id')
    assert rows == [(1,), (2,), (3,)]


def test_fetch_conveniences(sqlite_adapter):
    assert sqlite_adapter.fetch_col('SELECT name FROM orders ORDER BY id') == ['widget', 'gadget', 'doohickey']
    assert sqlite_adapter.fetch_one('SELECT COUNT(*) FROM orders') == 3
    assert sqlite_adapter.fetch_one('SELECT id FROM orders WHERE id = ?', 99) is None
    assert sqlite_adapter.fetch_pairs('SELECT name, qty FROM orders') == {'widget': 3, 'gadget': 0, 'doohickey': 12}

    assoc = sqlite_adapter.fetch_assoc('SELECT id, name FROM orders')
    assert set(assoc) == {1, 2, 3}
    assert assoc[2] == {'id': 2, 'name': 'gadget'}


def test_named_parameters(sqlite_adapter):
    rows = sqlite_adapter.fetch_all('SELECT name FROM orders WHERE qty >= :qty ORDER BY name', {'qty': 3})
    assert [row['name'] for row in rows] == ['doohickey', 'widget']


def test_colon_inside_literal(sqlite_adapter):
    assert sqlite_adapter.fetch_one("SELECT 'a:b' || ? ", ['c']) == 'a:bc'


def test_insert_update_delete(sqlite_adapter):
    assert sqlite_adapter.insert('orders', {'name': 'gizmo', 'price': 1.5, 'qty': 7}) == 1
    assert sqlite_adapter.last_insert_id() == 4
    assert sqlite_adapter.last_insert_id('orders', 'id') == 4

    assert sqlite_adapter.update('orders', {'qty': 1}, 'qty < 5') == 2
    assert sqlite_adapter.fetch_one('SELECT SUM(qty) FROM orders') == 1 + 1 + 12 + 7

    assert sqlite_adapter.delete('orders', sqlite_adapter.quote_into('name = ?', 'gizmo')) == 1
    assert sqlite_adapter.fetch_one('SELECT COUNT(*) FROM orders') == 3


def test_quote_is_safe(sqlite_adapter):
    hostile = "x'); DROP TABLE orders; --"
    sqlite_adapter.query(f'INSERT INTO orders (name) VALUES ({sqlite_adapter.quote(hostile)})')

    assert sqlite_adapter.fetch_one('SELECT name FROM orders WHERE id = 4') == hostile
    assert 'orders' in sqlite_adapter.list_tables()


def test_quote_round_trip(sqlite_adapter):
    for value in ('100%', 'back\\slash', "it's", 'a:b'):
        assert sqlite_adapter.fetch_one(f'SELECT {sqlite_adapter.quote(value)}') == value


def test_quote_identifier(sqlite_adapter):
    assert sqlite_adapter.get_quote_identifier_symbol() == '"'
    assert sqlite_adapter.quote_identifier('main.orders') == '"main"."orders"'
    assert sqlite_adapter.fetch_one(f'SELECT COUNT(*) FROM {sqlite_adapter.quote_identifier("main.orders")}') == 3


def test_limit(sqlite_adapter):
    sql = sqlite_adapter.limit('SELECT id FROM orders ORDER BY id', 1, 1)
    assert sqlite_adapter.fetch_col(sql) == [2]
    with pytest.raises(ValidationError):
        sqlite_adapter.limit('SELECT id FROM orders', 0)


def test_list_tables(sqlite_adapter):
    sqlite_adapter.query('CREATE TABLE customers (id INTEGER PRIMARY KEY)')
    assert sqlite_adapter.list_tables() == ['customers', 'orders']


def test_describe_table(sqlite_adapter):
    desc = sqlite_adapter.describe_table('orders')

    assert list(desc) == ['id', 'name', 'price', 'qty']
    assert [col.column_position for col in desc.values()] == [1, 2, 3, 4]

    id_col = desc['id']
    assert id_col.primary is True
    assert id_col.primary_position == 1
    assert id_col.identity is True
    assert id_col.nullable is False
    assert id_col.table_name == 'orders'
    assert id_col.schema_name is None

    name = desc['name']
    assert name.data_type.lower() == 'varchar'
    assert name.length == 40
    assert name.nullable is False
    assert name.primary is False
    assert name.primary_position is None

    price = desc['price']
    assert price.data_type == 'decimal'
    assert price.precision == 10
    assert price.scale == 2
    assert price.nullable is True

    qty = desc['qty']
    assert qty.data_type == 'INT'
    assert qty.default == '0'
    assert qty.unsigned is None

    assert desc['name']['LENGTH'] == 40


def test_describe_table_with_schema(sqlite_adapter):
    desc = sqlite_adapter.describe_table('orders', 'main')
    assert list(desc) == ['id', 'name', 'price', 'qty']
    assert desc['id'].schema_name == 'main'


def test_describe_composite_key(sqlite_adapter):
    sqlite_adapter.query("""
    CREATE TABLE order_lines (
        order_id INTEGER NOT NULL,
        note TEXT,
        line_no INTEGER NOT NULL,
        PRIMARY KEY (order_id, line_no)
    )
    """)
    desc = sqlite_adapter.describe_table('order_lines')

    assert desc['order_id'].primary_position == 1
    assert desc['line_no'].primary_position == 2
    assert desc['note'].primary_position is None
    assert not any(col.identity for col in desc.values())


def test_missing_table(sqlite_adapter):
    with pytest.raises(StatementError) as excinfo:
        sqlite_adapter.query('SELECT * FROM no_such_table')
    assert 'no_such_table' in str(excinfo.value)
    assert excinfo.value.__cause__ is not None


def test_server_version(sqlite_adapter):
    assert sqlite_adapter.get_server_version() == sqlite3.sqlite_version


def test_close_and_reconnect(sqlite_adapter):
    assert sqlite_adapter.is_connected() is True
    sqlite_adapter.close_connection()
    assert sqlite_adapter.is_connected() is False
    sqlite_adapter.connect()
    assert sqlite_adapter.is_connected() is True


if __name__ == '__main__':
    __import__('pytest').main([__file__])
