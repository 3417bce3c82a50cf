from collections import OrderedDict

import pytest
from gygsql import SQLBuilder, build_where, Condition


def test_select_all_columns_no_filters():
    sql, params = SQLBuilder().select('User')
    assert sql == 'SELECT * FROM User'
    assert params == []


def test_select_filters_keep_mapping_order():
    filters = OrderedDict([('name', 'karl'), ('count', 3), ('emotion', 'happy')])
    sql, params = SQLBuilder().select('Emotion', filters)
    assert sql == 'SELECT * FROM Emotion WHERE name=? AND count=? AND emotion=?'
    assert params == ['karl', 3, 'happy']
    assert sql.count('=?') == len(filters)


def test_select_columns_and_order():
    sql, params = SQLBuilder().select('Emotion', {'name': 'karl'}, ['id', 'count'], ['count', 'id'], 'asc')
    assert sql == 'SELECT id,count FROM Emotion WHERE name=? ORDER BY count,id ASC'
    assert params == ['karl']


def test_select_default_direction_is_desc():
    sql, _ = SQLBuilder().select('Emotion', order_by='id')
    assert sql.endswith('ORDER BY id DESC')


def test_select_rejects_bad_direction_and_names():
    builder = SQLBuilder()
    with pytest.raises(ValueError):
        builder.select('Emotion', order_by='id', order_direction='SIDEWAYS')
    with pytest.raises(ValueError):
        builder.select('Emotion; DROP TABLE x')
    with pytest.raises(ValueError):
        builder.select('Emotion', {'name = 1 OR 1': 'x'})


def test_insert_named():
    sql, params = SQLBuilder().insert('Emotion', {'count': 1, 'emotion': 'happy', 'name': 'karl'})
    assert sql == 'INSERT INTO Emotion (count,emotion,name) VALUES (?,?,?)'
    assert params == [1, 'happy', 'karl']


def test_insert_empty_uses_defaults():
    assert SQLBuilder().insert('Emotion', {}) == ('INSERT INTO Emotion DEFAULT VALUES', [])


def test_update_params_are_data_then_filters():
    sql, params = SQLBuilder().update('Emotion', {'emotion': 'sad', 'count': 2}, {'name': 'karl', 'id': 4})
    assert sql == 'UPDATE Emotion SET emotion=?,count=? WHERE name=? AND id=?'
    assert params == ['sad', 2, 'karl', 4]


def test_update_without_filters_has_no_where():
    sql, params = SQLBuilder().update('Emotion', {'count': 0})
    assert sql == 'UPDATE Emotion SET count=?'
    assert params == [0]


def test_update_requires_data():
    with pytest.raises(ValueError):
        SQLBuilder().update('Emotion', {})


def test_delete():
    builder = SQLBuilder()
    assert builder.delete('Emotion', {'name': 'karl'}) == ('DELETE FROM Emotion WHERE name=?', ['karl'])
    assert builder.delete('Emotion', {}) == ('DELETE FROM Emotion', [])


def test_legacy_comma_where_only_affects_update_and_delete():
    builder = SQLBuilder(legacy_comma_where=True)
    filters = {'name': 'karl', 'count': 1}
    assert builder.update('Emotion', {'emotion': 'sad'}, filters)[0] == 'UPDATE Emotion SET emotion=? WHERE name=?,count=?'
    assert builder.delete('Emotion', filters)[0] == 'DELETE FROM Emotion WHERE name=?,count=?'
    assert builder.select('Emotion', filters)[0] == 'SELECT * FROM Emotion WHERE name=? AND count=?'


def test_ddl():
    builder = SQLBuilder()
    sql = builder.create('Post', ['id INTEGER PRIMARY KEY', 'userId INT', 'FOREIGN KEY(userId) REFERENCES User(id)'])
    assert sql == 'CREATE TABLE IF NOT EXISTS Post (id INTEGER PRIMARY KEY,userId INT,FOREIGN KEY(userId) REFERENCES User(id))'
    assert builder.drop('Post') == 'DROP TABLE IF EXISTS Post'
    assert builder.clear('Post') == 'DELETE FROM Post'
    assert builder.table_info('Post') == 'PRAGMA table_info(Post)'
    with pytest.raises(ValueError):
        builder.create('Post', [])


def test_table_exists_is_parameterized():
    sql, params = SQLBuilder().table_exists('User')
    assert sql == "SELECT name FROM sqlite_master WHERE type='table' AND name=?"
    assert params == ['User']


def test_build_where():
    assert build_where({}) == ('', [])
    assert build_where({'a': 1, 'b': None}) == ('WHERE a=? AND b=?', [1, None])
    assert build_where({'a': 1, 'b': 2}, ',') == ('WHERE a=?,b=?', [1, 2])


def test_condition_rejects_non_identifier():
    with pytest.raises(ValueError):
        Condition(0, 'x')
    assert Condition('name', 'karl').to_sql() == ('name=?', 'karl')
