import pytest
from sqlalchemy.exc import OperationalError
from gygdb import Audit, Database, InvalidParameter


@pytest.fixture()
def audited_db(tmp_path):
    database = Database('sqlite://', audit_db=str(tmp_path / 'audit.db'))
    yield database
    database.close()


def test_audit_records_success_and_failure(audited_db):
    db = audited_db
    db.execute('CREATE TABLE t (a INT)')
    db.execute('INSERT INTO t (a) VALUES (?)', [3])
    with pytest.raises(OperationalError):
        db.execute('SELECT * FROM missing')
    with pytest.raises(InvalidParameter):
        db.select_and_fetch('SELECT * FROM t WHERE a=?', [[1]])
    entries = db.audit_obj.entries()
    assert [e['succeeded'] for e in entries] == [0, 0, 1, 1]
    assert entries[0]['operation'] == 'select_and_fetch'
    assert 'Nested SQL parameter' in entries[0]['error']
    assert entries[2]['statement'] == 'INSERT INTO t (a) VALUES (?)'
    assert entries[2]['params'] == '[3]'
    assert entries[2]['row_count'] == 1
    assert entries[2]['error'] is None
    assert entries[3]['caller_module'] == __name__
    assert entries[3]['caller_path'] == __file__
    assert {e['db_url'] for e in entries} == {'sqlite://'}
    # failures never reach the in-memory trail
    assert db.num_queries == 2
    assert len(db.audit_obj.entries(failed_only=True)) == 2


def test_high_level_calls_record_calling_module(audited_db):
    db = audited_db
    db.create('Emotion', ['id INTEGER PRIMARY KEY', 'emotion TEXT'])
    db.insert('Emotion', {'emotion': 'happy'})
    db.update('Emotion', {'emotion': 'calm'})
    assert db.select('Emotion') == [{'id': 1, 'emotion': 'calm'}]
    db.delete('Emotion', {'id': 1})
    entries = db.audit_obj.entries()
    assert entries[0]['operation'] == 'execute'
    assert entries[0]['statement'] == 'DELETE FROM Emotion WHERE id=?'
    assert {e['caller_module'] for e in entries} == {__name__}
    assert {e['caller_path'] for e in entries} == {__file__}


def test_select_records_row_count(audited_db):
    db = audited_db
    db.create('t', ['a INT'])
    for a in (1, 2, 3):
        db.insert('t', {'a': a})
    db.select('t')
    assert db.audit_obj.entries(limit=1)[0]['row_count'] == 3


def test_audit_store_reopens_and_purges(tmp_path):
    path = str(tmp_path / 'audit.db')
    Audit(path).record('sqlite://', 'execute', 'SELECT 1', '()', row_count=-1, caller=('m', 'p'))
    log = Audit(path)
    assert len(log.entries()) == 1
    assert log.entries()[0]['caller_module'] == 'm'
    assert log.purge() == 1
    assert log.entries() == []


def test_no_audit_store_by_default(db):
    assert db.audit_obj is None
    db.execute('CREATE TABLE t (a INT)')
    assert db.num_queries == 1
