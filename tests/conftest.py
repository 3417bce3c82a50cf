import pytest
from gygdb import Database

EMOTION_COLUMNS = [
    'id INTEGER PRIMARY KEY',
    'count INT',
    'emotion TEXT',
    'name TEXT',
]


@pytest.fixture()
def db():
    database = Database('sqlite://')
    yield database
    database.close()


@pytest.fixture()
def file_db(tmp_path):
    database = Database(f'sqlite:///{tmp_path / "gyg.db"}')
    yield database
    database.close()


@pytest.fixture()
def emotions(db):
    db.create('Emotion', EMOTION_COLUMNS)
    return db
