import dataclasses

import pytest
from gygdb import Database, Table


def test_table_pairs_name_and_database(emotions):
    emotion = Table(emotions, 'Emotion')
    assert emotion.db is emotions
    assert emotion.name == 'Emotion'
    emotion.db.insert(emotion.name, {'name': 'karl'})
    assert emotion.db.row_exists(emotion.name, {'name': 'karl'})


def test_tables_share_one_database(db):
    user, post = Table(db, 'User'), Table(db, 'Post')
    assert user.db is post.db
    assert user == Table(db, 'User')
    assert user != post


def test_table_is_immutable(db):
    table = Table(db, 'User')
    with pytest.raises(dataclasses.FrozenInstanceError):
        table.name = 'Post'
