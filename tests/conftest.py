"""
Shared fixtures: a temporary SQLite record store with the author and book
formats, and a record service over it.
"""

import pytest

from boocat.core.catalog import build_registry
from boocat.core.service import RecordService
from boocat.core.store import SQLiteRecordStore



@pytest.fixture
def db_path(tmp_path):
    """Path of a fresh database file."""
    return str(tmp_path / "boocat.sqlite")


@pytest.fixture
def store(db_path):
    store = SQLiteRecordStore.open(db_path)
    yield store
    store.close()


@pytest.fixture
def registry(store):
    registry = build_registry(store)
    store.initialize_indexes(registry)
    return registry


@pytest.fixture
def service(registry, store):
    return RecordService(registry, store)


@pytest.fixture
def seeded(store, registry):
    """Authors and books stored directly, bypassing validation.

    Returns the generated ids by short name.
    """
    ids = {}
    ids["murakami"] = store.create("author", {
        "name": "Haruki Murakami",
        "birthdate": "1949",
        "biography": "Japanese",
    })
    ids["orwell"] = store.create("author", {
        "name": "George Orwell",
        "birthdate": "1903",
        "biography": "English",
    })
    # Invalid on purpose, so that updates have something to fix
    ids["cervantes"] = store.create("author", {
        "name": "miguel de cervantes saavedra",
        "birthdate": "MDXLVII",
        "biography": "Spanish",
    })
    ids["norwegian_wood"] = store.create("book", {
        "name": "Norwegian Wood",
        "year": "1987",
        "author": ids["murakami"],
        "synopsis": "novel",
    })
    ids["kafka"] = store.create("book", {
        "name": "Kafka On The Shore",
        "year": "2002",
        "author": ids["murakami"],
        "synopsis": "novel",
    })
    ids["animal_farm"] = store.create("book", {
        "name": "Animal Farm",
        "year": "1945",
        "author": ids["orwell"],
        "synopsis": "fable",
    })
    ids["nineteen_eighty_four"] = store.create("book", {
        "name": "Nineteen Eighty-Four",
        "year": "1949",
        "author": ids["orwell"],
        "synopsis": "dystopia",
    })
    return ids
