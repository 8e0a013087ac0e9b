import asyncio

import pytest
from fastapi.testclient import TestClient

from filebox.main import app
from filebox.services.file_storage import FileStorageService, get_file_storage
from filebox.services.metadata_store import MetadataStore, get_metadata_store

MAX_TEST_FILE_SIZE = 1024


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def store(upload_dir):
    store = MetadataStore(upload_dir / "metadata.json")
    asyncio.run(store.initialize())
    return store


@pytest.fixture
def storage(upload_dir):
    storage = FileStorageService(upload_dir, MAX_TEST_FILE_SIZE)
    storage.initialize()
    return storage


@pytest.fixture
def client(store, storage):
    app.dependency_overrides[get_metadata_store] = lambda: store
    app.dependency_overrides[get_file_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()
