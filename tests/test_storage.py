import pytest

from shortlink.storage import NotFoundError, Storage, StorageError, URLExistsError


@pytest.fixture
def storage(tmp_path):
    with Storage(str(tmp_path / "storage.db")) as store:
        yield store


def test_save_and_get_round_trip(storage):
    storage.save_url("https://example.com/page", "abc")
    assert storage.get_url("abc") == "https://example.com/page"


def test_ids_increase(storage):
    first = storage.save_url("https://example.com/1", "one")
    second = storage.save_url("https://example.com/2", "two")
    assert first >= 1
    assert second > first


def test_same_url_under_two_aliases(storage):
    storage.save_url("https://example.com/", "a1")
    storage.save_url("https://example.com/", "a2")
    assert storage.get_url("a1") == storage.get_url("a2") == "https://example.com/"


def test_duplicate_alias_rejected(storage):
    storage.save_url("https://example.com/1", "dup")
    with pytest.raises(URLExistsError, match="url already exists"):
        storage.save_url("https://example.com/2", "dup")
    assert storage.get_url("dup") == "https://example.com/1"


def test_duplicate_is_storage_error(storage):
    storage.save_url("https://example.com/1", "dup")
    with pytest.raises(StorageError):
        storage.save_url("https://example.com/1", "dup")


def test_get_missing_alias(storage):
    with pytest.raises(NotFoundError, match="not found"):
        storage.get_url("nothing")


def test_delete_removes_mapping(storage):
    storage.save_url("https://example.com/", "gone")
    storage.delete_url("gone")
    with pytest.raises(NotFoundError):
        storage.get_url("gone")


def test_delete_unknown_alias_keeps_others(storage):
    storage.save_url("https://example.com/", "kept")
    storage.delete_url("unknown")
    assert storage.get_url("kept") == "https://example.com/"


def test_alias_reusable_after_delete(storage):
    storage.save_url("https://example.com/old", "reuse")
    storage.delete_url("reuse")
    storage.save_url("https://example.com/new", "reuse")
    assert storage.get_url("reuse") == "https://example.com/new"


def test_data_persists_across_connections(tmp_path):
    path = str(tmp_path / "persist.db")
    with Storage(path) as store:
        store.save_url("https://example.com/kept", "p")
    with Storage(path) as store:
        assert store.get_url("p") == "https://example.com/kept"


def test_closed_storage_raises(tmp_path):
    store = Storage(str(tmp_path / "closed.db"))
    store.close()
    with pytest.raises(StorageError):
        store.get_url("x")


def test_unopenable_path(tmp_path):
    with pytest.raises(StorageError):
        Storage(str(tmp_path / "missing_dir" / "db.sqlite"))


def test_in_memory_database():
    with Storage(":memory:") as store:
        store.save_url("https://example.com/m", "mem")
        assert store.get_url("mem") == "https://example.com/m"