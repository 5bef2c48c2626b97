import json
import threading

import pytest

from atlas.errors import FavoritesError
from atlas.favorites import FavoritesStore


def test_missing_file_means_no_favorites(tmp_path):
    store = FavoritesStore.load(tmp_path / "favorites.json")
    assert store.names() == []
    assert len(store) == 0


def test_load_existing_file(tmp_path):
    p = tmp_path / "favorites.json"
    p.write_text(json.dumps({"countries": ["Japan", "Peru", "Japan"]}), encoding="utf-8")
    store = FavoritesStore.load(p)
    assert store.names() == ["Japan", "Peru"]
    assert "Peru" in store


def test_missing_key_means_empty(tmp_path):
    p = tmp_path / "favorites.json"
    p.write_text("{}", encoding="utf-8")
    assert FavoritesStore.load(p).names() == []


@pytest.mark.parametrize("content", ["{not json", '{"countries": "Japan"}', '{"countries": [1, 2]}'])
def test_broken_file_is_an_error(tmp_path, content):
    p = tmp_path / "favorites.json"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(FavoritesError):
        FavoritesStore.load(p)


def test_unreadable_path_is_an_error(tmp_path):
    # a directory where the file should be
    with pytest.raises(FavoritesError):
        FavoritesStore.load(tmp_path)


def test_add_and_remove_persist(tmp_path):
    p = tmp_path / "data" / "favorites.json"
    store = FavoritesStore.load(p)
    assert store.add("Japan") is True
    assert store.add("Peru") is True
    assert store.add("Japan") is False
    assert json.loads(p.read_text(encoding="utf-8")) == {"countries": ["Japan", "Peru"]}

    assert store.remove("Japan") is True
    assert store.remove("Japan") is False
    assert FavoritesStore.load(p).names() == ["Peru"]


def test_in_memory_store_does_not_write():
    store = FavoritesStore()
    assert store.add("Japan") is True
    assert store.snapshot() == frozenset({"Japan"})


def test_failed_write_leaves_memory_unchanged(tmp_path):
    # the target path is a directory, so writing it fails
    target = tmp_path / "favorites.json"
    target.mkdir()
    store = FavoritesStore(target, ["Peru"])
    with pytest.raises(FavoritesError):
        store.add("Japan")
    assert store.names() == ["Peru"]


def test_concurrent_adds_are_all_kept(tmp_path):
    p = tmp_path / "favorites.json"
    store = FavoritesStore.load(p)
    names = [f"Country {i:02d}" for i in range(20)]
    threads = [threading.Thread(target=store.add, args=(n,)) for n in names]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(store.names()) == names
    assert sorted(json.loads(p.read_text(encoding="utf-8"))["countries"]) == names
