import pytest

from app.cad.storage import LocalStorage, StorageError, normalize_key, storage_from_config


def test_local_roundtrip_and_delete(tmp_path):
    storage = LocalStorage(root=tmp_path)
    storage.put_bytes("cad/logos/a.png", b"img", content_type="image/png")
    assert storage.exists("cad/logos/a.png")
    with storage.open("/cad/logos/a.png") as f:
        assert f.read() == b"img"

    storage.delete("cad/logos/a.png")
    assert not storage.exists("cad/logos/a.png")
    storage.delete("cad/logos/a.png")
    with pytest.raises(StorageError):
        storage.open("cad/logos/a.png")


@pytest.mark.parametrize("key", ["../secret", "cad/../../etc/passwd", ""])
def test_keys_cannot_escape_root(key):
    with pytest.raises(StorageError):
        normalize_key(key)


def test_backslashes_are_normalized():
    assert normalize_key("cad\\logos\\a.png") == "cad/logos/a.png"


def test_local_backend_uses_storage_root(tmp_path):
    storage = storage_from_config({"STORAGE_BACKEND": "local", "STORAGE_ROOT": str(tmp_path)})
    assert isinstance(storage, LocalStorage)
    assert storage.root == tmp_path
