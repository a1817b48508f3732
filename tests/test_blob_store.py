import pytest

from edgeconsole.blob_store import BlobKeyError, FilesystemBlobStore


def test_put_get_delete(tmp_path):
    store = FilesystemBlobStore(str(tmp_path))
    assert store.put('snapshots/svc/1-ab.json', b'{"a": 1}') == 8
    assert store.get('snapshots/svc/1-ab.json') == b'{"a": 1}'
    assert (tmp_path / 'snapshots' / 'svc' / '1-ab.json').is_file()

    assert store.delete('snapshots/svc/1-ab.json') is True
    assert store.delete('snapshots/svc/1-ab.json') is False
    assert store.get('snapshots/svc/1-ab.json') is None


def test_put_overwrites(tmp_path):
    store = FilesystemBlobStore(str(tmp_path))
    store.put('k.json', b'one')
    store.put('k.json', b'two')
    assert store.get('k.json') == b'two'


@pytest.mark.parametrize('key', ['', '/etc/passwd', '../outside.json', 'snapshots/../../x'])
def test_rejects_escaping_keys(tmp_path, key):
    store = FilesystemBlobStore(str(tmp_path))
    with pytest.raises(BlobKeyError):
        store.put(key, b'x')
