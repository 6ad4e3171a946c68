from __future__ import annotations

from photocontest.core.config import get_settings
from photocontest.services.storage_service import LocalFileStorage


def _storage(tmp_path) -> LocalFileStorage:  # type: ignore[no-untyped-def]
    return LocalFileStorage(settings=get_settings().model_copy(update={'upload_dir': str(tmp_path)}))


def test_save_returns_public_path(tmp_path) -> None:  # type: ignore[no-untyped-def]
    storage = _storage(tmp_path)

    stored = storage.save(folder='comp_1', file_id='photo_1', data=b'jpeg-bytes', content_type='image/jpeg')

    assert stored.path.startswith('/uploads/comp_1/photo_1-')
    assert stored.path.endswith('.jpg')
    assert stored.size == len(b'jpeg-bytes')
    assert stored.mime_type == 'image/jpeg'
    on_disk = list((tmp_path / 'comp_1').iterdir())
    assert len(on_disk) == 1
    assert on_disk[0].read_bytes() == b'jpeg-bytes'


def test_remove_deletes_file_once(tmp_path) -> None:  # type: ignore[no-untyped-def]
    storage = _storage(tmp_path)
    stored = storage.save(folder='comp_1', file_id='photo_2', data=b'png-bytes', content_type='image/png')

    storage.remove(stored.path)
    storage.remove(stored.path)

    assert list((tmp_path / 'comp_1').iterdir()) == []


def test_remove_ignores_paths_outside_upload_root(tmp_path) -> None:  # type: ignore[no-untyped-def]
    outside = tmp_path / 'keep.txt'
    outside.write_text('keep me')
    storage = _storage(tmp_path / 'uploads')

    storage.remove('/uploads/../keep.txt')
    storage.remove('/elsewhere/keep.txt')

    assert outside.read_text() == 'keep me'
