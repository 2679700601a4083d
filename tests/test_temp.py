import io
import os
import tempfile

import pytest

from streamfetch.storage.temp import TempStorageProvider


@pytest.fixture
def opened():
    pairs = []

    def _open(provider, content_length=None):
        reader, writer = provider.into_reader_writer(content_length)
        pairs.append((reader, writer))
        return reader, writer

    yield _open
    for reader, writer in pairs:
        writer.close()
        reader.close()


def test_written_data_is_readable(opened):
    reader, writer = opened(TempStorageProvider())
    assert writer.write(b"hello world") == 11
    writer.flush()
    assert reader.read(5) == b"hello"
    assert reader.read() == b" world"


def test_positions_are_independent(opened):
    reader, writer = opened(TempStorageProvider())
    writer.write(b"abcdef")
    writer.flush()
    assert writer.tell() == 6
    assert reader.tell() == 0
    assert reader.read(3) == b"abc"
    assert writer.tell() == 6


def test_reader_seek(opened):
    reader, writer = opened(TempStorageProvider())
    writer.write(b"0123456789")
    writer.flush()
    assert reader.seek(4) == 4
    assert reader.read(2) == b"45"
    assert reader.seek(-3, io.SEEK_END) == 7
    assert reader.read() == b"789"


def test_writer_seek_overwrites(opened):
    reader, writer = opened(TempStorageProvider())
    writer.write(b"aaaa")
    writer.seek(1)
    writer.write(b"bb")
    writer.flush()
    assert reader.read() == b"abba"


def test_new_in_directory(opened, tmp_path):
    reader, _ = opened(TempStorageProvider.new_in(tmp_path))
    assert os.path.dirname(reader.name) == str(tmp_path)


def test_with_prefix(opened):
    reader, _ = opened(TempStorageProvider.with_prefix("testfile"))
    assert os.path.basename(reader.name).startswith("testfile")


def test_with_prefix_in(opened, tmp_path):
    reader, _ = opened(TempStorageProvider.with_prefix_in("testfile", tmp_path))
    assert os.path.dirname(reader.name) == str(tmp_path)
    assert os.path.basename(reader.name).startswith("testfile")


def test_with_tempfile_builder(opened, tmp_path):
    provider = TempStorageProvider.with_tempfile_builder(
        lambda: tempfile.NamedTemporaryFile(suffix="testfile", dir=tmp_path)
    )
    reader, writer = opened(provider)
    assert reader.name.endswith("testfile")
    writer.write(b"data")
    writer.flush()
    assert reader.read() == b"data"


def test_builder_error_is_reported():
    def failing():
        raise OSError("boom")

    provider = TempStorageProvider.with_tempfile_builder(failing)
    with pytest.raises(OSError, match="error creating temp file"):
        provider.into_reader_writer(None)


def test_close_removes_file():
    reader, writer = TempStorageProvider().into_reader_writer(10)
    path = reader.name
    assert os.path.exists(path)
    writer.write(b"xyz")
    writer.flush()
    writer.close()
    with reader:
        assert reader.read() == b"xyz"
    assert not os.path.exists(path)


def test_default_equals_plain_constructor():
    assert TempStorageProvider() == TempStorageProvider(storage_dir=None, prefix=None)