import io

import pytest

from streamfetch.storage.memory import MemoryStorageProvider, StorageProvider


def make_pair(content_length=None):
    return MemoryStorageProvider().into_reader_writer(content_length)


def test_round_trip():
    reader, writer = make_pair()
    assert writer.write(b"hello world") == 11
    assert reader.read() == b"hello world"
    assert reader.read() == b""


def test_preallocated_buffer_not_readable_before_write():
    reader, _writer = make_pair(10)
    assert reader.read(5) == b""
    assert reader.tell() == 0


def test_read_respects_size():
    reader, writer = make_pair()
    writer.write(b"abcdef")
    assert reader.read(2) == b"ab"
    assert reader.read(2) == b"cd"
    assert reader.tell() == 4


def test_positions_are_independent():
    reader, writer = make_pair()
    writer.write(b"abc")
    assert writer.tell() == 3
    assert reader.tell() == 0


def test_write_grows_buffer_past_content_length():
    reader, writer = make_pair(2)
    writer.write(b"abcdef")
    assert reader.read() == b"abcdef"


def test_write_after_seek_overwrites():
    reader, writer = make_pair()
    writer.write(b"aaaa")
    writer.seek(1)
    writer.write(b"bb")
    assert reader.read() == b"abba"


def test_seek_end_relative_to_buffer_length():
    reader, _writer = make_pair(8)
    assert reader.seek(-2, io.SEEK_END) == 6


def test_seek_current():
    reader, writer = make_pair()
    writer.write(b"0123456789")
    reader.seek(3)
    assert reader.seek(2, io.SEEK_CUR) == 5
    assert reader.read(2) == b"56"


def test_negative_seek_rejected():
    reader, _writer = make_pair()
    with pytest.raises(ValueError):
        reader.seek(-1)


def test_seek_beyond_end_reads_nothing():
    reader, writer = make_pair()
    writer.write(b"abc")
    reader.seek(10)
    assert reader.read() == b""


def test_storage_provider_is_abstract():
    with pytest.raises(TypeError):
        StorageProvider()