import datetime
import gzip

import pytest

from bitscrub.file_info import FileRecord
from bitscrub.state import DirectoryState, serialize, deserialize, CorruptState

MTIME = datetime.datetime(2018, 1, 5, 21, 26, 59, 123456, tzinfo=datetime.timezone.utc)


@pytest.fixture
def state():
    state = DirectoryState(root="/data")
    state.entries["/data/a.txt"] = FileRecord(
        size=5, mode=0o100644, mtime=MTIME, digest=bytes.fromhex("5d41402abc4b2a76b9719d911017c592")
    )
    state.entries["/data/sub dir/b.mov"] = FileRecord(
        size=0,
        mode=0o100600,
        mtime=MTIME.replace(microsecond=0),
        digest=bytes.fromhex("d41d8cd98f00b204e9800998ecf8427e"),
    )
    return state


def test_round_trip(state):
    loaded = deserialize(serialize(state))

    assert loaded.root == "/data"
    assert loaded.algorithm == "md5"
    assert loaded.entries == state.entries


def test_round_trip_empty():
    loaded = deserialize(serialize(DirectoryState(root="/data", algorithm="xxh128")))

    assert loaded == DirectoryState(root="/data", algorithm="xxh128")


def test_round_trip_keeps_offset(state):
    offset = datetime.timezone(datetime.timedelta(hours=2))
    state.entries["/data/a.txt"].mtime = MTIME.astimezone(offset)

    loaded = deserialize(serialize(state))

    assert loaded.entries["/data/a.txt"].mtime == MTIME
    assert loaded.entries["/data/a.txt"].mtime.utcoffset() == datetime.timedelta(hours=2)


@pytest.mark.parametrize(
    "path",
    [
        "/data/control\x01char",
        "/data/undecodable-\udcff.txt",
        "/data/tab\tand\nnewline",
        "/data/cr\rname",
        "/data/a\r\nb",
        "/data/<&>\"'",
        "/data/äöü",
    ],
)
def test_round_trip_awkward_paths(state, path):
    state.entries[path] = state.entries["/data/a.txt"]

    loaded = deserialize(serialize(state))

    assert path in loaded.entries
    assert loaded.entries == state.entries


def test_serialize_is_stable(state):
    assert serialize(state) == serialize(state)


def test_document_format(state):
    xml = gzip.decompress(serialize(state)).decode("utf-8")

    assert "<dirstate version=\"1\">" in xml
    assert "<root>/data</root>" in xml
    assert "<digest>5d41402abc4b2a76b9719d911017c592</digest>" in xml
    assert "<lastmodificationdate>2018-01-05T21:26:59.123456+00:00</lastmodificationdate>" in xml


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not compressed at all",
        gzip.compress(b"<dirstate version='1'><root>/data</root>")[:-8],
        gzip.compress(b"not xml"),
        gzip.compress(b"<hashlist version='1.1'/>"),
        gzip.compress(b"<dirstate version='2'><root>/data</root><algorithm>md5</algorithm></dirstate>"),
        gzip.compress(b"<dirstate version='1'><algorithm>md5</algorithm></dirstate>"),
        gzip.compress(b"<dirstate version='1'><root>/data</root><algorithm>sha1</algorithm></dirstate>"),
    ],
)
def test_corrupt_envelope_and_document(data):
    with pytest.raises(CorruptState):
        deserialize(data)


@pytest.mark.parametrize(
    "replace, value",
    [
        ("<size>5</size>", "<size>five</size>"),
        ("<mode>33188</mode>", ""),
        ("<digest>5d41402abc4b2a76b9719d911017c592</digest>", "<digest>xyz</digest>"),
        ("<digest>5d41402abc4b2a76b9719d911017c592</digest>", "<digest>ab</digest>"),
        ("2018-01-05T21:26:59.123456+00:00", "yesterday"),
        ("2018-01-05T21:26:59.123456+00:00", "2018-01-05T21:26:59"),
        ("<path>/data/a.txt</path>", '<path encoding="base64">!!!</path>'),
        ("<path>/data/a.txt</path>", "<path>/data/sub dir/b.mov</path>"),
    ],
)
def test_corrupt_fields(state, replace, value):
    xml = gzip.decompress(serialize(state)).decode("utf-8")
    assert replace in xml

    with pytest.raises(CorruptState):
        deserialize(gzip.compress(xml.replace(replace, value).encode("utf-8")))


def test_truncated(state):
    data = serialize(state)

    for length in (1, 10, len(data) // 2, len(data) - 1):
        with pytest.raises(CorruptState):
            deserialize(data[:length])
