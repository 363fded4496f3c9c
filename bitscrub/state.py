"""
In-memory directory state and its compressed XML representation.

A state file is a gzip compressed XML document::

    <dirstate version="1">
      <root>/data</root>
      <algorithm>md5</algorithm>
      <file>
        <path>/data/a.txt</path>
        <size>5</size>
        <mode>33188</mode>
        <lastmodificationdate>2018-01-05T21:26:59.123456+00:00</lastmodificationdate>
        <digest>5d41402abc4b2a76b9719d911017c592</digest>
      </file>
    </dirstate>
"""
import base64
import datetime
import gzip
import os
import zlib
from dataclasses import dataclass, field
from typing import Dict

from defusedxml import ElementTree
from lxml import etree
from lxml.builder import E

from bitscrub.file_info import FileRecord
from bitscrub.hash import DIGEST_SIZES

STATE_VERSION = "1"


class CorruptState(ValueError):
    """
    Raised if a persisted state can not be decoded
    """

    pass


@dataclass
class DirectoryState:
    root: str
    algorithm: str = "md5"
    entries: Dict[str, FileRecord] = field(default_factory=dict)


def _path_element(tag: str, path: str):
    try:
        return E(tag, path)
    except ValueError:
        # Control characters and undecodable file names can not be stored as XML text
        return E(tag, base64.b64encode(os.fsencode(path)).decode("ascii"), encoding="base64")


def file_record2element(path: str, record: FileRecord):
    return E.file(
        _path_element("path", path),
        E.size(str(record.size)),
        E.mode(str(record.mode)),
        E.lastmodificationdate(record.mtime.isoformat()),
        E.digest(record.digest.hex()),
    )


def serialize(state: DirectoryState) -> bytes:
    document = E.dirstate(
        _path_element("root", state.root),
        E.algorithm(state.algorithm),
        *[file_record2element(path, record) for path, record in state.entries.items()],
        version=STATE_VERSION,
    )
    xml = etree.tostring(document, pretty_print=True, encoding="utf-8", xml_declaration=True)
    return gzip.compress(xml, mtime=0)


def _text(element, tag: str) -> str:
    child = element.find(tag)
    if child is None or not child.text:
        raise CorruptState(f"Missing <{tag}> in <{element.tag}>")
    return child.text


def _path(element, tag: str) -> str:
    text = _text(element, tag)
    if element.find(tag).get("encoding") == "base64":
        return os.fsdecode(base64.b64decode(text, validate=True))
    return text


def element2file_record(element, digest_size: int) -> FileRecord:
    mtime = datetime.datetime.fromisoformat(_text(element, "lastmodificationdate"))
    if mtime.tzinfo is None:
        raise CorruptState("Modification date without offset")

    digest = bytes.fromhex(_text(element, "digest"))
    if len(digest) != digest_size:
        raise CorruptState(f"Digest of {len(digest)} bytes, expected {digest_size}")

    return FileRecord(
        size=int(_text(element, "size")),
        mode=int(_text(element, "mode")),
        mtime=mtime,
        digest=digest,
    )


def deserialize(data: bytes) -> DirectoryState:
    try:
        xml = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as err:
        raise CorruptState(f"Unable to uncompress state: {err}") from err

    try:
        document = ElementTree.fromstring(xml)
    except (ElementTree.ParseError, ValueError) as err:
        raise CorruptState(f"Unable to parse state: {err}") from err

    if document.tag != "dirstate" or document.get("version") != STATE_VERSION:
        raise CorruptState(f"Unsupported state document <{document.tag} version={document.get('version')!r}>")

    try:
        state = DirectoryState(root=_path(document, "root"), algorithm=_text(document, "algorithm"))
        if state.algorithm not in DIGEST_SIZES:
            raise CorruptState(f"Unknown hash algorithm: {state.algorithm}")

        entries = {}
        for file_element in document.findall("file"):
            path = _path(file_element, "path")
            if path in entries:
                raise CorruptState(f"Duplicate entry for {path}")
            entries[path] = element2file_record(file_element, DIGEST_SIZES[state.algorithm])
    except CorruptState:
        raise
    except ValueError as err:
        raise CorruptState(f"Invalid value in state: {err}") from err

    state.entries = entries
    return state
