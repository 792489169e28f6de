"""The ``AppxBlockMap.xml`` part: per-file block hashes of a package."""

from __future__ import annotations

import base64
import hashlib
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass, field
from pathlib import PurePosixPath

NAMESPACE = "http://schemas.microsoft.com/appx/2010/blockmap"
HASH_METHOD = "http://www.w3.org/2001/04/xmlenc#sha256"
BLOCK_SIZE = 65_536
_LOCAL_FILE_HEADER_SIZE = 30


def _to_xml(element: ET.Element, standalone: bool) -> bytes:
    flag = "yes" if standalone else "no"
    declaration = f'<?xml version="1.0" encoding="UTF-8" standalone="{flag}"?>'
    return (declaration + ET.tostring(element, encoding="unicode")).encode("utf-8")


@dataclass(frozen=True)
class Block:
    """A block of at most 64 KiB of uncompressed file data."""

    hash: str
    size: int | None = None

    @classmethod
    def from_bytes(cls, data: bytes) -> Block:
        """Hash a block's uncompressed data with SHA-256, base64 encoded."""
        digest = hashlib.sha256(data).digest()
        return cls(hash=base64.b64encode(digest).decode("ascii"))


@dataclass
class BlockMapFile:
    """A file in the package and the blocks it is made of."""

    name: str
    size: int
    lfh_size: int
    blocks: list[Block] = field(default_factory=list)


@dataclass
class AppxBlockMap:
    """The block map of every file stored in a package."""

    files: list[BlockMapFile] = field(default_factory=list)
    namespace: str = NAMESPACE
    hash_method: str = HASH_METHOD

    def to_xml(self, standalone: bool = False) -> bytes:
        """Render the document, with an XML declaration, as UTF-8 bytes."""
        root = ET.Element("BlockMap", {"xmlns": self.namespace, "HashMethod": self.hash_method})
        for file in self.files:
            file_element = ET.SubElement(
                root,
                "File",
                {"Name": file.name, "Size": str(file.size), "LfhSize": str(file.lfh_size)},
            )
            for block in file.blocks:
                attrs = {"Hash": block.hash}
                if block.size is not None:
                    attrs["Size"] = str(block.size)
                ET.SubElement(file_element, "Block", attrs)
        return _to_xml(root, standalone)


class BlockMapBuilder:
    """Builds a block map from the entries of a zip archive."""

    def __init__(self) -> None:
        self._block_map = AppxBlockMap()

    def add(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo | str) -> None:
        """Hash one archive entry block by block and record it."""
        if not isinstance(info, zipfile.ZipInfo):
            info = archive.getinfo(info)
        name = "\\".join(PurePosixPath(info.filename).parts)
        lfh_size = (_LOCAL_FILE_HEADER_SIZE + len(name.encode("utf-8"))) & 0xFFFF
        entry = BlockMapFile(name=name, size=info.file_size, lfh_size=lfh_size)
        with archive.open(info) as stream:
            while True:
                chunk = stream.read(BLOCK_SIZE)
                entry.blocks.append(Block.from_bytes(chunk))
                if len(chunk) != BLOCK_SIZE:
                    break
        self._block_map.files.append(entry)

    def finish(self) -> AppxBlockMap:
        return self._block_map


def build_block_map(archive: zipfile.ZipFile) -> AppxBlockMap:
    """Build the block map of every entry of ``archive`` in archive order."""
    builder = BlockMapBuilder()
    for info in archive.infolist():
        builder.add(archive, info)
    return builder.finish()