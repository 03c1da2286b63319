"""
Blob Storage Models.

Block identifiers and the block list (manifest) sent by Put Block List.

Author: azsharedblob contributors
"""

import base64
import binascii
import uuid
from enum import Enum
from typing import List
from xml.etree import ElementTree as ET

from pydantic import BaseModel, Field, field_validator

from azsharedblob.protocol.xml_codec import to_xml_bytes

BLOCK_LIST_ROOT = "BlockList"


class BlockListType(str, Enum):
    """Block list type for Put Block List."""
    COMMITTED = "Committed"
    UNCOMMITTED = "Uncommitted"
    LATEST = "Latest"


def generate_block_id() -> str:
    """
    Generate a fresh block ID.

    The ID is the base64 encoding of a UUID4 string, so every ID produced
    here has the same length, as the service requires within one blob.
    """
    return base64.b64encode(str(uuid.uuid4()).encode("utf-8")).decode("ascii")


def _validate_block_ids(block_ids: List[str]) -> List[str]:
    for block_id in block_ids:
        try:
            base64.b64decode(block_id, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 block ID: {block_id!r}") from e
    return block_ids


class BlockList(BaseModel):
    """
    Block list (manifest) for Put Block List.

    ``latest`` is committed in exactly the listed order, which defines the
    final byte order of the blob. ``committed`` and ``uncommitted`` mirror
    the service's response shape and stay empty for uploads.
    """

    committed: List[str] = Field(default_factory=list, description="Committed block IDs")
    uncommitted: List[str] = Field(default_factory=list, description="Uncommitted block IDs")
    latest: List[str] = Field(default_factory=list, description="Block IDs to commit, in order")

    @field_validator("committed", "uncommitted", "latest")
    @classmethod
    def validate_block_ids(cls, v: List[str]) -> List[str]:
        return _validate_block_ids(v)

    def to_xml(self) -> bytes:
        """
        Serialize to the Put Block List request body.

        Example:
            <?xml version="1.0" encoding="utf-8"?>
            <BlockList><Latest>AAA=</Latest><Latest>AAE=</Latest></BlockList>
        """
        root = ET.Element(BLOCK_LIST_ROOT)
        for block_type, block_ids in (
            (BlockListType.COMMITTED, self.committed),
            (BlockListType.UNCOMMITTED, self.uncommitted),
            (BlockListType.LATEST, self.latest),
        ):
            for block_id in block_ids:
                element = ET.SubElement(root, block_type.value)
                element.text = block_id
        return to_xml_bytes(root)

    @classmethod
    def from_xml(cls, xml_data: bytes) -> "BlockList":
        """
        Parse a block list document, keeping the order of each list.

        Raises:
            ValueError: If the document is not a BlockList
        """
        root = ET.fromstring(xml_data)
        if root.tag != BLOCK_LIST_ROOT:
            raise ValueError(f"Expected <{BLOCK_LIST_ROOT}> root, got <{root.tag}>")

        lists = {block_type: [] for block_type in BlockListType}
        for element in root:
            try:
                block_type = BlockListType(element.tag)
            except ValueError:
                continue
            lists[block_type].append((element.text or "").strip())

        return cls(
            committed=lists[BlockListType.COMMITTED],
            uncommitted=lists[BlockListType.UNCOMMITTED],
            latest=lists[BlockListType.LATEST],
        )
