"""XML helpers for Azure Storage wire formats.

Storage services return errors as XML documents such as::

    <?xml version="1.0" encoding="utf-8"?>
    <Error>
        <Code>ResourceNotFound</Code>
        <Message>The specified resource does not exist.</Message>
    </Error>

:func:`decode_key_path` pulls a single text value out of such a document
by a dotted path starting at the root element (``"Error.Message"``).
"""

from typing import Optional
from xml.etree import ElementTree as ET

XML_DECLARATION = b'<?xml version="1.0" encoding="utf-8"?>\n'


class XMLKeyPathError(ValueError):
    """Raised when a key path cannot be resolved in an XML document."""


def decode_key_path(data: bytes, key_path: str, separator: str = ".") -> str:
    """
    Extract the text of the element addressed by ``key_path``.

    Args:
        data: Raw XML document
        key_path: Dotted path whose first component names the root element
        separator: Path separator

    Returns:
        Text content of the addressed element ("" for an empty element)

    Raises:
        XMLKeyPathError: If the document is malformed or the path is missing
    """
    components = [part for part in key_path.split(separator) if part]
    if not components:
        raise XMLKeyPathError("Key path is empty")

    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise XMLKeyPathError(f"Malformed XML document: {e}") from e

    root_name, *children = components
    if root.tag != root_name:
        raise XMLKeyPathError(f"Expected root element '{root_name}', got '{root.tag}'")

    element: Optional[ET.Element] = root
    for name in children:
        element = element.find(name)
        if element is None:
            raise XMLKeyPathError(f"Key path '{key_path}' not found")

    return element.text or ""


def to_xml_bytes(element: ET.Element) -> bytes:
    """Serialize an element with the UTF-8 XML declaration."""
    return XML_DECLARATION + ET.tostring(element, encoding="utf-8", xml_declaration=False)
