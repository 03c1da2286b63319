"""Tests for XML wire helpers."""

from xml.etree import ElementTree as ET

import pytest

from azsharedblob.protocol.xml_codec import XMLKeyPathError, decode_key_path, to_xml_bytes

ERROR_BODY = (
    b'<?xml version="1.0" encoding="utf-8"?>'
    b"<Error><Code>ContainerNotFound</Code>"
    b"<Message>The specified container does not exist.</Message></Error>"
)


class TestDecodeKeyPath:
    """Test dotted key-path extraction."""

    def test_error_message(self):
        assert decode_key_path(ERROR_BODY, "Error.Message") == "The specified container does not exist."

    def test_error_code(self):
        assert decode_key_path(ERROR_BODY, "Error.Code") == "ContainerNotFound"

    def test_nested_path(self):
        data = b"<A><B><C>deep</C></B></A>"

        assert decode_key_path(data, "A.B.C") == "deep"

    def test_custom_separator(self):
        assert decode_key_path(ERROR_BODY, "Error/Message", separator="/") == (
            "The specified container does not exist."
        )

    def test_empty_element(self):
        assert decode_key_path(b"<Error><Message/></Error>", "Error.Message") == ""

    def test_missing_key(self):
        with pytest.raises(XMLKeyPathError, match="not found"):
            decode_key_path(ERROR_BODY, "Error.Detail")

    def test_wrong_root(self):
        with pytest.raises(XMLKeyPathError, match="root"):
            decode_key_path(b"<Other><Message>x</Message></Other>", "Error.Message")

    def test_malformed_document(self):
        with pytest.raises(XMLKeyPathError, match="Malformed"):
            decode_key_path(b"{\"error\": \"json\"}", "Error.Message")

    def test_empty_key_path(self):
        with pytest.raises(XMLKeyPathError):
            decode_key_path(ERROR_BODY, "")

    def test_is_value_error(self):
        assert issubclass(XMLKeyPathError, ValueError)


class TestToXmlBytes:
    """Test serialization helper."""

    def test_declaration_prefix(self):
        element = ET.Element("Root")
        element.text = "x"

        data = to_xml_bytes(element)

        assert data.startswith(b'<?xml version="1.0" encoding="utf-8"?>\n')
        assert data.endswith(b"<Root>x</Root>")
