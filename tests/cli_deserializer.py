"""Deserializer importable by reference, for CLI --deserializer tests."""

from hyperdrive.deserializers import ContentTypeDeserializer
from tests.conftest import REPRESENTOR_CONTENT_TYPE, parse_test_representor

deserialize = ContentTypeDeserializer({REPRESENTOR_CONTENT_TYPE: parse_test_representor})
