"""PSML (PageSeeder Markup Language) node model and codec."""

from .codec import decode, decode_document, decode_file, encode, encode_document
from .document import Document
from .errors import EncodeError, ParseError, PSMLError
from .nodes import KNOWN_NODE_TYPES, Node, UnknownNode, node_from_parts
from .validation import Violation, validate

__all__ = [
    "KNOWN_NODE_TYPES",
    "Document",
    "EncodeError",
    "Node",
    "PSMLError",
    "ParseError",
    "UnknownNode",
    "Violation",
    "decode",
    "decode_document",
    "decode_file",
    "encode",
    "encode_document",
    "node_from_parts",
    "validate",
]
