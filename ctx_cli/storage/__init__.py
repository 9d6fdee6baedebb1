"""Storage module for ctx records.

This module provides:
- DocumentStore: YAML key-value store for contexts, exclude rules and config
- read_yaml / write_yaml: the atomic YAML helpers it is built on
"""

from .document_store import DocumentStore
from .document_store import read_yaml
from .document_store import write_yaml

__all__ = [
    "DocumentStore",
    "read_yaml",
    "write_yaml",
]
