"""Shared helpers: registries, YAML input and iteration logging."""

from .io import read_optional_yaml, read_yaml_file
from .logging import IterationLogger
from .registry import Registry

__all__ = ["IterationLogger", "Registry", "read_optional_yaml", "read_yaml_file"]
