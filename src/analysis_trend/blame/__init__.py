"""Blame attribution from an injected per-build blame table."""

from .attributor import BlameAttribution, BlameAttributor
from .table import BlameTable, files_to_blame

__all__ = ["BlameAttribution", "BlameAttributor", "BlameTable", "files_to_blame"]
