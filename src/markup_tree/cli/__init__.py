"""Command-line interface module for markup_tree.

This module provides the markup-tree tool for querying, inspecting and
checking markup files.
"""

from .main import main

__all__ = ["main"]
