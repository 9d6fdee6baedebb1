"""File-set helpers: exclusion matching, directory expansion and display info.

This module provides:
- PathFilter: glob-based exclusion with ``**`` support
- DirectoryExpander: recursive, pruning directory expansion
- FileInfo / FolderInfo: display details for a context's files
"""

from .expander import DirectoryExpander
from .expander import WalkAction
from .expander import expand_directory
from .expander import walk_tree
from .info import FileInfo
from .info import FolderInfo
from .info import build_file_infos
from .info import format_size
from .info import group_folders
from .path_filter import PathFilter
from .path_filter import matches
from .path_filter import should_exclude

__all__ = [
    "DirectoryExpander",
    "FileInfo",
    "FolderInfo",
    "PathFilter",
    "WalkAction",
    "build_file_infos",
    "expand_directory",
    "format_size",
    "group_folders",
    "matches",
    "should_exclude",
    "walk_tree",
]
