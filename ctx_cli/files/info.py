"""Display information for the files and folders of a context."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class FileInfo:
    """Size and naming details for one context file."""

    path: str
    size: int = 0
    exists: bool = True
    project: str = ""
    rel_path: str = ""


@dataclass
class FolderInfo:
    """Files of a context grouped by parent directory."""

    path: str
    file_count: int = 0
    total_size: int = 0


def split_project(path: str, skip_prefixes: list[str], home: str | None = None) -> tuple[str, str]:
    """Split a path into (project, relative path).

    The home directory prefix is dropped, then leading segments listed in
    ``skip_prefixes`` are skipped. The first remaining segment names the
    project; the rest is the path inside it.
    """
    home = home if home is not None else str(Path.home())
    rel = path
    if home and path.startswith(home):
        rel = path.removeprefix(home.rstrip("/") + "/")

    parts = rel.lstrip("/").split("/")
    skip = set(skip_prefixes)
    project_idx = next((i for i, part in enumerate(parts) if part not in skip), None)
    if project_idx is None:
        return "", rel

    return parts[project_idx], "/".join(parts[project_idx + 1 :])


def build_file_info(path: str, skip_prefixes: list[str], home: str | None = None) -> FileInfo:
    """Stat a context file and work out its display names."""
    info = FileInfo(path=path)
    try:
        info.size = os.stat(path).st_size
    except OSError:
        info.exists = False
        info.size = 0

    info.project, info.rel_path = split_project(path, skip_prefixes, home)
    return info


def build_file_infos(paths: list[str], skip_prefixes: list[str], home: str | None = None) -> list[FileInfo]:
    """Build infos for every path, largest file first."""
    infos = [build_file_info(p, skip_prefixes, home) for p in paths]
    infos.sort(key=lambda f: f.size, reverse=True)
    return infos


def group_folders(infos: list[FileInfo]) -> list[FolderInfo]:
    """Group files by parent directory, sorted by folder path."""
    folders: dict[str, FolderInfo] = {}
    for info in infos:
        parent = os.path.dirname(info.path)
        folder = folders.setdefault(parent, FolderInfo(path=parent))
        folder.file_count += 1
        folder.total_size += info.size
    return sorted(folders.values(), key=lambda f: f.path)


def files_in_folders(paths: list[str], folders: list[str]) -> list[str]:
    """Paths whose direct parent directory is one of ``folders``."""
    wanted = set(folders)
    return [p for p in paths if os.path.dirname(p) in wanted]


def total_size(infos: list[FileInfo]) -> int:
    return sum(f.size for f in infos)


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    return f"{size // 1024}KB"
