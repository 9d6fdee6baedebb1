"""Output document assembly.

Document layout (blocks for empty texts are omitted):

    <preamble>
    <project_context>
    ...
    </project_context>

    <request>
    ...
    </request>

    <file path="DISPLAY_PATH">
    ...
    </file>

"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field

from .models import HistoryEntry

logger = logging.getLogger(__name__)

PREAMBLE = """This is a structured prompt for a software development task.

<project_context> describes the project: its purpose, tech stack, architecture, and coding conventions. Use this to understand the broader context.

<request> contains the specific task or question to address. This is what you should focus on accomplishing.

<file> tags contain the relevant source files. Each file has a path attribute. Use these to understand the current implementation and make appropriate changes.

---

"""


@dataclass
class AssemblyResult:
    """Assembled document plus what happened to each requested file."""

    document: str
    included: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    unreadable: list[str] = field(default_factory=list)

    @property
    def missing_count(self) -> int:
        return len(self.missing)

    @property
    def has_warning(self) -> bool:
        return bool(self.missing)


def display_path(path: str, project_root: str | None) -> str:
    """Path shown in a ``<file>`` tag.

    With a project root, ``/a/b`` matches ``/a/b/c`` (shown as ``c``) but
    not ``/a/bc``; anything outside the root stays absolute.
    """
    if not project_root:
        return path

    root = project_root if project_root.endswith("/") else project_root + "/"
    if path.startswith(root):
        return path[len(root) :]
    return path


def _text_block(tag: str, text: str) -> str:
    if not text.endswith("\n"):
        text += "\n"
    return f"<{tag}>\n{text}</{tag}>\n\n"


def _file_block(path: str, content: bytes) -> str:
    body = content.decode("utf-8", errors="replace")
    if content and not content.endswith(b"\n"):
        body += "\n"
    return f'<file path="{path}">\n{body}</file>\n\n'


def _render(
    project_context: str,
    request: str,
    files: Iterable[str],
    project_root: str | None,
    *,
    track_missing: bool,
) -> AssemblyResult:
    parts = [PREAMBLE]
    if project_context:
        parts.append(_text_block("project_context", project_context))
    if request:
        parts.append(_text_block("request", request))

    result = AssemblyResult(document="")
    for path in files:
        if not os.path.exists(path):
            if track_missing:
                result.missing.append(path)
            else:
                result.unreadable.append(path)
            continue

        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError as e:
            logger.warning(f"Skipping unreadable file {path}: {e}")
            result.unreadable.append(path)
            continue

        parts.append(_file_block(display_path(path, project_root), content))
        result.included.append(path)

    result.document = "".join(parts)
    return result


def assemble(
    project_context: str,
    request: str,
    files: Iterable[str],
    project_root: str | None = None,
) -> AssemblyResult:
    """Render the prompt document for a context.

    Files missing from disk are skipped and reported on
    ``AssemblyResult.missing``; the document is produced regardless.
    """
    result = _render(project_context, request, files, project_root, track_missing=True)
    if result.missing:
        logger.warning(f"{result.missing_count} file(s) missing during assembly")
    return result


def assemble_from_history(entry: HistoryEntry) -> AssemblyResult:
    """Render a history entry, re-reading its files from disk.

    Files that no longer exist or cannot be read are skipped without a
    missing-file warning. Paths are shown absolute.
    """
    return _render(entry.project_context, entry.request, entry.files, None, track_missing=False)
