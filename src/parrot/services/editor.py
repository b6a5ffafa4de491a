"""External editor integration for snapshot metadata."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import typer
from click.exceptions import ClickException

from parrot.config import AppConfig
from parrot.errors import EditorError

logger = logging.getLogger(__name__)

EDIT_FILE = "EDIT_SNAPSHOT.md"

TEMPLATE = """\
name: {name}
tags: {tags}

{description}
# Write the snapshot description above this line.
# The 'name' and 'tags' lines are optional; tags are separated by commas or spaces.
# Lines starting with '#' are ignored.
#
# cmd: {cmd}
"""

_TAG_SPLIT = re.compile(r"[,\s]+")


@dataclass
class EditResult:
    name: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)


def render_template(cmd: str, name: str = "", description: str = "", tags: Iterable[str] = ()) -> str:
    return TEMPLATE.format(
        name=name,
        tags=", ".join(sorted(tags)),
        description=f"{description}\n" if description else "",
        cmd=cmd,
    )


def parse_edit(text: str) -> EditResult:
    """Parse the content of an edited scratch file."""
    result = EditResult()
    description: list[str] = []
    for line in text.splitlines():
        if line.startswith("#"):
            continue
        lowered = line.lower()
        if lowered.startswith("name:") and result.name is None:
            result.name = line[len("name:") :].strip() or None
        elif lowered.startswith("tags:") and not result.tags:
            result.tags = [tag for tag in _TAG_SPLIT.split(line[len("tags:") :]) if tag]
        else:
            description.append(line)
    result.description = "\n".join(description).strip() or None
    return result


class Editor:
    """Open snapshot metadata in the user's editor."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def open_for_new(self, path: str | Path, cmd: str) -> EditResult:
        return self._edit(Path(path), render_template(cmd))

    def open_for_edit(
        self,
        path: str | Path,
        name: str,
        description: str | None,
        cmd: str,
        tags: Iterable[str] = (),
    ) -> EditResult:
        return self._edit(Path(path), render_template(cmd, name, description or "", tags))

    def _edit(self, path: Path, content: str) -> EditResult:
        scratch = path / EDIT_FILE
        try:
            path.mkdir(parents=True, exist_ok=True)
            scratch.write_text(content, encoding="utf-8")
            before = scratch.stat().st_mtime_ns
        except OSError as e:
            raise EditorError(f"Unable to write {scratch}: {e}") from e

        try:
            typer.edit(filename=str(scratch), editor=self.config.editor.command or None)
            if scratch.stat().st_mtime_ns == before:
                raise EditorError("Editor closed without saving.")
            text = scratch.read_text(encoding="utf-8")
        except ClickException as e:
            raise EditorError(e.format_message()) from e
        except OSError as e:
            raise EditorError(f"Unable to read {scratch}: {e}") from e
        finally:
            scratch.unlink(missing_ok=True)

        result = parse_edit(text)
        logger.debug("Edited metadata: name=%s tags=%s", result.name, result.tags)
        return result
