"""External editor resolution and invocation."""

from __future__ import annotations

import asyncio
import contextlib
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from kubedeck.session.protocols import EditResult

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractContextManager

logger = structlog.get_logger()


def get_editor(configured: str | None = None) -> str:
    """Get the editor command.

    Priority order:
    1. Explicitly configured command (``SessionConfig.editor``)
    2. KUBEDECK_EDITOR environment variable
    3. EDITOR environment variable
    4. VISUAL environment variable
    5. "vim" fallback

    Returns:
        Editor command string (e.g., "vim", "code --wait", "nano").
    """
    return (
        configured
        or os.environ.get("KUBEDECK_EDITOR")
        or os.environ.get("EDITOR")
        or os.environ.get("VISUAL")
        or "vim"
    )


class ExternalEditor:
    """Runs the operator's editor on a temporary file.

    The editor process runs in a worker thread so the event loop keeps
    serving watch and log streams while the operator edits.

    Args:
        command: Editor command; resolved with :func:`get_editor`.
        suspend: Context manager factory that releases the terminal for
            the duration of the editor session (e.g. ``App.suspend``).
    """

    def __init__(
        self,
        command: str | None = None,
        suspend: Callable[[], AbstractContextManager[object]] | None = None,
    ) -> None:
        self.command = get_editor(command)
        self._suspend = suspend or contextlib.nullcontext
        self._log = logger.bind(component="editor")

    async def edit(self, text: str, suffix: str = ".yaml") -> EditResult:
        """Edit ``text`` and report whether it changed."""
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=suffix,
            prefix="kubedeck-",
            delete=False,
        ) as f:
            f.write(text)
            temp_path = Path(f.name)

        argv = [*shlex.split(self.command), str(temp_path)]
        self._log.debug("editor_starting", command=self.command)
        try:
            with self._suspend():
                completed = await asyncio.to_thread(subprocess.run, argv, check=False)
            if completed.returncode != 0:
                self._log.info("editor_aborted", returncode=completed.returncode)
                return EditResult.aborted(f"editor exited with status {completed.returncode}")
            edited = temp_path.read_text()
        except OSError as e:
            self._log.warning("editor_failed", command=self.command, error=str(e))
            return EditResult.aborted(f"cannot run editor '{self.command}': {e}")
        finally:
            temp_path.unlink(missing_ok=True)

        if edited == text:
            return EditResult.unchanged()
        return EditResult.changed(edited)
