"""Host collaborators: prompts, notifications, install and reload.

The orchestrator drives every side effect on the host through the
:class:`Host` protocol, so a cycle runs the same against the editor CLI and
against test doubles. :class:`CommandHost` is the terminal
implementation used by the ``extension-updater`` command: it asks on stdin
and installs with ``<code> --install-extension <file> --force``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import ContextManager, Iterator, List, Optional, Protocol

from .errors import InstallError
from .prompts import prompt_choice
from .ui import dim, info, ok

logger = logging.getLogger(__name__)


class Host(Protocol):
    async def confirm(self, message: str, accept: str, decline: str) -> bool:
        ...

    async def notify(self, message: str) -> None:
        ...

    async def install(self, path: Path) -> None:
        ...

    async def reload(self) -> None:
        ...

    def progress(self, title: str) -> ContextManager[None]:
        ...


class CommandHost:
    """Terminal host that installs through the editor's command line."""

    def __init__(self, code_binary: str = "code", *, assume_yes: bool = False):
        self.code_binary = code_binary
        self.assume_yes = assume_yes

    async def confirm(self, message: str, accept: str, decline: str) -> bool:
        if self.assume_yes:
            info(f"{message} ({accept})")
            return True
        return await asyncio.to_thread(prompt_choice, message, accept, decline)

    async def notify(self, message: str) -> None:
        info(message)

    def install_command(self, path: Path) -> List[str]:
        return [self.code_binary, "--install-extension", str(path), "--force"]

    async def install(self, path: Path) -> None:
        """Run the editor CLI installer; a non-zero exit is an ``InstallError``."""
        binary = shutil.which(self.code_binary) or self.code_binary
        cmd = [binary, *self.install_command(path)[1:]]
        logger.info("Installing extension from %s", path)
        try:
            await asyncio.to_thread(
                subprocess.run, cmd, check=True, capture_output=True, text=True
            )
        except FileNotFoundError as e:
            raise InstallError(
                f"Editor command '{self.code_binary}' not found"
            ) from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or "").strip().splitlines()
            raise InstallError(
                f"Install of {path.name} failed (exit {e.returncode})"
                + (f": {detail[-1]}" if detail else "")
            ) from e
        logger.info("Done installing extension from %s", path)

    async def reload(self) -> None:
        # A terminal cannot restart an editor window; tell the user instead.
        ok("Reload the editor window (Developer: Reload Window) to finish.")

    @contextlib.contextmanager
    def progress(self, title: str) -> Iterator[None]:
        dim(f"{title}...")
        start = time.perf_counter()
        try:
            yield
        finally:
            logger.debug("%s took %.0f ms", title, (time.perf_counter() - start) * 1000)


def find_code_binary(preferred: Optional[str] = None) -> Optional[str]:
    """Locate an editor CLI able to install ``.vsix`` packages."""
    for name in filter(None, (preferred, "code", "code-insiders", "codium")):
        path = shutil.which(name)
        if path:
            return path
    return None


__all__ = ["CommandHost", "Host", "find_code_binary"]
