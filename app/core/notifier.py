"""
User-facing notifications for the console.

The API client reports failures through a ``Notifier`` rather than printing
directly, so the same client can drive an interactive terminal or a test.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

import structlog
from rich.console import Console
from rich.prompt import Confirm

logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    """What the client needs from the presentation layer."""

    def info(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...

    async def confirm(self, text: str, title: str = "Notice") -> bool: ...


class RichNotifier:
    """Toasts and yes/no prompts rendered on a rich console."""

    def __init__(self, console: Optional[Console] = None, interactive: bool = True):
        self.console = console or Console(stderr=True)
        self.interactive = interactive

    def info(self, text: str) -> None:
        self.console.print(f"[green]✓[/green] {text}")

    def error(self, text: str) -> None:
        self.console.print(f"[red]✗[/red] {text}")

    async def confirm(self, text: str, title: str = "Notice") -> bool:
        if not self.interactive:
            logger.debug("Confirm skipped in non-interactive mode", title=title)
            return False

        # Confirm.ask blocks on stdin; keep the event loop free for in-flight requests
        return await asyncio.to_thread(
            Confirm.ask, f"[yellow]{title}:[/yellow] {text}", console=self.console
        )


@dataclass
class RecordingNotifier:
    """Collects notifications in memory and answers prompts from a fixed reply."""

    answer: bool = False
    messages: List[Tuple[str, str]] = field(default_factory=list)
    prompts: List[str] = field(default_factory=list)

    def info(self, text: str) -> None:
        self.messages.append(("info", text))

    def error(self, text: str) -> None:
        self.messages.append(("error", text))

    async def confirm(self, text: str, title: str = "Notice") -> bool:
        self.prompts.append(text)
        return self.answer

    @property
    def errors(self) -> List[str]:
        return [text for level, text in self.messages if level == "error"]
