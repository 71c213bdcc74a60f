"""User interaction seam.

The wizard and the handlers only talk to a ``Prompter``. ``ConsolePrompter``
implements it on a terminal; tests substitute a scripted one.

Dismissing a prompt (``None`` result) is how the user steps back.
"""

import asyncio
import sys
from dataclasses import dataclass
from typing import Any, Optional

# Typed at a console prompt to dismiss it.
BACK_TOKEN = "<"


@dataclass(frozen=True)
class PickItem:
    """One entry of a pick list; separators are headers, not choices."""
    label: str
    value: Any = None
    description: str = ""
    separator: bool = False


class Prompter:
    """Host UI primitives used by the wizard."""

    async def pick(self, items: list, title: Optional[str] = None, placeholder: Optional[str] = None) -> Optional[PickItem]:
        """Let the user choose one of ``items``; ``None`` when dismissed."""
        raise NotImplementedError

    async def input_box(self, prompt: str, default: str = "", placeholder: Optional[str] = None) -> Optional[str]:
        """Ask for a line of text; ``None`` when dismissed."""
        raise NotImplementedError

    def show_info(self, message: str) -> None:
        raise NotImplementedError

    def show_warning(self, message: str) -> None:
        raise NotImplementedError

    def show_error(self, message: str) -> None:
        raise NotImplementedError

    def report_progress(self, message: str) -> None:
        raise NotImplementedError


class ConsolePrompter(Prompter):
    """Prompter reading from stdin and printing to stdout/stderr.

    Pick lists are numbered; the user answers with a number. Typing ``<``
    or sending end-of-file dismisses the prompt.
    """

    def __init__(self, stdin=None, stdout=None, stderr=None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    def _read_line(self, prompt: str) -> Optional[str]:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            self.stdout.write("\n")
            return None
        line = line.rstrip("\r\n")
        if line.strip() == BACK_TOKEN:
            return None
        return line

    async def pick(self, items, title=None, placeholder=None):
        if title:
            print(title, file=self.stdout)
        choices = []
        for item in items:
            if item.separator:
                print(f"  -- {item.label} --", file=self.stdout)
                continue
            choices.append(item)
            suffix = f"  ({item.description})" if item.description else ""
            print(f"  {len(choices):>3}. {item.label}{suffix}", file=self.stdout)
        if not choices:
            return None

        prompt = f"{placeholder or 'Select an item.'} [1-{len(choices)}, {BACK_TOKEN} to go back]: "
        while True:
            answer = await asyncio.to_thread(self._read_line, prompt)
            if answer is None:
                return None
            answer = answer.strip()
            if answer.isdigit() and 1 <= int(answer) <= len(choices):
                return choices[int(answer) - 1]
            print(f"Please enter a number between 1 and {len(choices)}.", file=self.stdout)

    async def input_box(self, prompt, default="", placeholder=None):
        hint = f" [{default}]" if default else (f" ({placeholder})" if placeholder else "")
        answer = await asyncio.to_thread(self._read_line, f"{prompt}{hint}: ")
        if answer is None:
            return None
        return answer.strip() or default

    def show_info(self, message):
        print(message, file=self.stdout)

    def show_warning(self, message):
        print(f"WARNING: {message}", file=self.stderr)

    def show_error(self, message):
        print(f"ERROR: {message}", file=self.stderr)

    def report_progress(self, message):
        print(f"  ... {message}", file=self.stdout)
