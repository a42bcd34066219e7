"""
Interactive prompts.
"""

import asyncio
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TextIO


@dataclass(frozen=True)
class Choice:
    label: str
    value: Any


class Prompter(ABC):
    """Source of human decisions."""

    @abstractmethod
    async def ask_text(self, message: str) -> str:
        """Ask until a non-empty answer is given."""
        pass

    @abstractmethod
    async def choose(self, message: str, choices: Sequence[Choice]) -> Any:
        """Return the value of the selected choice."""
        pass

    @abstractmethod
    async def pause(self, message: str) -> None:
        """Wait for the user to confirm with Enter."""
        pass


class ConsolePrompter(Prompter):
    """Prompts on stdin/stdout; reads run in the loop's default executor."""

    def __init__(self, read: Optional[Callable[[str], str]] = None, out: Optional[TextIO] = None):
        self._read = read or input
        self.out = out or sys.stdout

    async def _input(self, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read, prompt)

    async def ask_text(self, message: str) -> str:
        answer = ""
        while not answer:
            answer = (await self._input(f"? {message} ")).strip()
        return answer

    async def choose(self, message: str, choices: Sequence[Choice]) -> Any:
        if not choices:
            raise ValueError("Nothing to choose from")

        print(f"? {message}", file=self.out)
        for i, choice in enumerate(choices):
            print(f"[{i}] {choice.label}", file=self.out)

        while True:
            answer = (await self._input("> ")).strip()
            if not answer.isdigit():
                print("Enter a valid index.", file=self.out)
                continue
            idx = int(answer)
            if idx >= len(choices):
                print("Index out of range.", file=self.out)
                continue
            return choices[idx].value

    async def pause(self, message: str) -> None:
        await self._input(message)

