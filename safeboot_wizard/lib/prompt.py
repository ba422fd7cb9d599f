from __future__ import annotations

import logging
import sys
from typing import Callable, Optional, Sequence, TextIO

from ..errors import AmbiguousInput

logger = logging.getLogger(__name__)

YES = "y"
NO = "n"


class Console:
    """Operator I/O for the wizard.

    Answers are free text compared case-sensitively after trimming the
    surrounding whitespace, the way ``read -r`` hands them to a shell script.
    Every gate asks its own question and keeps its own answer.
    """

    def __init__(
        self,
        *,
        input_fn: Callable[[str], str] = input,
        out: Optional[TextIO] = None,
    ) -> None:
        self._input = input_fn
        self._out = out

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def say(self, text: str = "") -> None:
        if text.strip():
            logger.info("SAY %s", text.strip())
        self.out.write(text)
        if not text.endswith("\n"):
            self.out.write("\n")
        self.out.flush()

    def ask(self, prompt: str) -> Optional[str]:
        """Return the trimmed answer, or None on end of input."""

        try:
            answer = self._input(prompt)
        except EOFError:
            self.say()
            logger.info("PROMPT %r -> <eof>", prompt)
            return None
        answer = answer.strip()
        logger.info("PROMPT %r -> %r", prompt, answer)
        return answer

    def confirm(self, prompt: str) -> bool:
        """Yes/no gate. Only a literal ``y`` counts as yes."""

        return self.ask(f"{prompt} [y/n] ") == YES

    def choose(self, prompt: str, choices: Sequence[str]) -> str:
        answer = self.ask(f"{prompt} [{'/'.join(choices)}] ")
        if answer is None or answer not in choices:
            raise AmbiguousInput(answer or "", choices)
        return answer
