"""
Interactive yes/no gate for destructive operations

Answers are read one line at a time from any iterable of strings, so the
same code runs against sys.stdin and against a list of canned answers.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional

from ..core.errors import MaxAttemptsError


class ConfirmationState(Enum):
    AWAITING_INPUT = "awaiting_input"
    CONFIRMED = "confirmed"
    DENIED = "denied"
    MAX_ATTEMPTS_EXCEEDED = "max_attempts_exceeded"


@dataclass(frozen=True)
class ConfirmationTokens:
    """The exact answers accepted as yes and no"""

    affirmative: str
    negative: str

    @property
    def prompt(self) -> str:
        return f"[{self.affirmative}/{self.negative}]"


# Single-item operations
SHORT_TOKENS = ConfirmationTokens("Y", "n")

# Bulk and irreversible operations
LONG_TOKENS = ConfirmationTokens("YES I AM", "no")


class Confirmation:
    """
    Bounded-retry confirmation state machine

    Each line that matches neither token counts as one invalid attempt.
    After MAX_ATTEMPTS invalid attempts the machine stops reading and ends in
    MAX_ATTEMPTS_EXCEEDED. Running out of input counts as a denial.
    """

    MAX_ATTEMPTS = 2

    def __init__(self, lines: Iterator[str], tokens: ConfirmationTokens = SHORT_TOKENS):
        self.lines = lines
        self.tokens = tokens
        self.state = ConfirmationState.AWAITING_INPUT
        self.attempts = 0

    def feed(self, line: str) -> ConfirmationState:
        """
        Advances the machine with one line of input

        Args:
            line: Raw input line, the line terminator is ignored

        Returns:
            The state after consuming the line
        """
        if self.state is not ConfirmationState.AWAITING_INPUT:
            return self.state

        answer = line.rstrip("\r\n")
        if answer == self.tokens.affirmative:
            self.state = ConfirmationState.CONFIRMED
        elif answer == self.tokens.negative:
            self.state = ConfirmationState.DENIED
        else:
            self.attempts += 1
            if self.attempts >= self.MAX_ATTEMPTS:
                self.state = ConfirmationState.MAX_ATTEMPTS_EXCEEDED
        return self.state

    def run(self) -> ConfirmationState:
        """Reads lines until the machine leaves AWAITING_INPUT"""
        while self.state is ConfirmationState.AWAITING_INPUT:
            line = next(self.lines, None)
            if line is None:
                self.state = ConfirmationState.DENIED
                break
            self.feed(line)
        return self.state


def confirm(
    lines: Iterator[str],
    question: str,
    tokens: ConfirmationTokens = SHORT_TOKENS,
    log_callback: Optional[Callable[[str], None]] = None
) -> bool:
    """
    Asks a question and waits for a yes/no answer

    Args:
        lines: Shared input source
        question: Text shown before the accepted answers
        tokens: Accepted answers
        log_callback: Function the question is written to

    Returns:
        True when confirmed, False when denied

    Raises:
        MaxAttemptsError: Too many answers matched neither token
    """
    if log_callback:
        log_callback(f"{question} {tokens.prompt}: ")

    state = Confirmation(lines, tokens).run()
    if state is ConfirmationState.MAX_ATTEMPTS_EXCEEDED:
        raise MaxAttemptsError()
    return state is ConfirmationState.CONFIRMED


def line_source(stream: Iterable[str]) -> Iterator[str]:
    """Wraps a stream so every confirmation shares one read position"""
    return iter(stream)
