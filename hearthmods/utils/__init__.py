"""Utils Package - interactive helpers shared by the managers."""

from .confirmation import (
    LONG_TOKENS,
    SHORT_TOKENS,
    Confirmation,
    ConfirmationState,
    ConfirmationTokens,
    confirm,
    line_source
)

__all__ = [
    "LONG_TOKENS",
    "SHORT_TOKENS",
    "Confirmation",
    "ConfirmationState",
    "ConfirmationTokens",
    "confirm",
    "line_source"
]
