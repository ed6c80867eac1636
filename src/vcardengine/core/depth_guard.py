"""Depth limiting for embedded-record recursion.

An embedded record (AGENT) may itself embed a record, on every syntax
that supports nesting. The guard counts nesting for one top-level read or
write and raises once the limit is reached.

Thread-safe: uses explicit state, no thread-local storage.
Python 3.13+.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field

from vcardengine.constants import MAX_DEPTH
from vcardengine.diagnostics import VCardError
from vcardengine.diagnostics.templates import ErrorTemplate

__all__ = ["DepthGuard", "DepthLimitExceededError", "depth_clamp"]

logger = logging.getLogger(__name__)


class DepthLimitExceededError(VCardError):
    """Raised when embedded records nest deeper than the configured limit."""


@dataclass(slots=True)
class DepthGuard:
    """Context manager counting embedded-record nesting.

    Usage:
        guard = DepthGuard(max_depth=10)
        with guard:
            nested = reader.read_next()

    The same guard instance is handed down to nested readers and writers
    so that the count spans the whole recursion.

    Attributes:
        max_depth: Maximum allowed nesting (default: MAX_DEPTH)
        depth: Current nesting
    """

    max_depth: int = MAX_DEPTH
    depth: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        """Clamp max_depth against the interpreter recursion limit."""
        self.max_depth = depth_clamp(self.max_depth)

    def __enter__(self) -> DepthGuard:
        """Enter one nesting level."""
        self.enter()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Leave one nesting level."""
        self.leave()

    def enter(self) -> None:
        """Enter one nesting level outside a ``with`` block.

        Used by readers that track nesting on an explicit stack. The limit
        is checked before incrementing so a refused level leaves the count
        unchanged.

        Raises:
            DepthLimitExceededError: If the limit is reached
        """
        self.check()
        self.depth += 1

    def leave(self) -> None:
        """Leave a level entered with ``enter``."""
        self.depth -= 1

    def check(self) -> None:
        """Raise if another nesting level would exceed the limit.

        Raises:
            DepthLimitExceededError: If the limit is reached
        """
        if self.depth >= self.max_depth:
            raise DepthLimitExceededError(ErrorTemplate.depth_exceeded(self.max_depth))


def depth_clamp(requested_depth: int, reserve_frames: int = 50) -> int:
    """Clamp requested depth against the Python recursion limit.

    Each nesting level costs several stack frames (orchestrator, scribe,
    nested orchestrator), so the usable depth is well below the raw
    recursion limit. Logs a warning if clamping occurs.

    Args:
        requested_depth: Desired maximum depth
        reserve_frames: Stack frames to reserve for call overhead (default: 50)

    Returns:
        Safe depth value, clamped if necessary
    """
    max_safe_depth = (sys.getrecursionlimit() - reserve_frames) // 8
    if requested_depth > max_safe_depth:
        logger.warning(
            "Requested depth %d exceeds what the recursion limit (%d) allows. "
            "Clamping to %d.",
            requested_depth,
            sys.getrecursionlimit(),
            max_safe_depth,
        )
        return max_safe_depth
    return requested_depth
