"""Exception hierarchy for leeward.

All domain-specific exceptions inherit from ``LeewardError``. Errors caused
by bad input also inherit from ``ValueError`` so callers that already guard
numerical code with ``except ValueError`` keep working.

Usage:
    from leeward.exceptions import SingularMatrixError

    try:
        adjust = adjust.adjust()
    except SingularMatrixError as e:
        adjust = e.adjust  # last good solver state, history included
"""

from typing import Any, Optional


class LeewardError(Exception):
    """Base class for all leeward errors."""


class ConfigError(LeewardError, ValueError):
    """A configuration file or value is malformed."""

    def __init__(self, message: str, path: Optional[str] = None):
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


class MissingTimeError(LeewardError, ValueError):
    """A lidar point has no timestamp but one is required."""


class PoseNotFoundError(LeewardError, ValueError):
    """No trajectory pose covers the requested time."""

    def __init__(self, time: float):
        super().__init__(f"no trajectory pose found for time: {time}")
        self.time = time


class EmptyBatchError(LeewardError, ValueError):
    """An adjustment was requested over zero measurements."""

    def __init__(self) -> None:
        super().__init__("cannot create adjust with no measurements")


class ConfigMismatchError(LeewardError, ValueError):
    """Measurements in one batch do not share the same configuration."""

    def __init__(self, index: int):
        super().__init__(
            f"not all measurements have the same config (first mismatch at index {index})"
        )
        self.index = index


class UnsupportedVariableError(LeewardError, ValueError):
    """A variable was passed to a function that does not handle it."""

    def __init__(self, variable: Any, context: str = ""):
        message = f"unsupported variable: {variable}"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)
        self.variable = variable


class SingularMatrixError(LeewardError, ArithmeticError):
    """The normal equations of an adjustment step cannot be inverted.

    Attributes:
        adjust: The last successfully computed adjustment, if any. Its
            configuration and history are the partial progress of the solve.
    """

    def __init__(self, message: str = "no inverse found", adjust: Any = None):
        super().__init__(message)
        self.adjust = adjust
