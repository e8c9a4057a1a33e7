"""Smart edit — fuzzy code replacement and patch reconciliation for agents."""

from .config import Config
from .errors import (
    EditError, NotFoundError, NoMatchError, InvalidRangeError,
    PatchFailureError, SecurityViolation, InvalidRequestError, SyntaxCheckError,
)
from .tools import EditTools, DirectEdit, PatchEdit

__version__ = "0.1.0"

__all__ = [
    "Config", "EditTools", "DirectEdit", "PatchEdit",
    "EditError", "NotFoundError", "NoMatchError", "InvalidRangeError",
    "PatchFailureError", "SecurityViolation", "InvalidRequestError",
    "SyntaxCheckError",
]
