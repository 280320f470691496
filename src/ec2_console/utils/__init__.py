# utils/__init__.py
# Only dependency-free modules are re-exported here; config, filters,
# session and storage import from ec2_console.core and are imported by
# their full module path.

from .exceptions import (
    CLIError,
    Ec2ConsoleError,
    NotFound,
    RemoteError,
    RemoteUnavailable,
    Unauthorized,
    ValidationError,
    ValidationRules,
)
from .logger import setup_logger

__all__ = [
    "CLIError",
    "Ec2ConsoleError",
    "NotFound",
    "RemoteError",
    "RemoteUnavailable",
    "Unauthorized",
    "ValidationError",
    "ValidationRules",
    "setup_logger",
]
