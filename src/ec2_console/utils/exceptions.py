"""Exception classes and validation utilities for the EC2 console.

Every remote failure is translated into one of the classes below before it
leaves the AWS layer, so callers only ever catch ``Ec2ConsoleError``.
"""

import re


class Ec2ConsoleError(Exception):
    """Base class for console errors."""

    # HTTP status used by the proxy when the error reaches a route
    status_code = 500

    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code:
            return f"{self.message} ({self.code})"
        return self.message


class ValidationError(Ec2ConsoleError):
    """Missing or malformed input; no network call was attempted."""

    status_code = 400


class Unauthorized(Ec2ConsoleError):
    """The remote API rejected the credentials."""

    status_code = 401


class NotFound(Ec2ConsoleError):
    """Single-instance lookup on an id that does not exist."""

    status_code = 404


class RemoteUnavailable(Ec2ConsoleError):
    """Network failure, timeout, throttling or a 5xx from the remote API."""

    status_code = 503


class RemoteError(Ec2ConsoleError):
    """The remote API refused the request itself (e.g. IncorrectInstanceState)."""

    status_code = 409

    def __init__(self, message: str, code: str = "", status_code: int = 0):
        super().__init__(message, code)
        if status_code:
            self.status_code = status_code


class CLIError(Exception):
    """Custom exception for CLI-related errors."""

    pass


class ValidationRules:
    """Validation utilities for AWS identifiers."""

    @staticmethod
    def validate_instance_id(instance_id: str) -> bool:
        """Validate EC2 instance ID format (i- followed by 8 or 17 hex chars)."""
        return bool(re.match(r"^i-([0-9a-f]{8}|[0-9a-f]{17})$", instance_id))

    @staticmethod
    def validate_region(region: str) -> bool:
        """Validate AWS region name format (e.g. eu-west-3, us-gov-west-1)."""
        return bool(re.match(r"^[a-z]{2}(-[a-z]+)+-\d$", region))
