"""Connection parameters used to authenticate EC2 calls."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ec2_console.utils.exceptions import ValidationError


@dataclass(frozen=True)
class ConnectionContext:
    """Validated credential/region bundle.

    Replaced wholesale on reconnect; never mutated field by field.
    """

    access_key_id: str
    secret_access_key: str = field(repr=False)
    region: str
    session_token: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_raw(
        cls,
        access_key_id: Optional[str] = "",
        secret_access_key: Optional[str] = "",
        region: Optional[str] = "",
        session_token: Optional[str] = "",
    ) -> "ConnectionContext":
        """Build a trimmed context from raw form/env input. Does not validate."""
        return cls(
            access_key_id=(access_key_id or "").strip(),
            secret_access_key=(secret_access_key or "").strip(),
            region=(region or "").strip(),
            session_token=(session_token or "").strip() or None,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionContext":
        return cls.from_raw(
            access_key_id=data.get("access_key_id"),
            secret_access_key=data.get("secret_access_key"),
            region=data.get("region"),
            session_token=data.get("session_token"),
        )

    def missing_fields(self) -> list:
        missing = []
        if not self.access_key_id:
            missing.append("access_key_id")
        if not self.secret_access_key:
            missing.append("secret_access_key")
        if not self.region:
            missing.append("region")
        return missing

    def validate(self) -> "ConnectionContext":
        """Raise ValidationError when a required field is empty."""
        missing = self.missing_fields()
        if missing:
            raise ValidationError(
                f"Access key id, secret access key and region are required "
                f"(missing: {', '.join(missing)})",
                code="MissingCredentials",
            )
        return self

    def to_dict(self) -> Dict[str, str]:
        return {
            "access_key_id": self.access_key_id,
            "secret_access_key": self.secret_access_key,
            "session_token": self.session_token or "",
            "region": self.region,
        }
