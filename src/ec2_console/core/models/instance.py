"""Simple Instance Data Models

Normalized local representation of EC2 instances."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ec2_console.core.constants import (
    FIELD_PLACEHOLDER,
    IP_PLACEHOLDER,
    NAME_PLACEHOLDER,
    NAME_TAG_KEY,
    STATE_ORDER,
    UNKNOWN_STATE,
)


class InstanceState(Enum):
    """EC2 Instance states."""
    PENDING = "pending"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"
    UNKNOWN = UNKNOWN_STATE


def state_rank(state: str) -> int:
    """Priority of a state name; unknown states sort last."""
    return STATE_ORDER.get(state, STATE_ORDER[UNKNOWN_STATE])


def can_start(state: str) -> bool:
    return state == InstanceState.STOPPED.value


def can_stop(state: str) -> bool:
    return state == InstanceState.RUNNING.value


def can_reboot(state: str) -> bool:
    return state == InstanceState.RUNNING.value


@dataclass(frozen=True)
class InstanceRecord:
    """One remote instance as displayed. Rebuilt on every fetch."""
    id: str
    name: str = NAME_PLACEHOLDER
    type: str = FIELD_PLACEHOLDER
    state: str = UNKNOWN_STATE
    public_ip: str = IP_PLACEHOLDER
    private_ip: str = IP_PLACEHOLDER
    availability_zone: str = FIELD_PLACEHOLDER
    launch_time: Optional[datetime] = None
    tags: Tuple[Tuple[str, str], ...] = ()
    # Extended fields, shown by the single-instance lookup
    vpc_id: Optional[str] = None
    subnet_id: Optional[str] = None
    image_id: Optional[str] = None
    key_name: Optional[str] = None
    platform: str = "linux"

    @property
    def can_start(self) -> bool:
        return can_start(self.state)

    @property
    def can_stop(self) -> bool:
        return can_stop(self.state)

    @property
    def can_reboot(self) -> bool:
        return can_reboot(self.state)

    @property
    def rank(self) -> int:
        return state_rank(self.state)

    def get_tag(self, key: str, default: str = "") -> str:
        for tag_key, value in self.tags:
            if tag_key == key:
                return value
        return default

    @classmethod
    def from_aws_instance(cls, instance: Dict[str, Any]) -> "InstanceRecord":
        """Create InstanceRecord from a DescribeInstances instance entry."""
        tags = tuple(
            (tag["Key"], tag.get("Value", ""))
            for tag in instance.get("Tags") or []
            if tag.get("Key")
        )

        name = NAME_PLACEHOLDER
        for key, value in tags:
            if key == NAME_TAG_KEY:
                name = value or NAME_PLACEHOLDER
                break

        state = ((instance.get("State") or {}).get("Name") or UNKNOWN_STATE).lower()
        launch_time = instance.get("LaunchTime")
        if isinstance(launch_time, str):
            launch_time = _parse_timestamp(launch_time)

        return cls(
            id=instance["InstanceId"],
            name=name,
            type=instance.get("InstanceType") or FIELD_PLACEHOLDER,
            state=state,
            public_ip=instance.get("PublicIpAddress") or IP_PLACEHOLDER,
            private_ip=instance.get("PrivateIpAddress") or IP_PLACEHOLDER,
            availability_zone=(instance.get("Placement") or {}).get("AvailabilityZone")
            or FIELD_PLACEHOLDER,
            launch_time=launch_time,
            tags=tags,
            vpc_id=instance.get("VpcId"),
            subnet_id=instance.get("SubnetId"),
            image_id=instance.get("ImageId"),
            key_name=instance.get("KeyName"),
            platform=instance.get("Platform", "linux"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstanceRecord":
        """Rebuild a record from ``to_dict`` output (HTTP proxy payloads)."""
        launch_time = data.get("launch_time")
        if isinstance(launch_time, str):
            launch_time = _parse_timestamp(launch_time)
        return cls(
            id=data["id"],
            name=data.get("name") or NAME_PLACEHOLDER,
            type=data.get("type") or FIELD_PLACEHOLDER,
            state=(data.get("state") or UNKNOWN_STATE).lower(),
            public_ip=data.get("public_ip") or IP_PLACEHOLDER,
            private_ip=data.get("private_ip") or IP_PLACEHOLDER,
            availability_zone=data.get("availability_zone") or FIELD_PLACEHOLDER,
            launch_time=launch_time,
            tags=tuple((tag["key"], tag.get("value", "")) for tag in data.get("tags") or []),
            vpc_id=data.get("vpc_id"),
            subnet_id=data.get("subnet_id"),
            image_id=data.get("image_id"),
            key_name=data.get("key_name"),
            platform=data.get("platform") or "linux",
        )

    def to_dict(self, extended: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "state": self.state,
            "public_ip": self.public_ip,
            "private_ip": self.private_ip,
            "availability_zone": self.availability_zone,
            "launch_time": self.launch_time.isoformat() if self.launch_time else None,
            "tags": [{"key": key, "value": value} for key, value in self.tags],
        }
        if extended:
            data.update(
                {
                    "vpc_id": self.vpc_id,
                    "subnet_id": self.subnet_id,
                    "image_id": self.image_id,
                    "key_name": self.key_name,
                    "platform": self.platform,
                }
            )
        return data


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
