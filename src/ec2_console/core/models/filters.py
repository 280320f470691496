"""Structured instance query built from free-text filter input."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ec2_console.core.constants import FILTER_STATE_ALL


class StateFilter(Enum):
    """Instance states accepted by the state filter."""
    ALL = FILTER_STATE_ALL
    PENDING = "pending"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class TagPredicate:
    """A tag match rule.

    ``key`` with ``values`` is an exact ``tag:<key>`` match on any of the
    values; ``key`` alone means "has tag key"; ``values`` alone means
    "has a tag with one of these values".
    """
    key: Optional[str] = None
    values: Tuple[str, ...] = ()

    def to_aws_filter(self) -> Dict[str, Any]:
        if self.key and self.values:
            return {"Name": f"tag:{self.key}", "Values": list(self.values)}
        if self.key:
            return {"Name": "tag-key", "Values": [self.key]}
        return {"Name": "tag-value", "Values": list(self.values)}


@dataclass(frozen=True)
class Filter:
    """Immutable query for one fetch.

    When ``instance_ids`` is non-empty it takes precedence: tag and state
    predicates are not sent, mirroring DescribeInstances exclusive lookup.
    """
    instance_ids: Tuple[str, ...] = ()
    tag_key: str = ""
    tag_value: str = ""
    tag_predicates: Tuple[TagPredicate, ...] = ()
    state: str = FILTER_STATE_ALL

    @property
    def is_id_lookup(self) -> bool:
        return bool(self.instance_ids)

    def predicates(self) -> List[TagPredicate]:
        """Tag predicates from the key/value fields followed by the tag expression."""
        predicates = []
        if self.tag_key or self.tag_value:
            predicates.append(
                TagPredicate(
                    key=self.tag_key or None,
                    values=(self.tag_value,) if self.tag_value else (),
                )
            )
        predicates.extend(self.tag_predicates)
        return predicates

    def to_describe_params(self) -> Dict[str, Any]:
        """Keyword arguments for ``ec2.describe_instances``."""
        if self.instance_ids:
            return {"InstanceIds": list(self.instance_ids)}

        aws_filters = [predicate.to_aws_filter() for predicate in self.predicates()]
        if self.state and self.state != FILTER_STATE_ALL:
            aws_filters.append({"Name": "instance-state-name", "Values": [self.state]})

        params: Dict[str, Any] = {}
        if aws_filters:
            params["Filters"] = aws_filters
        return params

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instance_ids": list(self.instance_ids),
            "tag_key": self.tag_key,
            "tag_value": self.tag_value,
            "tags": ", ".join(
                f"{p.key}={'|'.join(p.values)}" for p in self.tag_predicates if p.key
            ),
            "state": self.state,
        }


@dataclass(frozen=True)
class NormalizedFilter:
    """Normalizer output: the filter plus any non-fatal parse warnings."""
    filter: Filter
    warnings: Tuple[str, ...] = field(default_factory=tuple)
