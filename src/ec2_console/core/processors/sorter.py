#!/usr/bin/env python3
"""Ordering and presentation of instance records."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ec2_console.core.constants import (
    FIELD_PLACEHOLDER,
    FILTER_STATE_ALL,
    IP_PLACEHOLDER,
    LAUNCH_TIME_FORMAT,
    META_TAG_LIMIT,
    NAME_TAG_KEY,
)
from ec2_console.core.models.instance import (
    InstanceRecord,
    can_reboot,
    can_start,
    can_stop,
    state_rank,
)


def sort_key(record: InstanceRecord) -> Tuple[int, str, str, str]:
    """State priority, then name (case-insensitive, raw as tie-break), then id."""
    return (state_rank(record.state), record.name.casefold(), record.name, record.id)


def sort_records(records: Iterable[InstanceRecord]) -> List[InstanceRecord]:
    """Deterministic total order; idempotent."""
    return sorted(records, key=sort_key)


def search_records(
    records: Iterable[InstanceRecord], term: str = "", state: str = FILTER_STATE_ALL
) -> List[InstanceRecord]:
    """Narrow already fetched records without another AWS call.

    ``term`` matches a case-insensitive substring of the name or the id;
    ``state`` keeps one exact state unless it is ``all``.
    """
    needle = (term or "").strip().casefold()
    state = (state or FILTER_STATE_ALL).strip().lower()
    return [
        record
        for record in records
        if (state == FILTER_STATE_ALL or record.state == state)
        and (not needle or needle in record.name.casefold() or needle in record.id.casefold())
    ]


@dataclass(frozen=True)
class InstanceRow:
    """One rendered row. Action flags come from the record's state only."""
    id: str
    name: str
    type: str
    availability_zone: str
    state: str
    launch_time: str
    meta: str
    can_start: bool
    can_stop: bool
    can_reboot: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "availability_zone": self.availability_zone,
            "state": self.state,
            "launch_time": self.launch_time,
            "meta": self.meta,
            "can_start": self.can_start,
            "can_stop": self.can_stop,
            "can_reboot": self.can_reboot,
        }


def format_launch_time(launch_time: Optional[datetime]) -> str:
    if not launch_time:
        return FIELD_PLACEHOLDER
    return launch_time.strftime(LAUNCH_TIME_FORMAT)


def build_meta(record: InstanceRecord) -> str:
    """Short summary: first non-Name tags, remaining tag count, public IP."""
    other_tags = [(key, value) for key, value in record.tags if key != NAME_TAG_KEY]
    fragments = [f"{key}={value}" for key, value in other_tags[:META_TAG_LIMIT]]
    if len(other_tags) > META_TAG_LIMIT:
        fragments.append(f"+{len(other_tags) - META_TAG_LIMIT} tags")

    meta = []
    if fragments:
        meta.append(" · ".join(fragments))
    if record.public_ip and record.public_ip != IP_PLACEHOLDER:
        meta.append(f"IP {record.public_ip}")
    return " · ".join(meta)


def render_rows(records: Iterable[InstanceRecord]) -> List[InstanceRow]:
    """Sort and render. Enablement is recomputed on every call."""
    return [
        InstanceRow(
            id=record.id,
            name=record.name,
            type=record.type,
            availability_zone=record.availability_zone,
            state=record.state,
            launch_time=format_launch_time(record.launch_time),
            meta=build_meta(record),
            can_start=can_start(record.state),
            can_stop=can_stop(record.state),
            can_reboot=can_reboot(record.state),
        )
        for record in sort_records(records)
    ]


TABLE_COLUMNS = [
    ("Name", "name"),
    ("ID", "id"),
    ("Type", "type"),
    ("Zone", "availability_zone"),
    ("State", "state"),
    ("Launched", "launch_time"),
    ("Actions", "actions"),
]


def _actions(row: InstanceRow) -> str:
    actions = [
        label
        for label, enabled in (("start", row.can_start), ("stop", row.can_stop), ("reboot", row.can_reboot))
        if enabled
    ]
    return ",".join(actions) or "-"


def render_table(rows: List[InstanceRow]) -> str:
    """Plain text table for terminal output."""
    if not rows:
        return "No instances to display. Adjust the filters and try again."

    table = []
    for row in rows:
        values = row.to_dict()
        values["actions"] = _actions(row)
        table.append([str(values[attr]) for _, attr in TABLE_COLUMNS])

    headers = [title for title, _ in TABLE_COLUMNS]
    widths = [
        max(len(headers[i]), *(len(line[i]) for line in table)) for i in range(len(headers))
    ]
    lines = ["  ".join(h.ljust(w) for h, w in zip(headers, widths))]
    lines.append("  ".join("-" * w for w in widths))
    for line in table:
        lines.append("  ".join(v.ljust(w) for v, w in zip(line, widths)))
    return "\n".join(lines)


def summarize(records: Iterable[InstanceRecord]) -> Dict[str, int]:
    """Counts shown above the list."""
    records = list(records)
    running = sum(1 for r in records if r.state == "running")
    stopped = sum(1 for r in records if r.state == "stopped")
    return {
        "total": len(records),
        "running": running,
        "stopped": stopped,
        "other": len(records) - running - stopped,
    }
