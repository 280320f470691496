#!/usr/bin/env python3
"""
Filter normalization for instance queries.

Turns the raw text a user typed (instance id lists, tag expressions,
tag key/value fields, a state name) into an immutable ``Filter``.
Malformed pieces never raise; they are dropped and reported as warnings.
"""

import re
from typing import List, Optional, Tuple

from ec2_console.core.constants import FILTER_STATE_ALL
from ec2_console.core.models.filters import (
    Filter,
    NormalizedFilter,
    StateFilter,
    TagPredicate,
)

_ID_SEPARATORS = re.compile(r"[,\s]+")


def split_instance_ids(raw: Optional[str]) -> Tuple[str, ...]:
    """
    Split a comma/whitespace separated id list.

    Tokens are trimmed, empty tokens dropped and duplicates removed while
    keeping first-seen order.

    Example:
        split_instance_ids("i-1, i-2  i-1,,")  # ("i-1", "i-2")
    """
    seen = []
    for token in _ID_SEPARATORS.split(raw or ""):
        token = token.strip()
        if token and token not in seen:
            seen.append(token)
    return tuple(seen)


def parse_tag_expression(raw: Optional[str]) -> Tuple[Tuple[TagPredicate, ...], List[str]]:
    """
    Parse ``Key=v1|v2, Other=v3`` into tag predicates.

    Returns:
        (predicates, warnings). Segments that are not ``key=value`` are
        skipped with a warning.
    """
    predicates = []
    warnings = []

    for segment in (raw or "").split(","):
        segment = segment.strip()
        if not segment:
            continue

        key, sep, value_part = segment.partition("=")
        key = key.strip()
        if not sep or not key:
            warnings.append(f"Ignoring tag filter '{segment}': expected key=value")
            continue

        values = tuple(v.strip() for v in value_part.split("|") if v.strip())
        if not values:
            warnings.append(f"Ignoring tag filter '{segment}': no value given")
            continue

        predicates.append(TagPredicate(key=key, values=values))

    return tuple(predicates), warnings


def normalize_state(raw: Optional[str]) -> Tuple[str, Optional[str]]:
    state = (raw or FILTER_STATE_ALL).strip().lower() or FILTER_STATE_ALL
    if state not in StateFilter.values():
        return FILTER_STATE_ALL, f"Unknown state '{raw}', showing all states"
    return state, None


def normalize_filters(
    instance_ids: Optional[str] = "",
    tags: Optional[str] = "",
    tag_key: Optional[str] = "",
    tag_value: Optional[str] = "",
    state: Optional[str] = FILTER_STATE_ALL,
) -> NormalizedFilter:
    """Build a Filter from raw form/CLI/query-string input."""
    warnings = []

    ids = split_instance_ids(instance_ids)
    predicates, tag_warnings = parse_tag_expression(tags)
    warnings.extend(tag_warnings)

    normalized_state, state_warning = normalize_state(state)
    if state_warning:
        warnings.append(state_warning)

    query = Filter(
        instance_ids=ids,
        tag_key=(tag_key or "").strip(),
        tag_value=(tag_value or "").strip(),
        tag_predicates=predicates,
        state=normalized_state,
    )

    if ids and (query.predicates() or normalized_state != FILTER_STATE_ALL):
        warnings.append("Instance ids given: tag and state filters are ignored")

    return NormalizedFilter(filter=query, warnings=tuple(warnings))


def filter_from_dict(data: dict) -> NormalizedFilter:
    """Rebuild a filter from ``Filter.to_dict`` output (persisted filters)."""
    ids = data.get("instance_ids") or []
    if isinstance(ids, (list, tuple)):
        ids = ", ".join(ids)
    return normalize_filters(
        instance_ids=ids,
        tags=data.get("tags", ""),
        tag_key=data.get("tag_key", ""),
        tag_value=data.get("tag_value", ""),
        state=data.get("state", FILTER_STATE_ALL),
    )
