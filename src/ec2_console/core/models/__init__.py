"""Simple data models for the EC2 console."""

# Connection models
from .connection import ConnectionContext

# Filter models
from .filters import (
    Filter,
    NormalizedFilter,
    StateFilter,
    TagPredicate,
)

# Instance models
from .instance import (
    InstanceRecord,
    InstanceState,
    can_reboot,
    can_start,
    can_stop,
    state_rank,
)

__all__ = [
    # Connection models
    "ConnectionContext",
    # Filter models
    "Filter",
    "NormalizedFilter",
    "StateFilter",
    "TagPredicate",
    # Instance models
    "InstanceRecord",
    "InstanceState",
    "can_reboot",
    "can_start",
    "can_stop",
    "state_rank",
]
