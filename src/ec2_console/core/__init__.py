"""Core EC2 console module."""

from .aws import EC2Manager, ProxyClient, create_ec2_manager
from .models import (
    ConnectionContext,
    Filter,
    InstanceRecord,
    InstanceState,
    TagPredicate,
)
from .processors import (
    ActionDispatcher,
    CSVReportGenerator,
    InventoryFetcher,
    render_rows,
    sort_records,
)

__all__ = [
    # AWS Managers
    "EC2Manager",
    "ProxyClient",
    "create_ec2_manager",
    # Models
    "ConnectionContext",
    "Filter",
    "InstanceRecord",
    "TagPredicate",
    # Enums
    "InstanceState",
    # Processors
    "ActionDispatcher",
    "CSVReportGenerator",
    "InventoryFetcher",
    "render_rows",
    "sort_records",
]
