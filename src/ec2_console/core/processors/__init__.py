"""Core processors for the EC2 console."""

from .dispatcher import COMMANDS, ActionDispatcher, DispatchResult
from .inventory import FetchMetrics, InventoryFetcher
from .report_generator import CSVReportGenerator
from .sorter import (
    InstanceRow,
    render_rows,
    render_table,
    search_records,
    sort_records,
    summarize,
)

__all__ = [
    "COMMANDS",
    "ActionDispatcher",
    "DispatchResult",
    "FetchMetrics",
    "InventoryFetcher",
    "CSVReportGenerator",
    "InstanceRow",
    "render_rows",
    "render_table",
    "search_records",
    "sort_records",
    "summarize",
]
