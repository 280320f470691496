#!/usr/bin/env python3
"""Inventory fetcher: paginated DescribeInstances into InstanceRecords."""

import time
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional

from ec2_console.core.aws.ec2 import EC2Manager, create_ec2_manager
from ec2_console.core.constants import MAX_DESCRIBE_PAGES, MAX_INSTANCE_RECORDS
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.core.models.filters import Filter
from ec2_console.core.models.instance import InstanceRecord
from ec2_console.utils.logger import setup_logger

ManagerFactory = Callable[[ConnectionContext], EC2Manager]


@dataclass
class FetchMetrics:
    """Metrics for one fetch."""

    pages: int = 0
    records: int = 0
    truncated: bool = False
    duration: float = 0.0


class InventoryFetcher:
    """Fetches every instance matching a filter, page by page.

    Paging stops when the remote stops returning a continuation token, or
    when the record cap or page cap is hit (a misbehaving endpoint could
    otherwise hand out tokens forever). Nothing is retried.
    """

    def __init__(
        self,
        manager_factory: ManagerFactory = create_ec2_manager,
        max_records: int = MAX_INSTANCE_RECORDS,
        max_pages: int = MAX_DESCRIBE_PAGES,
    ):
        self.manager_factory = manager_factory
        self.max_records = max_records
        self.max_pages = max_pages
        self.last_metrics: Optional[FetchMetrics] = None
        self.logger = setup_logger(__name__, "inventory.log")

    def fetch(self, context: ConnectionContext, query: Filter) -> List[InstanceRecord]:
        """Return all matching records in page order.

        Raises:
            ValidationError: context is missing a required field
            Unauthorized: credentials rejected
            RemoteUnavailable: network failure, timeout or 5xx
        """
        context.validate()
        correlation_id = str(uuid.uuid4())[:8]
        started = time.time()
        metrics = FetchMetrics()

        manager = self.manager_factory(context)
        params = query.to_describe_params()
        self.logger.info(f"[{correlation_id}] Describing instances in {context.region} with {params}")

        records: List[InstanceRecord] = []
        next_token = None
        while True:
            instances, next_token = manager.describe_page(params, next_token)
            metrics.pages += 1
            records.extend(InstanceRecord.from_aws_instance(instance) for instance in instances)
            self.logger.debug(
                f"[{correlation_id}] Page {metrics.pages}: {len(instances)} instances"
                f"{' (more pages)' if next_token else ''}"
            )

            if not next_token:
                break
            if len(records) >= self.max_records:
                self.logger.warning(
                    f"[{correlation_id}] Record cap of {self.max_records} reached, not fetching further pages"
                )
                metrics.truncated = True
                break
            if metrics.pages >= self.max_pages:
                self.logger.warning(
                    f"[{correlation_id}] Page cap of {self.max_pages} reached, not fetching further pages"
                )
                metrics.truncated = True
                break

        if len(records) > self.max_records:
            records = records[: self.max_records]
            metrics.truncated = True

        metrics.records = len(records)
        metrics.duration = time.time() - started
        self.last_metrics = metrics
        self.logger.info(
            f"[{correlation_id}] Fetched {metrics.records} instances over {metrics.pages} page(s) "
            f"in {round(metrics.duration, 2)}s"
        )
        return records

    def describe(self, context: ConnectionContext, instance_id: str) -> InstanceRecord:
        """Full record for one instance; raises NotFound for an unknown id."""
        context.validate()
        manager = self.manager_factory(context)
        return InstanceRecord.from_aws_instance(manager.describe_instance(instance_id))
