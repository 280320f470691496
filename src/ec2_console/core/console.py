#!/usr/bin/env python3
"""
Console session: the single owner of connection state.

Holds the active ConnectionContext, the live flag, the last query and the
currently displayed records, and routes every user action through the
fetcher and the dispatcher. One instance per user session; nothing here
is module-global.
"""

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Tuple

from ec2_console.core.aws.ec2 import EC2Manager, create_ec2_manager
from ec2_console.core.constants import NOTIFICATION_HISTORY
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.core.models.filters import Filter
from ec2_console.core.models.instance import InstanceRecord
from ec2_console.core.processors.dispatcher import ActionDispatcher, DispatchResult
from ec2_console.core.processors.inventory import InventoryFetcher
from ec2_console.core.processors.sorter import InstanceRow, render_rows, sort_records
from ec2_console.utils.config import ConfigManager
from ec2_console.utils.exceptions import (
    Ec2ConsoleError,
    Unauthorized,
    ValidationError,
    ValidationRules,
)
from ec2_console.utils.filters import filter_from_dict, normalize_filters
from ec2_console.utils.logger import setup_logger
from ec2_console.utils.storage import CredentialStore, FilterStore, JsonStore


@dataclass(frozen=True)
class Notification:
    """A non-blocking message for the user."""
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ConsoleSession:
    """Application controller for one console user."""

    def __init__(
        self,
        fetcher: Optional[InventoryFetcher] = None,
        dispatcher: Optional[ActionDispatcher] = None,
        credential_store: Optional[CredentialStore] = None,
        filter_store: Optional[FilterStore] = None,
        manager_factory=create_ec2_manager,
    ):
        self._base_factory = manager_factory
        self._manager: Optional[EC2Manager] = None
        self._manager_context: Optional[ConnectionContext] = None

        self.fetcher = fetcher or InventoryFetcher(manager_factory=self._get_manager)
        self.dispatcher = dispatcher or ActionDispatcher(manager_factory=self._get_manager)
        self.credential_store = credential_store
        self.filter_store = filter_store

        self.context: Optional[ConnectionContext] = None
        self.live = False
        self.generation = 0
        self.last_query: Optional[Filter] = None
        self.records: List[InstanceRecord] = []
        self.notifications: Deque[Notification] = deque(maxlen=NOTIFICATION_HISTORY)

        self._fetch_lock = threading.Lock()
        self.logger = setup_logger(__name__, "console.log")

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None, manager_factory=None) -> "ConsoleSession":
        """Session wired with configured caps, timeouts and persistence."""
        config = config or ConfigManager()
        connect_timeout = config.get_connect_timeout()
        read_timeout = config.get_read_timeout()

        def configured_factory(context: ConnectionContext) -> EC2Manager:
            return create_ec2_manager(context, connect_timeout, read_timeout)

        store = JsonStore(config.get_storage_path())
        session = cls(
            credential_store=CredentialStore(store),
            filter_store=FilterStore(store),
            manager_factory=manager_factory or configured_factory,
        )
        session.fetcher.max_records = config.get_max_records()
        session.fetcher.max_pages = config.get_max_pages()
        return session

    def _get_manager(self, context: ConnectionContext) -> EC2Manager:
        """One EC2Manager per active context, rebuilt when the context changes."""
        if self._manager is None or self._manager_context != context:
            self._manager = self._base_factory(context)
            self._manager_context = context
        return self._manager

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def notify(self, level: str, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.notifications.append(notification)
        log = {"error": self.logger.error, "warning": self.logger.warning}.get(level, self.logger.info)
        log(message)
        return notification

    def drain_notifications(self) -> List[Notification]:
        pending = list(self.notifications)
        self.notifications.clear()
        return pending

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def connect(self, context: ConnectionContext, persist: Optional[bool] = None) -> ConnectionContext:
        """Validate and activate a context. No network call is made.

        ``persist`` True stores the credentials, False removes stored ones,
        None leaves the store untouched.

        Raises:
            ValidationError: a required field is empty
        """
        try:
            context.validate()
        except ValidationError as e:
            self.notify("error", f"Unable to initialise the AWS client: {e}")
            raise

        if not ValidationRules.validate_region(context.region):
            self.logger.warning(f"Region '{context.region}' does not look like an AWS region name")

        self.generation += 1
        self.context = context
        self._get_manager(context)
        self.live = True
        self.last_query = None
        self.records = []

        if self.credential_store is not None and persist is not None:
            if persist:
                if not self.credential_store.save(context):
                    self.notify("warning", "Credentials could not be stored; they are kept for this session only")
            else:
                self.credential_store.clear()

        self.notify("success", f"AWS client ready for region {context.region}")
        return context

    def restore(self) -> Optional[ConnectionContext]:
        """Reconnect with stored credentials, if any. Bad stored data is discarded."""
        if self.credential_store is None:
            return None
        stored = self.credential_store.load()
        if stored is None:
            return None
        try:
            return self.connect(stored, persist=True)
        except ValidationError:
            self.credential_store.clear()
            return None

    def restore_filters(self) -> Optional[Filter]:
        if self.filter_store is None:
            return None
        raw = self.filter_store.load()
        if raw is None:
            return None
        return filter_from_dict(raw).filter

    def reset(self) -> None:
        """Drop the context. Results of requests still in flight are discarded."""
        self.generation += 1
        self.context = None
        self.live = False
        self.last_query = None
        self.records = []
        self._manager = None
        self._manager_context = None
        if self.credential_store is not None:
            self.credential_store.clear()
        if self.filter_store is not None:
            self.filter_store.clear()
        self.notify("info", "Credentials cleared. Enter new ones to continue.")

    def _require_live(self) -> ConnectionContext:
        if not self.live or self.context is None:
            raise ValidationError("Initialise the AWS client with your credentials first", code="NotConnected")
        return self.context

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def query(
        self,
        instance_ids: str = "",
        tags: str = "",
        tag_key: str = "",
        tag_value: str = "",
        state: str = "all",
        store_filters: bool = True,
    ) -> Optional[List[InstanceRecord]]:
        """Normalize raw filter input and fetch."""
        self._require_live()
        normalized = normalize_filters(instance_ids, tags, tag_key, tag_value, state)
        for warning in normalized.warnings:
            self.notify("warning", warning)
        return self.refresh(normalized.filter, store_filters=store_filters)

    def refresh(self, query: Optional[Filter] = None, store_filters: bool = False) -> Optional[List[InstanceRecord]]:
        """Fetch with ``query`` (or the last query) and replace the displayed records.

        Returns None when the request was dropped: another fetch is already
        in flight, or the session was reset while this one ran.

        Raises:
            Ec2ConsoleError: the fetch failed; displayed records are kept
        """
        generation = self.generation
        context = self._require_live()
        query = query or self.last_query or Filter()

        if not self._fetch_lock.acquire(blocking=False):
            self.logger.info("Fetch already in progress, dropping request")
            return None

        try:
            records = self.fetcher.fetch(context, query)
        except Ec2ConsoleError as e:
            if generation == self.generation:
                self._on_remote_error(e, "Unable to fetch EC2 instances")
            raise
        finally:
            self._fetch_lock.release()

        if generation != self.generation:
            self.logger.info("Session changed during fetch, discarding result")
            return None

        self.records = sort_records(records)
        self.last_query = query
        if store_filters and self.filter_store is not None:
            self.filter_store.save(query)

        if self.records:
            count = len(self.records)
            self.notify("success", f"Found {count} instance{'s' if count > 1 else ''}")
        else:
            self.notify("info", "No instance matches the given filters")
        return self.records

    def describe(self, instance_id: str) -> InstanceRecord:
        context = self._require_live()
        try:
            return self.fetcher.describe(context, instance_id)
        except Ec2ConsoleError as e:
            self._on_remote_error(e, f"Unable to describe {instance_id}")
            raise

    def rows(self) -> List[InstanceRow]:
        return render_rows(self.records)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def dispatch(self, action: str, instance_id: str) -> DispatchResult:
        """Send one command, then re-fetch the last query once on success."""
        generation = self.generation
        context = self._require_live()

        def refresh() -> Optional[List[InstanceRecord]]:
            if generation != self.generation or self.last_query is None:
                return None
            return self.refresh(self.last_query)

        result = self.dispatcher.dispatch(context, action, instance_id, refresh=refresh)

        if generation != self.generation:
            self.logger.info(f"Session changed during {action} of {instance_id}, discarding result")
            return result

        if result.success:
            self.notify("success", result.message)
        else:
            self._on_remote_error(result.error, result.message)
        return result

    def _on_remote_error(self, error: Optional[Ec2ConsoleError], message: str) -> None:
        if isinstance(error, Unauthorized):
            self.live = False
        if error is not None and message.endswith(str(error)):
            self.notify("error", message)
        else:
            self.notify("error", f"{message} ({error})")

    def status(self) -> Dict[str, Any]:
        return {
            "live": self.live,
            "region": self.context.region if self.context else None,
            "records": len(self.records),
            "last_query": self.last_query.to_dict() if self.last_query else None,
        }


class SessionClient:
    """In-process counterpart of ProxyClient, backed by a ConsoleSession.

    Lets the CLI run the same commands against AWS directly or through a
    running proxy.
    """

    def __init__(self, session: ConsoleSession):
        self.session = session

    def health(self) -> Dict[str, Any]:
        return {"success": True, "message": "Direct AWS access", **self.session.status()}

    def list_instances(
        self,
        instance_ids: str = "",
        tags: str = "",
        tag_key: str = "",
        tag_value: str = "",
        state: str = "all",
    ) -> Tuple[List[InstanceRecord], List[str]]:
        normalized = normalize_filters(instance_ids, tags, tag_key, tag_value, state)
        records = self.session.refresh(normalized.filter, store_filters=True)
        return records or [], list(normalized.warnings)

    def get_instance(self, instance_id: str) -> InstanceRecord:
        return self.session.describe(instance_id)

    def send_action(self, action: str, instance_id: str) -> str:
        result = self.session.dispatch(action, instance_id)
        if not result.success:
            raise result.error
        return result.message
