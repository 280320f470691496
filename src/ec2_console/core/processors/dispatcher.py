#!/usr/bin/env python3
"""Single-instance start/stop/reboot commands followed by one re-fetch."""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ec2_console.core.aws.ec2 import EC2Manager, create_ec2_manager
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.core.models.instance import InstanceRecord
from ec2_console.utils.exceptions import Ec2ConsoleError, ValidationError
from ec2_console.utils.logger import setup_logger


@dataclass(frozen=True)
class Command:
    """An entry of the command table."""
    action: str
    method: str
    label: str


COMMANDS: Dict[str, Command] = {
    "start": Command("start", "start_instance", "Start"),
    "stop": Command("stop", "stop_instance", "Stop"),
    "reboot": Command("reboot", "reboot_instance", "Reboot"),
}


@dataclass
class DispatchResult:
    """Outcome of one dispatch."""
    action: str
    instance_id: str
    success: bool
    message: str
    error: Optional[Ec2ConsoleError] = None
    acknowledgement: Dict[str, Any] = field(default_factory=dict)
    records: Optional[List[InstanceRecord]] = None
    refresh_error: Optional[Ec2ConsoleError] = None
    duration: float = 0.0
    correlation_id: str = ""


def resolve_command(action: str) -> Command:
    command = COMMANDS.get((action or "").strip().lower())
    if command is None:
        raise ValidationError(
            f"Unknown action '{action}'. Expected one of: {', '.join(COMMANDS)}",
            code="UnknownAction",
        )
    return command


class ActionDispatcher:
    """Sends one mutating command per call.

    The caller is expected to have checked the enablement rules; current
    remote state is not re-read first, so a stale view surfaces as a remote
    error (e.g. IncorrectInstanceState). On success ``refresh`` is awaited
    once; on failure nothing is retried and no displayed state changes.
    """

    def __init__(self, manager_factory: Callable[[ConnectionContext], EC2Manager] = create_ec2_manager):
        self.manager_factory = manager_factory
        self.logger = setup_logger(__name__, "dispatcher.log")

    def dispatch(
        self,
        context: ConnectionContext,
        action: str,
        instance_id: str,
        refresh: Optional[Callable[[], Optional[List[InstanceRecord]]]] = None,
    ) -> DispatchResult:
        command = resolve_command(action)
        instance_id = (instance_id or "").strip()
        if not instance_id:
            raise ValidationError("An instance id is required", code="MissingInstanceId")
        context.validate()

        correlation_id = str(uuid.uuid4())[:8]
        started = time.time()
        self.logger.info(f"[{correlation_id}] {command.label} requested for {instance_id}")

        try:
            manager = self.manager_factory(context)
            acknowledgement = getattr(manager, command.method)(instance_id)
        except Ec2ConsoleError as e:
            duration = time.time() - started
            self.logger.error(
                f"[{correlation_id}] {command.label} failed for {instance_id}: {e} "
                f"(after {round(duration, 2)}s)"
            )
            return DispatchResult(
                action=command.action,
                instance_id=instance_id,
                success=False,
                message=f"Unable to {command.action} {instance_id}: {e}",
                error=e,
                duration=duration,
                correlation_id=correlation_id,
            )

        result = DispatchResult(
            action=command.action,
            instance_id=instance_id,
            success=True,
            message=f"{command.label} command sent to {instance_id}",
            acknowledgement=acknowledgement or {},
            correlation_id=correlation_id,
        )

        if refresh is not None:
            try:
                result.records = refresh()
            except Ec2ConsoleError as e:
                self.logger.warning(f"[{correlation_id}] Refresh after {command.action} failed: {e}")
                result.refresh_error = e

        result.duration = time.time() - started
        self.logger.info(
            f"[{correlation_id}] {result.message} (completed in {round(result.duration, 2)}s)"
        )
        return result
