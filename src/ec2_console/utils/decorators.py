"""Simplified decorator patterns for console CLI operations."""

from functools import wraps
from typing import Callable, List, Optional

import click

from ec2_console.core.aws.proxy import ProxyClient
from ec2_console.core.constants import DEFAULT_REPORT_DIR
from ec2_console.core.console import ConsoleSession, SessionClient
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.core.processors.dispatcher import COMMANDS
from ec2_console.core.processors.report_generator import (
    INSTANCE_REPORT_FIELDS,
    CSVReportGenerator,
)
from ec2_console.core.processors.sorter import InstanceRow, render_rows, render_table
from ec2_console.utils.config import ConfigManager
from ec2_console.utils.exceptions import CLIError, Ec2ConsoleError, ValidationRules
from ec2_console.utils.logger import setup_logger


def build_session(ctx: click.Context) -> ConsoleSession:
    """Session connected from env credentials, else from stored ones."""
    obj = ctx.obj
    if "session" in obj:
        return obj["session"]

    config: ConfigManager = obj["config"]
    session = ConsoleSession.from_config(config)

    env = config.get_credentials_from_env()
    if obj.get("region"):
        env["region"] = obj["region"]
    context = ConnectionContext.from_dict(env)

    if not context.missing_fields():
        session.connect(context)
    elif session.restore() is None:
        raise CLIError(
            "No AWS credentials available. Run 'ec2-console connect' or set "
            "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY."
        )
    elif obj.get("region") and obj["region"] != session.context.region:
        session.connect(ConnectionContext.from_raw(
            session.context.access_key_id,
            session.context.secret_access_key,
            obj["region"],
            session.context.session_token,
        ))

    obj["session"] = session
    return session


def get_client(ctx: click.Context):
    """ProxyClient when an API URL is configured, otherwise direct AWS access."""
    obj = ctx.obj
    if "client" not in obj:
        api_url = obj.get("api_url")
        if api_url:
            obj["client"] = ProxyClient(api_url, timeout=obj["config"].get_read_timeout())
        else:
            obj["client"] = SessionClient(build_session(ctx))
    return obj["client"]


def handle_operation_error(operation_name: str, error: Exception) -> None:
    """Centralized error handling for operations.

    Args:
        operation_name: Name of the operation that failed
        error: Exception that occurred
    """
    error_msg = f"Error in {operation_name}: {str(error)}"
    click.echo(error_msg, err=True)

    logger = setup_logger("ec2_console.errors", "errors.log")
    logger.error(
        error_msg,
        extra={"operation": operation_name, "error_type": type(error).__name__},
    )


def echo_warnings(warnings: List[str]) -> None:
    for warning in warnings:
        click.echo(f"Warning: {warning}", err=True)


def handle_output(
    rows: List[InstanceRow],
    output_path: Optional[str] = None,
    summary: Optional[dict] = None,
    output_dir: Optional[str] = None,
) -> None:
    """Print rows as a table, or export them to CSV when a path is given."""
    if output_path:
        written = CSVReportGenerator(output_dir or DEFAULT_REPORT_DIR).generate_report(
            [row.to_dict() for row in rows], output_path, INSTANCE_REPORT_FIELDS
        )
        if written:
            click.echo(f"Results saved to {written}")
        else:
            click.echo("Nothing to export", err=True)
        return

    click.echo(render_table(rows))
    if summary and rows:
        click.echo(
            f"\n{summary['total']} instance(s): {summary['running']} running, "
            f"{summary['stopped']} stopped, {summary['other']} other"
        )


def console_operation(operation_name: Optional[str] = None):
    """Turn console errors into a CLI message and exit code 1."""

    def decorator(func: Callable) -> Callable:
        name = operation_name or func.__name__

        @wraps(func)
        def wrapper(ctx, *args, **kwargs):
            try:
                return func(ctx, *args, **kwargs)
            except (Ec2ConsoleError, CLIError) as e:
                handle_operation_error(name, e)
                ctx.exit(1)

        return wrapper

    return decorator


def instance_operation(action: str, requires_confirmation: bool = True):
    """Decorator for single-instance commands (start/stop/reboot).

    Handles confirmation, dry runs and the single re-fetch of the target
    instance once the command has been acknowledged.
    """
    command = COMMANDS[action]

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(ctx, instance_id, dry_run=False, force=False, **kwargs):
            if not ValidationRules.validate_instance_id(instance_id):
                click.echo(f"Warning: '{instance_id}' is not a well-formed instance id", err=True)

            if dry_run:
                click.echo(f"[DRY RUN] Would {command.action} {instance_id}")
                return

            if requires_confirmation and not force:
                if not click.confirm(f"{command.label} instance {instance_id}?"):
                    click.echo("Operation cancelled by user.")
                    return

            try:
                client = get_client(ctx)
                click.echo(client.send_action(command.action, instance_id))
            except (Ec2ConsoleError, CLIError) as e:
                handle_operation_error(command.action, e)
                ctx.exit(1)

            try:
                record = client.get_instance(instance_id)
            except Ec2ConsoleError as e:
                click.echo(f"Command sent but refresh failed: {e}", err=True)
                return

            handle_output(render_rows([record]))
            return func(ctx, instance_id, **kwargs)

        return wrapper

    return decorator
