#!/usr/bin/env python3
"""
EC2 Console - CLI
List, filter, start, stop and reboot EC2 instances, directly or through
the console's HTTP proxy.
"""

import click

from ec2_console import __version__
from ec2_console.core.console import ConsoleSession
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.core.models.filters import StateFilter
from ec2_console.core.processors.sorter import render_rows, search_records, summarize
from ec2_console.utils.config import ConfigManager
from ec2_console.utils.decorators import (
    build_session,
    console_operation,
    echo_warnings,
    get_client,
    handle_output,
    instance_operation,
)
from ec2_console.utils.exceptions import CLIError
from ec2_console.utils.logger import configure_logging, setup_logger


def setup_logging(config: ConfigManager, verbose: bool = False):
    level = "DEBUG" if verbose else config.get_logging_level()
    configure_logging(level, config.get_logging_path())
    return setup_logger("ec2_console.cli", "cli.log", level)


# Common CLI options for mutating commands
def add_action_options(func):
    func = click.argument("instance_id")(func)
    func = click.option("--force", is_flag=True, help="Skip confirmation prompts")(func)
    func = click.option(
        "--dry-run", is_flag=True, help="Preview changes without executing"
    )(func)
    return func


@click.group()
@click.option("--region", default=None, help="AWS region (defaults to config / AWS_REGION)")
@click.option(
    "--api-url",
    default=None,
    help="Base URL of a running ec2-console proxy; AWS is called directly when omitted",
)
@click.option("--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, region, api_url, verbose):
    """EC2 Console - list and control EC2 instances"""
    ctx.ensure_object(dict)
    config = ctx.obj.get("config") or ConfigManager()

    ctx.obj["config"] = config
    ctx.obj["region"] = region
    ctx.obj["api_url"] = api_url or config.get_api_base_url()
    ctx.obj["verbose"] = verbose
    setup_logging(config, verbose)


@cli.command()
@click.option("--access-key-id", prompt=True, help="AWS access key id")
@click.option("--secret-access-key", prompt=True, hide_input=True, help="AWS secret access key")
@click.option("--session-token", default="", help="Optional session token")
@click.option("--region", "connect_region", prompt=True, help="AWS region")
@click.pass_context
@console_operation("connect")
def connect(ctx, access_key_id, secret_access_key, session_token, connect_region):
    """Validate and store credentials for later commands"""
    session = ConsoleSession.from_config(ctx.obj["config"])
    context = ConnectionContext.from_raw(
        access_key_id, secret_access_key, connect_region, session_token
    )
    session.connect(context)
    if not session.credential_store.save(context):
        raise CLIError(f"Unable to store credentials in {ctx.obj['config'].get_storage_path()}")
    click.echo(f"Credentials stored. AWS client ready for region {context.region}.")


@cli.command()
@click.pass_context
def forget(ctx):
    """Remove stored credentials and last-used filters"""
    session = ConsoleSession.from_config(ctx.obj["config"])
    session.reset()
    click.echo("Credentials cleared. Enter new ones to continue.")


@cli.command(name="list")
@click.option("--instance-ids", "-i", default="", help="Comma or space separated instance ids")
@click.option("--tags", "-t", default="", help="Tag expression, e.g. 'Team=infra|ops, Env=prod'")
@click.option("--tag-key", default="", help="Match instances having this tag key")
@click.option("--tag-value", default="", help="Match instances having this tag value")
@click.option(
    "--state",
    "-s",
    default="all",
    type=click.Choice(StateFilter.values(), case_sensitive=False),
    help="Instance state (default: all)",
)
@click.option(
    "--search", default="", help="Only show rows whose name or id contains this text (no AWS call)"
)
@click.option("--last", is_flag=True, help="Reuse the filters of the last successful listing")
@click.option("--output", type=click.Path(), help="Export the list to a CSV file")
@click.pass_context
@console_operation("list")
def list_instances(ctx, instance_ids, tags, tag_key, tag_value, state, search, last, output):
    """List EC2 instances matching the filters"""
    if last:
        if ctx.obj.get("api_url"):
            raise CLIError("--last is only available without --api-url")
        stored = build_session(ctx).restore_filters()
        if stored is None:
            raise CLIError("No stored filters for this session")
        values = stored.to_dict()
        instance_ids = ", ".join(values["instance_ids"])
        tags, tag_key, tag_value, state = (
            values["tags"], values["tag_key"], values["tag_value"], values["state"]
        )

    client = get_client(ctx)
    records, warnings = client.list_instances(
        instance_ids=instance_ids,
        tags=tags,
        tag_key=tag_key,
        tag_value=tag_value,
        state=state,
    )
    echo_warnings(warnings)
    handle_output(
        render_rows(search_records(records, search)),
        output,
        summary=summarize(records),
        output_dir=ctx.obj["config"].get_report_path(),
    )


@cli.command()
@click.argument("instance_id")
@click.pass_context
@console_operation("describe")
def describe(ctx, instance_id):
    """Show every detail of one instance"""
    record = get_client(ctx).get_instance(instance_id)
    details = record.to_dict(extended=True)
    tags = details.pop("tags")
    for key, value in details.items():
        click.echo(f"{key:<18} {value if value is not None else 'N/A'}")
    if tags:
        click.echo("tags")
        for tag in tags:
            click.echo(f"  {tag['key']}: {tag['value']}")


@cli.command()
@add_action_options
@click.pass_context
@instance_operation("start", requires_confirmation=True)
def start(ctx, instance_id):
    """Start a stopped EC2 instance"""
    # All processing logic is handled by the decorator
    pass


@cli.command()
@add_action_options
@click.pass_context
@instance_operation("stop", requires_confirmation=True)
def stop(ctx, instance_id):
    """Stop a running EC2 instance"""
    # All processing logic is handled by the decorator
    pass


@cli.command()
@add_action_options
@click.pass_context
@instance_operation("reboot", requires_confirmation=True)
def reboot(ctx, instance_id):
    """Reboot a running EC2 instance"""
    # All processing logic is handled by the decorator
    pass


@cli.command()
@click.pass_context
@console_operation("health")
def health(ctx):
    """Check the proxy (or direct AWS session) status"""
    status = get_client(ctx).health()
    click.echo(status.get("message", "OK"))
    for key in ("live", "region", "timestamp"):
        if key in status:
            click.echo(f"{key}: {status[key]}")


@cli.command()
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Port (default from config)")
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP proxy"""
    import uvicorn

    from ec2_console.api.main import create_app

    config = ctx.obj["config"]
    uvicorn.run(
        create_app(config=config),
        host=host or config.get_api_host(),
        port=port or config.get_api_port(),
    )


@cli.command()
def version():
    """Show version information"""
    click.echo(f"EC2 Console {__version__}")
    click.echo("List and control EC2 instances")


if __name__ == "__main__":
    cli()
