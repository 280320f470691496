#!/usr/bin/env python3
"""
utils/session.py

Session management utilities for AWS interactions.

Builds boto3 sessions and EC2 clients from a ConnectionContext with a
bounded timeout and botocore retries turned off: every retry is a fresh
user action.
"""

import boto3
from botocore.config import Config

from ec2_console.core.constants import (
    CONNECT_TIMEOUT_SECONDS,
    EC2_API_VERSION,
    READ_TIMEOUT_SECONDS,
)
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.utils.logger import setup_logger

logger = setup_logger(__name__, "session.log")


def build_client_config(
    connect_timeout: int = CONNECT_TIMEOUT_SECONDS,
    read_timeout: int = READ_TIMEOUT_SECONDS,
) -> Config:
    """botocore client config: bounded timeouts, single attempt."""
    return Config(
        retries={"total_max_attempts": 1, "mode": "standard"},
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )


class SessionManager:
    """Creates boto3 sessions and EC2 clients for a connection context."""

    @classmethod
    def get_session(cls, context: ConnectionContext) -> boto3.Session:
        """Create a boto3 Session from a validated context."""
        context.validate()
        return boto3.Session(
            aws_access_key_id=context.access_key_id,
            aws_secret_access_key=context.secret_access_key,
            aws_session_token=context.session_token or None,
            region_name=context.region,
        )

    @classmethod
    def get_ec2_client(
        cls,
        context: ConnectionContext,
        connect_timeout: int = CONNECT_TIMEOUT_SECONDS,
        read_timeout: int = READ_TIMEOUT_SECONDS,
    ):
        """Create an EC2 client for the context's region."""
        session = cls.get_session(context)
        logger.debug(
            f"Creating EC2 client for key {mask_key(context.access_key_id)} in {context.region}"
        )
        return session.client(
            "ec2",
            region_name=context.region,
            api_version=EC2_API_VERSION,
            config=build_client_config(connect_timeout, read_timeout),
        )


def mask_key(access_key_id: str) -> str:
    """Show only the last four characters of an access key id."""
    if len(access_key_id) <= 4:
        return "****"
    return f"{'*' * (len(access_key_id) - 4)}{access_key_id[-4:]}"
