"""Simple EC2 Manager for console operations."""

from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from ec2_console.core.models.connection import ConnectionContext
from ec2_console.utils.exceptions import (
    Ec2ConsoleError,
    NotFound,
    RemoteError,
    RemoteUnavailable,
    Unauthorized,
)
from ec2_console.utils.logger import setup_logger
from ec2_console.utils.session import SessionManager

# Error codes meaning the credentials themselves were rejected
AUTH_ERROR_CODES = {
    "AuthFailure",
    "InvalidClientTokenId",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "UnrecognizedClientException",
    "ExpiredToken",
    "ExpiredTokenException",
}
NOT_FOUND_ERROR_CODES = {
    "InvalidInstanceID.NotFound",
    "InvalidInstanceID.Malformed",
}
TRANSIENT_ERROR_CODES = {
    "RequestLimitExceeded",
    "Throttling",
    "ThrottlingException",
    "ServiceUnavailable",
    "Unavailable",
    "InternalError",
    "InternalFailure",
    # Request signed with a skewed clock; the credentials themselves are fine
    "RequestExpired",
}

# Response key holding the state change list for each command
STATE_CHANGE_KEYS = {
    "start_instances": "StartingInstances",
    "stop_instances": "StoppingInstances",
}


class EC2Manager:
    """Thin wrapper over the EC2 client that speaks the console error taxonomy."""

    def __init__(self, ec2_client, region: str = ""):
        """Initialize EC2Manager around an existing boto3 EC2 client."""
        self.ec2_client = ec2_client
        self.region = region or getattr(getattr(ec2_client, "meta", None), "region_name", "")
        self.logger = setup_logger(__name__, "ec2_manager.log")

    def describe_page(
        self, params: Dict[str, Any], next_token: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """One DescribeInstances call.

        Returns:
            (instances flattened across reservations, next continuation token)
        """
        request = dict(params)
        if next_token:
            request["NextToken"] = next_token

        try:
            response = self.ec2_client.describe_instances(**request)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, "describing instances") from e

        instances = []
        for reservation in response.get("Reservations") or []:
            for instance in reservation.get("Instances") or []:
                instances.append(instance)

        return instances, response.get("NextToken") or None

    def describe_instance(self, instance_id: str) -> Dict[str, Any]:
        """Describe a single instance or raise NotFound."""
        instances, _ = self.describe_page({"InstanceIds": [instance_id]})
        for instance in instances:
            if instance.get("InstanceId") == instance_id:
                return instance
        raise NotFound(f"Instance {instance_id} not found", code="InvalidInstanceID.NotFound")

    def start_instance(self, instance_id: str) -> Dict[str, Any]:
        """Start one EC2 instance."""
        return self._send("start_instances", instance_id)

    def stop_instance(self, instance_id: str) -> Dict[str, Any]:
        """Stop one EC2 instance."""
        return self._send("stop_instances", instance_id)

    def reboot_instance(self, instance_id: str) -> Dict[str, Any]:
        """Reboot one EC2 instance."""
        return self._send("reboot_instances", instance_id)

    def _send(self, operation: str, instance_id: str) -> Dict[str, Any]:
        """Send one mutating command; returns the acknowledgement."""
        try:
            response = getattr(self.ec2_client, operation)(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, f"{operation} for {instance_id}") from e

        self.logger.info(f"Sent {operation} for instance {instance_id}")

        changes = response.get(STATE_CHANGE_KEYS.get(operation, ""), [])
        for change in changes:
            previous_state = change.get("PreviousState", {}).get("Name", "unknown")
            current_state = change.get("CurrentState", {}).get("Name", "unknown")
            self.logger.info(
                f"Instance {change.get('InstanceId', instance_id)}: "
                f"{previous_state} -> {current_state}"
            )
        return changes[0] if changes else {}

    def _translate_error(self, error: Exception, action: str) -> Ec2ConsoleError:
        """Map botocore failures onto the console error taxonomy."""
        if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
            self.logger.error(f"Error {action}: {error}")
            return Unauthorized(str(error), code=type(error).__name__)

        if isinstance(error, BotoCoreError):
            self.logger.error(f"Error {action}: {error}")
            return RemoteUnavailable(str(error), code=type(error).__name__)

        details = error.response.get("Error", {})
        code = details.get("Code", "")
        message = details.get("Message") or str(error)
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)

        self.logger.error(f"Error {action}: {code} - {message}")

        if code in AUTH_ERROR_CODES:
            return Unauthorized(message, code=code)
        if code in NOT_FOUND_ERROR_CODES:
            return NotFound(message, code=code)
        if code in TRANSIENT_ERROR_CODES or status >= 500:
            return RemoteUnavailable(message, code=code)
        return RemoteError(message, code=code, status_code=status if 400 <= status < 500 else 0)


def create_ec2_manager(
    context: ConnectionContext,
    connect_timeout: Optional[int] = None,
    read_timeout: Optional[int] = None,
) -> EC2Manager:
    """Create EC2Manager for a validated connection context."""
    kwargs = {}
    if connect_timeout is not None:
        kwargs["connect_timeout"] = connect_timeout
    if read_timeout is not None:
        kwargs["read_timeout"] = read_timeout
    client = SessionManager.get_ec2_client(context, **kwargs)
    return EC2Manager(client, context.region)
