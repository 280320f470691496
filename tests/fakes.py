"""In-memory stand-ins for the EC2 client used across the test suite."""

from datetime import datetime, timezone

from botocore.exceptions import ClientError

from ec2_console.core.aws.ec2 import EC2Manager
from ec2_console.core.models.connection import ConnectionContext


def make_context(region="eu-west-3"):
    return ConnectionContext.from_raw("AKIAEXAMPLEKEY", "secret-key", region)


def make_instance(instance_id, state="running", name=None, tags=None, public_ip=None, **extra):
    """A DescribeInstances instance entry."""
    all_tags = []
    if name is not None:
        all_tags.append({"Key": "Name", "Value": name})
    for key, value in (tags or {}).items():
        all_tags.append({"Key": key, "Value": value})

    instance = {
        "InstanceId": instance_id,
        "InstanceType": "t3.micro",
        "State": {"Name": state},
        "Placement": {"AvailabilityZone": "eu-west-3a"},
        "PrivateIpAddress": "10.0.0.10",
        "LaunchTime": datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc),
        "Tags": all_tags,
    }
    if public_ip:
        instance["PublicIpAddress"] = public_ip
    instance.update(extra)
    return instance


def client_error(code, status=400, operation="DescribeInstances", message=None):
    return ClientError(
        {
            "Error": {"Code": code, "Message": message or f"{code} raised"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeEC2Client:
    """Serves fixed pages of instances and applies start/stop/reboot in memory.

    ``errors`` maps an operation name to the exception it raises.
    ``on_describe`` runs before every describe call.
    """

    TRANSITIONS = {
        "start_instances": ("StartingInstances", "pending"),
        "stop_instances": ("StoppingInstances", "stopping"),
    }

    def __init__(self, pages=None, errors=None, on_describe=None):
        self.pages = pages if pages is not None else [[]]
        self.errors = errors or {}
        self.on_describe = on_describe
        self.describe_calls = []
        self.commands = []

    def _all_instances(self):
        return [instance for page in self.pages for instance in page]

    def describe_instances(self, **kwargs):
        self.describe_calls.append(kwargs)
        if self.on_describe:
            self.on_describe(kwargs)
        if "describe_instances" in self.errors:
            raise self.errors["describe_instances"]

        ids = kwargs.get("InstanceIds")
        if ids:
            matches = [i for i in self._all_instances() if i["InstanceId"] in ids]
            return {"Reservations": [{"Instances": matches}] if matches else []}

        token = kwargs.get("NextToken")
        index = int(token.split("-")[1]) if token else 0
        response = {"Reservations": [{"Instances": list(self.pages[index])}]}
        if index + 1 < len(self.pages):
            response["NextToken"] = f"page-{index + 1}"
        return response

    def _command(self, operation, instance_ids):
        self.commands.append((operation, list(instance_ids)))
        if operation in self.errors:
            raise self.errors[operation]

        if operation not in self.TRANSITIONS:
            return {"ResponseMetadata": {"HTTPStatusCode": 200}}

        key, new_state = self.TRANSITIONS[operation]
        changes = []
        for instance in self._all_instances():
            if instance["InstanceId"] in instance_ids:
                previous = instance["State"]["Name"]
                instance["State"] = {"Name": new_state}
                changes.append(
                    {
                        "InstanceId": instance["InstanceId"],
                        "PreviousState": {"Name": previous},
                        "CurrentState": {"Name": new_state},
                    }
                )
        return {key: changes}

    def start_instances(self, InstanceIds):
        return self._command("start_instances", InstanceIds)

    def stop_instances(self, InstanceIds):
        return self._command("stop_instances", InstanceIds)

    def reboot_instances(self, InstanceIds):
        return self._command("reboot_instances", InstanceIds)


def manager_factory_for(client):
    def factory(context):
        return EC2Manager(client, context.region)

    return factory
