import boto3
import pytest
from botocore.exceptions import EndpointConnectionError, NoCredentialsError
from moto import mock_aws

from ec2_console.core.aws.ec2 import EC2Manager, create_ec2_manager
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.core.processors.inventory import InventoryFetcher
from ec2_console.utils.exceptions import (
    NotFound,
    RemoteError,
    RemoteUnavailable,
    Unauthorized,
)
from ec2_console.utils.filters import normalize_filters
from ec2_console.utils.session import build_client_config, mask_key

from fakes import FakeEC2Client, client_error, make_instance


def test_describe_page_flattens_reservations():
    client = FakeEC2Client(pages=[[make_instance("i-1"), make_instance("i-2")], [make_instance("i-3")]])
    manager = EC2Manager(client, "eu-west-3")

    instances, token = manager.describe_page({"Filters": []})

    assert [i["InstanceId"] for i in instances] == ["i-1", "i-2"]
    assert token == "page-1"
    assert "NextToken" not in client.describe_calls[0]

    instances, token = manager.describe_page({"Filters": []}, token)
    assert [i["InstanceId"] for i in instances] == ["i-3"]
    assert token is None
    assert client.describe_calls[1]["NextToken"] == "page-1"


def test_describe_instance_unknown_id_raises_not_found():
    manager = EC2Manager(FakeEC2Client(pages=[[make_instance("i-1")]]), "eu-west-3")

    assert manager.describe_instance("i-1")["InstanceId"] == "i-1"
    with pytest.raises(NotFound):
        manager.describe_instance("i-404")


@pytest.mark.parametrize(
    "code,status,expected",
    [
        ("AuthFailure", 401, Unauthorized),
        ("InvalidClientTokenId", 403, Unauthorized),
        ("InvalidInstanceID.NotFound", 400, NotFound),
        ("RequestLimitExceeded", 503, RemoteUnavailable),
        ("RequestExpired", 400, RemoteUnavailable),
        ("SomethingBroke", 500, RemoteUnavailable),
        ("IncorrectInstanceState", 400, RemoteError),
        ("UnauthorizedOperation", 403, RemoteError),
    ],
)
def test_client_errors_are_translated(code, status, expected):
    client = FakeEC2Client(errors={"describe_instances": client_error(code, status)})

    with pytest.raises(expected) as exc_info:
        EC2Manager(client, "eu-west-3").describe_page({})

    assert exc_info.value.code == code


def test_remote_error_keeps_the_remote_status():
    client = FakeEC2Client(
        errors={"stop_instances": client_error("UnauthorizedOperation", 403, "StopInstances")}
    )

    with pytest.raises(RemoteError) as exc_info:
        EC2Manager(client, "eu-west-3").stop_instance("i-1")

    assert exc_info.value.status_code == 403


def test_transport_errors_are_translated():
    offline = FakeEC2Client(
        errors={"describe_instances": EndpointConnectionError(endpoint_url="https://ec2.example")}
    )
    with pytest.raises(RemoteUnavailable):
        EC2Manager(offline, "eu-west-3").describe_page({})

    anonymous = FakeEC2Client(errors={"describe_instances": NoCredentialsError()})
    with pytest.raises(Unauthorized):
        EC2Manager(anonymous, "eu-west-3").describe_page({})


def test_commands_target_exactly_one_instance():
    client = FakeEC2Client(pages=[[make_instance("i-1", "stopped"), make_instance("i-2", "stopped")]])
    manager = EC2Manager(client, "eu-west-3")

    acknowledgement = manager.start_instance("i-1")

    assert client.commands == [("start_instances", ["i-1"])]
    assert acknowledgement["CurrentState"]["Name"] == "pending"
    assert manager.reboot_instance("i-2") == {}


def test_client_config_disables_retries():
    config = build_client_config(connect_timeout=3, read_timeout=9)

    assert config.retries == {"total_max_attempts": 1, "mode": "standard"}
    assert config.connect_timeout == 3
    assert config.read_timeout == 9


def test_mask_key():
    assert mask_key("AKIAEXAMPLE1234") == "***********1234"
    assert mask_key("abc") == "****"


@pytest.fixture
def moto_instances(aws_credentials):
    with mock_aws():
        ec2 = boto3.client("ec2", region_name="us-east-1")
        image_id = ec2.describe_images()["Images"][0]["ImageId"]

        def launch(name, env):
            response = ec2.run_instances(
                ImageId=image_id,
                MinCount=1,
                MaxCount=1,
                InstanceType="t3.micro",
                TagSpecifications=[
                    {
                        "ResourceType": "instance",
                        "Tags": [{"Key": "Name", "Value": name}, {"Key": "Env", "Value": env}],
                    }
                ],
            )
            return response["Instances"][0]["InstanceId"]

        ids = [launch("web", "prod"), launch("api", "prod"), launch("batch", "dev")]
        yield ids


def test_fetch_and_stop_against_moto(moto_instances):
    context = ConnectionContext.from_raw("testing", "testing", "us-east-1")
    manager = create_ec2_manager(context, connect_timeout=2, read_timeout=5)
    fetcher = InventoryFetcher(manager_factory=lambda ctx: manager)

    everything = fetcher.fetch(context, normalize_filters().filter)
    prod = fetcher.fetch(context, normalize_filters(tags="Env=prod").filter)

    assert {r.id for r in everything} == set(moto_instances)
    assert {r.name for r in prod} == {"web", "api"}

    manager.stop_instance(moto_instances[0])
    stopped = fetcher.describe(context, moto_instances[0])
    assert stopped.state in ("stopping", "stopped")

    with pytest.raises(NotFound):
        manager.describe_instance("i-0123456789abcdef0")
