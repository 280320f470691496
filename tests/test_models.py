from datetime import datetime, timezone

import pytest

from ec2_console.core.models.connection import ConnectionContext
from ec2_console.core.models.instance import InstanceRecord
from ec2_console.utils.exceptions import ValidationError, ValidationRules

from fakes import make_instance


def test_connection_context_trims_input():
    context = ConnectionContext.from_raw("  AKIA  ", " secret ", " eu-west-3 ", "   ")

    assert context.access_key_id == "AKIA"
    assert context.secret_access_key == "secret"
    assert context.region == "eu-west-3"
    assert context.session_token is None


def test_connection_context_hides_secrets_in_repr():
    context = ConnectionContext.from_raw("AKIA", "top-secret", "eu-west-3", "token-value")
    assert "top-secret" not in repr(context)
    assert "token-value" not in repr(context)


def test_connection_context_requires_every_field():
    context = ConnectionContext.from_raw("AKIA", "", "eu-west-3")

    assert context.missing_fields() == ["secret_access_key"]
    with pytest.raises(ValidationError) as exc_info:
        context.validate()
    assert exc_info.value.code == "MissingCredentials"


def test_record_from_full_instance():
    record = InstanceRecord.from_aws_instance(
        make_instance(
            "i-0abc",
            "RUNNING",
            name="web",
            tags={"Env": "prod"},
            public_ip="203.0.113.7",
            VpcId="vpc-1",
            Platform="windows",
        )
    )

    assert record.state == "running"
    assert record.name == "web"
    assert record.public_ip == "203.0.113.7"
    assert record.availability_zone == "eu-west-3a"
    assert record.get_tag("Env") == "prod"
    assert record.vpc_id == "vpc-1"
    assert record.platform == "windows"
    assert record.can_stop and record.can_reboot and not record.can_start


def test_record_defaults_for_sparse_instance():
    record = InstanceRecord.from_aws_instance({"InstanceId": "i-0abc"})

    assert record.name == "—"
    assert record.type == "—"
    assert record.public_ip == "N/A"
    assert record.private_ip == "N/A"
    assert record.state == "unknown"
    assert record.rank == 6
    assert record.launch_time is None
    assert not (record.can_start or record.can_stop or record.can_reboot)


def test_record_survives_proxy_payload():
    record = InstanceRecord.from_aws_instance(
        make_instance("i-0abc", "stopped", name="db", tags={"Team": "data"}, SubnetId="subnet-1")
    )

    rebuilt = InstanceRecord.from_dict(record.to_dict(extended=True))

    assert rebuilt == record
    assert rebuilt.launch_time == datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


def test_validation_rules():
    assert ValidationRules.validate_instance_id("i-0123456789abcdef0")
    assert ValidationRules.validate_instance_id("i-01234567")
    assert not ValidationRules.validate_instance_id("i-xyz")
    assert ValidationRules.validate_region("us-gov-west-1")
    assert not ValidationRules.validate_region("europe")
