from unittest.mock import Mock

import pytest

from ec2_console.core.processors.dispatcher import ActionDispatcher, resolve_command
from ec2_console.utils.exceptions import RemoteError, RemoteUnavailable, ValidationError

from fakes import FakeEC2Client, client_error, make_instance, manager_factory_for


@pytest.fixture
def client():
    return FakeEC2Client(pages=[[make_instance("i-1", "stopped"), make_instance("i-2", "running")]])


@pytest.fixture
def dispatcher(client):
    return ActionDispatcher(manager_factory=manager_factory_for(client))


def test_unknown_action_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        resolve_command("terminate")
    assert exc_info.value.code == "UnknownAction"
    assert resolve_command(" Stop ").method == "stop_instance"


def test_instance_id_is_required(dispatcher, context, client):
    with pytest.raises(ValidationError):
        dispatcher.dispatch(context, "start", "   ")
    assert client.commands == []


def test_success_triggers_exactly_one_refresh(dispatcher, context, client):
    refresh = Mock(return_value=["refreshed"])

    result = dispatcher.dispatch(context, "start", "i-1", refresh=refresh)

    assert result.success
    assert result.message == "Start command sent to i-1"
    assert result.acknowledgement["CurrentState"]["Name"] == "pending"
    assert result.records == ["refreshed"]
    refresh.assert_called_once_with()
    assert client.commands == [("start_instances", ["i-1"])]


def test_remote_refusal_skips_refresh(context):
    client = FakeEC2Client(
        errors={"stop_instances": client_error("IncorrectInstanceState", 400, "StopInstances")}
    )
    refresh = Mock()

    result = ActionDispatcher(manager_factory_for(client)).dispatch(context, "stop", "i-1", refresh=refresh)

    assert not result.success
    assert isinstance(result.error, RemoteError)
    assert result.message.startswith("Unable to stop i-1:")
    refresh.assert_not_called()


def test_refresh_failure_does_not_fail_the_command(dispatcher, context):
    refresh = Mock(side_effect=RemoteUnavailable("timed out"))

    result = dispatcher.dispatch(context, "reboot", "i-2", refresh=refresh)

    assert result.success
    assert isinstance(result.refresh_error, RemoteUnavailable)
    assert result.records is None
