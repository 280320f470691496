import pytest

from ec2_console.core.console import ConsoleSession, SessionClient
from ec2_console.core.constants import NOTIFICATION_HISTORY
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.utils.exceptions import (
    RemoteUnavailable,
    Unauthorized,
    ValidationError,
)
from ec2_console.utils.storage import CredentialStore, FilterStore, JsonStore

from fakes import FakeEC2Client, client_error, make_instance, manager_factory_for


def levels(session):
    return [n.level for n in session.drain_notifications()]


def test_connect_rejects_incomplete_credentials(session):
    with pytest.raises(ValidationError):
        session.connect(ConnectionContext.from_raw("AKIA", "secret", ""))

    assert not session.live
    assert levels(session) == ["error"]


def test_operations_require_a_live_session(session):
    with pytest.raises(ValidationError) as exc_info:
        session.refresh()
    assert exc_info.value.code == "NotConnected"


def test_query_sorts_and_remembers_filters(live_session):
    records = live_session.query(state="all", tags="Env=prod, broken")

    assert [r.id for r in records] == ["i-0002", "i-0003", "i-0001"]
    assert live_session.last_query is not None
    notifications = live_session.drain_notifications()
    assert [n.level for n in notifications] == ["warning", "success"]
    assert notifications[-1].message == "Found 3 instances"
    assert live_session.restore_filters().to_dict()["tags"] == "Env=prod"


def test_start_then_refetch_shows_pending(live_session, ec2_client):
    live_session.query()
    live_session.drain_notifications()

    result = live_session.dispatch("start", "i-0001")

    assert result.success
    assert result.message == "Start command sent to i-0001"
    batch = next(row for row in live_session.rows() if row.id == "i-0001")
    assert batch.state == "pending"
    assert not (batch.can_start or batch.can_stop or batch.can_reboot)
    assert len(ec2_client.describe_calls) == 4
    assert levels(live_session) == ["success", "success"]


def test_failed_stop_leaves_the_list_untouched(live_session, ec2_client):
    live_session.query()
    before = list(live_session.records)
    calls_before = len(ec2_client.describe_calls)
    live_session.drain_notifications()
    ec2_client.errors["stop_instances"] = client_error("Unavailable", 503, "StopInstances")

    result = live_session.dispatch("stop", "i-0002")

    assert not result.success
    assert isinstance(result.error, RemoteUnavailable)
    assert live_session.records == before
    assert len(ec2_client.describe_calls) == calls_before
    notifications = live_session.drain_notifications()
    assert [n.level for n in notifications] == ["error"]
    assert "i-0002" in notifications[0].message


def test_rejected_credentials_mark_the_session_offline(live_session, ec2_client):
    live_session.query()
    before = list(live_session.records)
    ec2_client.errors["describe_instances"] = client_error("AuthFailure", 401)

    with pytest.raises(Unauthorized):
        live_session.refresh()

    assert not live_session.live
    assert live_session.records == before


def test_concurrent_fetch_is_dropped(live_session, ec2_client):
    live_session._fetch_lock.acquire()
    try:
        assert live_session.refresh() is None
    finally:
        live_session._fetch_lock.release()

    assert ec2_client.describe_calls == []


def test_reset_discards_results_in_flight(store, context):
    session_ref = {}

    def reset_mid_fetch(_params):
        session_ref["session"].reset()

    client = FakeEC2Client(pages=[[make_instance("i-1")]], on_describe=reset_mid_fetch)
    session = ConsoleSession(
        credential_store=CredentialStore(store),
        filter_store=FilterStore(store),
        manager_factory=manager_factory_for(client),
    )
    session_ref["session"] = session
    session.connect(context)

    assert session.refresh() is None
    assert session.records == []
    assert session.context is None
    assert session.last_query is None


def test_credentials_persist_only_on_request(session, context, store):
    session.connect(context)
    assert session.credential_store.load() is None

    session.connect(context, persist=True)
    restored = ConsoleSession(
        credential_store=CredentialStore(store),
        manager_factory=session._base_factory,
    )
    assert restored.restore() == context
    assert restored.live

    session.reset()
    assert session.credential_store.load() is None
    assert session.filter_store.load() is None


def test_unusable_stored_credentials_are_discarded(session, store):
    store.set("ec2-console-credentials", {"access_key_id": "AKIA", "region": "eu-west-3"})

    assert session.restore() is None
    assert store.get("ec2-console-credentials") is None
    assert not session.live


def test_reconnect_clears_the_displayed_list(live_session, context):
    live_session.query()
    assert live_session.records

    live_session.connect(ConnectionContext.from_raw("AKIA2", "secret2", "us-east-1"))

    assert live_session.records == []
    assert live_session.last_query is None
    assert live_session.status()["region"] == "us-east-1"


def test_session_client_matches_proxy_client_interface(live_session, ec2_client):
    client = SessionClient(live_session)

    records, warnings = client.list_instances(instance_ids="i-0003", tags="Env=prod", state="bogus")
    assert [r.id for r in records] == ["i-0003"]
    assert len(warnings) == 2

    assert client.send_action("stop", "i-0002") == "Stop command sent to i-0002"
    assert client.get_instance("i-0002").state == "stopping"
    assert client.health()["live"] is True

    ec2_client.errors["reboot_instances"] = client_error("Unavailable", 503, "RebootInstances")
    with pytest.raises(RemoteUnavailable):
        client.send_action("reboot", "i-0002")


def test_notifications_are_bounded(live_session):
    for _ in range(NOTIFICATION_HISTORY + 10):
        live_session.query()

    assert len(live_session.notifications) == NOTIFICATION_HISTORY
    assert len(live_session.drain_notifications()) == NOTIFICATION_HISTORY
    assert len(live_session.notifications) == 0


def test_reset_before_fetch_starts_discards_the_result(live_session, ec2_client, monkeypatch):
    require_live = live_session._require_live

    def reset_after_check():
        context = require_live()
        live_session.reset()
        return context

    monkeypatch.setattr(live_session, "_require_live", reset_after_check)

    assert live_session.refresh() is None
    assert live_session.records == []
    assert live_session.last_query is None


def test_unwritable_store_warns_on_persist(context, tmp_path, ec2_client):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    session = ConsoleSession(
        credential_store=CredentialStore(JsonStore(blocker / "store.json")),
        manager_factory=manager_factory_for(ec2_client),
    )

    session.connect(context, persist=True)

    assert session.live
    levels = [n.level for n in session.drain_notifications()]
    assert "warning" in levels
