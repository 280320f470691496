import pytest

from ec2_console.core.console import ConsoleSession
from ec2_console.utils.config import ConfigManager
from ec2_console.utils.storage import CredentialStore, FilterStore, JsonStore

from fakes import FakeEC2Client, make_context, make_instance, manager_factory_for


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep real credentials, settings and the user's store out of every test."""
    for var in (
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SESSION_TOKEN",
        "AWS_SECURITY_TOKEN",
        "AWS_REGION",
        "EC2_CONSOLE_API_URL",
        "EC2_CONSOLE_API_HOST",
        "EC2_CONSOLE_API_PORT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("EC2_CONSOLE_CONFIG_DIR", str(tmp_path / "configs"))
    monkeypatch.setenv("EC2_CONSOLE_STORAGE", str(tmp_path / "store.json"))


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def config(tmp_path):
    return ConfigManager(config_dir=tmp_path / "configs")


@pytest.fixture
def context():
    return make_context()


@pytest.fixture
def ec2_client():
    return FakeEC2Client(
        pages=[
            [
                make_instance("i-0001", "stopped", name="batch", tags={"Env": "prod"}),
                make_instance("i-0002", "running", name="web", public_ip="203.0.113.7"),
            ],
            [make_instance("i-0003", "pending", name="api")],
        ]
    )


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "store.json")


@pytest.fixture
def session(ec2_client, store):
    return ConsoleSession(
        credential_store=CredentialStore(store),
        filter_store=FilterStore(store),
        manager_factory=manager_factory_for(ec2_client),
    )


@pytest.fixture
def live_session(session, context):
    session.connect(context)
    session.drain_notifications()
    return session
