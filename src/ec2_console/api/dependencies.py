from fastapi import Request

from ..core.console import ConsoleSession
from ..core.models.connection import ConnectionContext
from ..utils.config import ConfigManager
from ..utils.exceptions import ValidationError
from ..utils.logger import setup_logger


logger = setup_logger("ec2_console.api.dependencies", "api.log")


def connect_from_environment(session: ConsoleSession, config: ConfigManager) -> None:
    """Activate the server-side session from env credentials, else stored ones."""
    context = ConnectionContext.from_dict(config.get_credentials_from_env())
    if not context.missing_fields():
        session.connect(context)
        return
    if session.restore() is None:
        logger.warning("No AWS credentials configured; instance routes will answer 400 until configured")


def get_session(request: Request) -> ConsoleSession:
    """The single console session owned by the running app."""
    return request.app.state.console


def get_live_session(request: Request) -> ConsoleSession:
    """The app session, reconnected from the environment or the store when it is not live.

    Rejected credentials mark the session not live; this lets the proxy
    recover once the credentials it was started with work again.
    """
    session = get_session(request)
    if not session.live:
        try:
            connect_from_environment(session, request.app.state.config)
        except ValidationError as e:
            logger.warning(f"Unable to reconnect: {e}")
    return session
