"""Session-backed store for application requests.

A request is persisted under a short random token so that a flow can be
resumed after a redirect, typically "log in, then continue where you left
off". Entries are bound to the identity that stored them and expire.

Examples:
    Storing the current request before redirecting to a sign-in page::

        token = store.store_request(request, expiration="10 minutes")
        return Redirect(destination=":Sign:in", parameters={"backlink": token})

    Resuming it afterwards::

        restored = store.get_stored_request(token, current_request)
        if isinstance(restored, Redirect):
            ...  # the token belongs to another presenter, send the client there
        elif restored is not None:
            ...  # dispatch the restored request
"""

import secrets
from datetime import timedelta

from front_controller.config import ApplicationConfig
from front_controller.models import (
    ACTION_KEY,
    DEFAULT_ACTION,
    FLASH_KEY,
    REQUEST_KEY,
    Redirect,
    Request,
    RequestFlag,
    StoredRequestEntry,
)
from front_controller.observability.logging import get_logger
from front_controller.observability.metrics import record_restore, record_stored_request
from front_controller.security import User
from front_controller.session.base import Session, SessionSection
from front_controller.utils.expiration import parse_expiration

logger = get_logger(__name__)

TOKEN_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_token(length: int) -> str:
    """Return a random token of ``length`` characters from [0-9a-z]."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


class RequestStore:
    """Stores requests in a session namespace, keyed by random tokens.

    Attributes:
        session: Session holding the namespace.
        user: Identity service used to bind entries to their owner.
        config: Configuration (namespace, token length, default lifetime).
    """

    def __init__(
        self,
        session: Session,
        user: User,
        config: ApplicationConfig | None = None,
    ) -> None:
        self.session = session
        self.user = user
        self.config = config or ApplicationConfig()

    @property
    def section(self) -> SessionSection:
        return self.session.get_section(self.config.session_namespace)

    def store_request(
        self,
        request: Request,
        expiration: int | timedelta | str | None = None,
    ) -> str:
        """Persist ``request`` and return the token it is stored under.

        Args:
            request: The request to store. A copy is stored.
            expiration: Lifetime as seconds, timedelta or phrase such as
                ``"10 minutes"``. Defaults to the configured lifetime.

        Returns:
            The token, unique within the namespace at the time of writing.
        """
        seconds = (
            self.config.request_expiration_seconds
            if expiration is None
            else parse_expiration(expiration)
        )
        section = self.section

        token = generate_token(self.config.request_token_length)
        while token in section:
            token = generate_token(self.config.request_token_length)

        section[token] = StoredRequestEntry(owner_id=self.user.get_id(), request=request.clone())
        section.set_expiration(seconds, token)

        record_stored_request()
        logger.debug(
            "request_store.stored",
            presenter=request.presenter_name,
            expiration_seconds=seconds,
        )
        return token

    def get_stored_request(
        self,
        token: str,
        current_request: Request,
    ) -> Request | Redirect | None:
        """Load the request stored under ``token``.

        Args:
            token: Token returned by store_request().
            current_request: The request that carried the token.

        Returns:
            None if the token is unknown, expired, or owned by someone else.
            A Redirect to the stored presenter if it differs from the current
            one; the token travels along in the ``_rid`` parameter so the
            request can be restored there. Otherwise a copy of the stored
            request flagged as restored.
        """
        entry = self.section.get(token)
        if not isinstance(entry, StoredRequestEntry):
            record_restore("missing")
            return None

        if not entry.is_readable_by(self.user.get_id()):
            record_restore("foreign")
            logger.warning(
                "request_store.rejected",
                reason="owner mismatch",
            )
            return None

        request = entry.request.clone()
        parameters = dict(request.parameters)

        if request.presenter_name != current_request.presenter_name:
            parameters[REQUEST_KEY] = token
            action = parameters.pop(ACTION_KEY, None) or DEFAULT_ACTION
            record_restore("redirected")
            return Redirect(
                destination=f":{request.presenter_name}:{action}",
                parameters=parameters,
            )

        request.set_flag(RequestFlag.RESTORED)
        if FLASH_KEY in current_request.parameters:
            parameters[FLASH_KEY] = current_request.parameters[FLASH_KEY]
        request.parameters = parameters

        record_restore("restored")
        return request
