"""
Bearer-token session for the vectorization service.
"""

import logging
from typing import Optional

from .client import TransportClient
from ..config import Credentials, ServiceConfig
from ..exceptions import AuthError


logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"


class SessionManager:
    """
    Holds the single bearer token of a run.

    The token is obtained once by ``login()`` and is never refreshed. If it
    expires mid-run, later calls simply see 401 responses.
    """

    def __init__(self, transport: TransportClient, service: ServiceConfig):
        self.transport = transport
        self.service = service
        self._token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        """The bearer token, or None before login."""
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def require_token(self) -> str:
        """
        Get the token for an authorized call.

        Raises:
            AuthError: If login has not succeeded
        """
        if self._token is None:
            raise AuthError("Not logged in")
        return self._token

    async def login(self, credentials: Credentials) -> str:
        """
        Exchange credentials for a bearer token.

        Args:
            credentials: Email and password for the login endpoint

        Returns:
            The access token

        Raises:
            AuthError: If the session already holds a token, the status is not
                200 or the body has no ``accessToken``
            TransportError: If the endpoint cannot be reached
        """
        if self._token is not None:
            raise AuthError("Session already holds a token")

        response = await self.transport.send_json(
            self.service.url(LOGIN_PATH),
            "POST",
            {"email": credentials.email, "password": credentials.password},
        )

        if response.status != 200:
            raise AuthError(
                f"Login rejected: {response.message or 'no message'}",
                status_code=response.status,
            )

        token = response.field("accessToken")
        if not token:
            raise AuthError("No access token returned", status_code=response.status)

        self._token = token
        logger.info(f"Logged in as {credentials.email}")
        return token
