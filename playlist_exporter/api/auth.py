"""
Handles authentication with the catalog server by exchanging the user's
private key for a session token.
"""

import logging
from typing import TYPE_CHECKING

import aiohttp

from playlist_exporter.exceptions import AuthenticationError

if TYPE_CHECKING:
    from .client import CatalogClient

log = logging.getLogger(__name__)


class CatalogAuthenticator:
    """
    Manages the authentication flow for the catalog client.
    """

    def __init__(self, api_client: "CatalogClient"):
        """
        Initializes the authenticator.

        Args:
            api_client: A reference to the main CatalogClient instance.
        """
        self._api_client = api_client

    async def authenticate(self) -> str:
        """
        Logs in with the configured private key and stores the returned token.

        Accounts are never created on the fly.

        Returns:
            The session token.
        """
        log.info("Authenticating...")
        payload = {
            "privateKey": self._api_client.private_key,
            "createIfMissing": False,
        }
        try:
            response = await self._api_client.api_call(
                "v1/login", method="POST", json_body=payload
            )
        except aiohttp.ClientResponseError as e:
            raise AuthenticationError(f"Authentication failed: {e.message}") from e
        except aiohttp.ClientError as e:
            raise AuthenticationError(
                f"Could not reach the catalog server at "
                f"'{self._api_client.server}': {e}"
            ) from e

        token = response.get("jwt") if isinstance(response, dict) else response
        if not token or not isinstance(token, str):
            raise AuthenticationError("The catalog server did not return a token.")

        self._api_client.token = token
        log.debug("Authenticated; session token stored.")
        return token
