"""Identity providers.

A provider does two things: build the URL the browser is sent to for
consent, and turn the authorization code the browser comes back with
into an ``Identity``. ``DiscordOAuth`` does both over raw HTTP with
httpx, no SDK required.
"""

import logging
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlencode

import httpx

from guildhall.auth.identity import Identity, PartialGuild
from guildhall.config import OAuthConfig
from guildhall.errors import IdentityProviderError

logger = logging.getLogger("guildhall.auth")


@runtime_checkable
class IdentityProvider(Protocol):
    """What the dashboard needs from an external identity provider."""

    def authorize_url(self, state: str) -> str: ...

    async def identify(self, code: str) -> Identity: ...


class DiscordOAuth:
    """Discord OAuth2 authorization-code flow.

    Usage::

        provider = DiscordOAuth(config.oauth)
        url = provider.authorize_url(state)      # send the browser here
        identity = await provider.identify(code)  # on the callback

    ``transport`` is passed to ``httpx.AsyncClient``; tests supply an
    ``httpx.MockTransport``.
    """

    __slots__ = ("_config", "_timeout", "_transport")

    def __init__(
        self,
        config: OAuthConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._config = config
        self._transport = transport
        self._timeout = timeout

    def authorize_url(self, state: str) -> str:
        cfg = self._config
        query = urlencode(
            {
                "client_id": cfg.client_id,
                "redirect_uri": cfg.callback_url,
                "response_type": "code",
                "scope": " ".join(cfg.scopes),
                "state": state,
                "prompt": "none",
            }
        )
        return f"{cfg.authorize_url}?{query}"

    async def identify(self, code: str) -> Identity:
        """Exchange *code* for a token and load the user and their guilds.

        Raises ``IdentityProviderError`` on any non-2xx answer.
        """
        cfg = self._config
        async with httpx.AsyncClient(
            base_url=cfg.api_base, transport=self._transport, timeout=self._timeout
        ) as client:
            token = await self._exchange(client, code)
            scheme = token.get("token_type", "Bearer")
            headers = {"Authorization": f"{scheme} {token['access_token']}"}
            user = _checked(await client.get("/users/@me", headers=headers))
            guilds = _checked(await client.get("/users/@me/guilds", headers=headers))

        return Identity(
            id=str(user["id"]),
            username=user.get("username", ""),
            discriminator=str(user.get("discriminator", "0")),
            avatar=user.get("avatar"),
            guilds=tuple(PartialGuild.from_dict(g) for g in guilds),
        )

    async def _exchange(self, client: httpx.AsyncClient, code: str) -> dict[str, Any]:
        cfg = self._config
        response = await client.post(
            "/oauth2/token",
            data={
                "client_id": cfg.client_id,
                "client_secret": cfg.client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": cfg.callback_url,
                "scope": " ".join(cfg.scopes),
            },
        )
        token = _checked(response)
        if "access_token" not in token:
            raise IdentityProviderError(response.status_code, "token response has no access_token")
        return token


def _checked(response: httpx.Response) -> Any:
    if not response.is_success:
        logger.warning(
            "Identity provider %s %s returned %d",
            response.request.method,
            response.request.url.path,
            response.status_code,
        )
        raise IdentityProviderError(response.status_code, response.text)
    return response.json()
