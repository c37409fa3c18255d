"""
Salesforce access token provider.

Exchanges the connected app's client credentials for a bearer token and
caches it until shortly before it expires. Every other CRM call goes through
this provider first.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx
from cachetools import TLRUCache

from backend.config import Settings
from backend.crm.models import TokenResponse
from backend.errors import AuthFailure

logger = logging.getLogger(__name__)

_CACHE_KEY = "access_token"


@dataclass(frozen=True)
class Credential:
    token: str
    expires_at: float


class TokenProvider:
    """Client-credentials token cache.

    A cached credential is served only while ``now < expires_at - skew``.
    Refreshes are serialised so that simultaneous expiry costs one exchange.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._settings = settings
        self._clock = clock
        skew = settings.token_skew_seconds
        self._cache: TLRUCache = TLRUCache(
            maxsize=1,
            ttu=lambda _key, credential, _now: credential.expires_at - skew,
            timer=clock,
        )
        self._lock = asyncio.Lock()

    @property
    def token_endpoint(self) -> str:
        return f"{self._settings.sf_domain}/services/oauth2/token"

    async def get_token(self) -> Credential:
        """Return a valid credential, exchanging client credentials if needed."""
        credential = self._cache.get(_CACHE_KEY)
        if credential is not None:
            return credential

        async with self._lock:
            # Another caller may have refreshed while we waited
            credential = self._cache.get(_CACHE_KEY)
            if credential is not None:
                return credential

            credential = await self._exchange()
            self._cache[_CACHE_KEY] = credential
            return credential

    def invalidate(self) -> None:
        self._cache.pop(_CACHE_KEY, None)

    async def _exchange(self) -> Credential:
        issued_at = self._clock()
        form = {
            "grant_type": "client_credentials",
            "client_id": self._settings.sf_client_id,
            "client_secret": self._settings.sf_client_secret,
        }
        try:
            response = await self._client.post(
                self.token_endpoint,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
            payload = TokenResponse.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(f"Token exchange rejected: HTTP {e.response.status_code}")
            raise AuthFailure() from e
        except httpx.HTTPError as e:
            logger.error(f"Token exchange failed: {type(e).__name__}: {e}")
            raise AuthFailure() from e
        except ValueError as e:
            logger.error(f"Token response could not be parsed: {e}")
            raise AuthFailure() from e

        ttl = payload.expires_in
        if ttl is None:
            ttl = self._settings.token_fallback_ttl_seconds
        logger.info(f"Obtained Salesforce access token (expires in {ttl:.0f}s)")
        return Credential(token=payload.access_token, expires_at=issued_at + ttl)
