"""
Platform collaborators: request signature verification and identity lookup.

Inbound agent requests are signed by the platform with an ECDSA P-256 key.
The public keys are published at a well-known endpoint and cached here by
key identifier. An unknown identifier triggers a refresh (key rotation), at
most once per ``min_refresh_interval`` seconds; a key list that cannot be
fetched or parsed fails verification instead of raising.
"""

import base64
import binascii
import logging
import time

import httpx
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

logger = logging.getLogger(__name__)

_GITHUB_ACCEPT = "application/vnd.github+json"

# Unknown key identifiers trigger at most one key-list fetch per interval
DEFAULT_MIN_REFRESH_INTERVAL = 60.0


class SignatureVerifier:
    """
    ``RequestVerifier`` that checks signatures against published keys.

    Args:
        http_client: Shared ``httpx.AsyncClient``.
        keys_url: Endpoint returning ``{"public_keys": [{"key_identifier", "key"}]}``.
        min_refresh_interval: Seconds between key-list fetches caused by
            unknown key identifiers.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        keys_url: str,
        min_refresh_interval: float = DEFAULT_MIN_REFRESH_INTERVAL,
    ) -> None:
        self._http = http_client
        self._keys_url = keys_url
        self._min_refresh_interval = min_refresh_interval
        self._keys: dict[str, ec.EllipticCurvePublicKey] = {}
        self._last_refresh: float | None = None

    async def _refresh_keys(self, token: str | None) -> None:
        headers = {"Accept": _GITHUB_ACCEPT}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        resp = await self._http.get(self._keys_url, headers=headers)
        resp.raise_for_status()

        payload = resp.json()
        entries = payload.get("public_keys") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise ValueError("Key endpoint did not return a public_keys list")

        keys: dict[str, ec.EllipticCurvePublicKey] = {}
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("key"), str):
                logger.warning("Skipping malformed public key entry")
                continue
            try:
                key = serialization.load_pem_public_key(entry["key"].encode("utf-8"))
            except (ValueError, UnsupportedAlgorithm) as e:
                logger.warning("Skipping unusable public key entry: %s", e)
                continue
            if isinstance(key, ec.EllipticCurvePublicKey):
                keys[str(entry.get("key_identifier", ""))] = key
        self._keys = keys
        logger.info("Loaded %d request-signing public keys", len(keys))

    def _refresh_allowed(self) -> bool:
        if self._last_refresh is None:
            return True
        return time.monotonic() - self._last_refresh >= self._min_refresh_interval

    async def _get_key(self, key_id: str, token: str | None) -> ec.EllipticCurvePublicKey | None:
        key = self._keys.get(key_id)
        if key is not None:
            return key
        if not self._refresh_allowed():
            logger.debug("Key refresh throttled; unknown key identifier %s", key_id)
            return None

        # Stamp before fetching so failed fetches are throttled too
        self._last_refresh = time.monotonic()
        try:
            await self._refresh_keys(token)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Could not fetch request-signing keys: %s", e)
            return None
        return self._keys.get(key_id)

    async def verify(self, body: bytes, signature: str, key_id: str, token: str | None = None) -> bool:
        """
        Verify ``body`` against a base64 DER ECDSA ``signature``.

        Args:
            body: Raw request body exactly as received.
            signature: Value of the signature header.
            key_id: Value of the key-identifier header.
            token: Optional user token used to authenticate the key fetch.

        Returns:
            True if the signature is valid for the identified key.
        """
        if not signature or not key_id:
            logger.warning("Request is missing its signature or key identifier")
            return False

        key = await self._get_key(key_id, token)
        if key is None:
            logger.warning("Unknown signing key identifier: %s", key_id)
            return False

        try:
            key.verify(base64.b64decode(signature), body, ec.ECDSA(hashes.SHA256()))
        except (InvalidSignature, binascii.Error, ValueError):
            logger.warning("Request signature did not verify (key=%s)", key_id)
            return False
        return True


class UnverifiedRequestVerifier:
    """``RequestVerifier`` that accepts every request (local development only)."""

    async def verify(self, body: bytes, signature: str, key_id: str, token: str | None = None) -> bool:
        """Accept without checking."""
        del body, signature, key_id, token
        return True


class GitHubIdentityClient:
    """
    ``IdentityService`` backed by the GitHub REST API.

    Args:
        http_client: Shared ``httpx.AsyncClient``.
        api_url: GitHub API base URL.
    """

    def __init__(self, http_client: httpx.AsyncClient, api_url: str) -> None:
        self._http = http_client
        self._api_url = api_url.rstrip("/")

    async def get_login(self, token: str) -> str:
        """
        Return the login of the user owning ``token``.

        Raises:
            httpx.HTTPError: If the lookup fails.
        """
        resp = await self._http.get(
            f"{self._api_url}/user",
            headers={"Authorization": f"Bearer {token}", "Accept": _GITHUB_ACCEPT},
        )
        resp.raise_for_status()
        return resp.json().get("login", "")
