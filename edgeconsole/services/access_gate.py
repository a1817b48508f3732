"""Access Gate: verification of identity-provider-issued RS256 tokens.

The identity provider signs a JWT for every authenticated browser session and
hands it over either as a cookie or as a request header. The gate checks its
shape, audience and expiry, then verifies the signature against the
provider's published key set, which is cached for a few minutes.

With no team domain or audience configured the gate runs in development mode
and lets every request through as ``dev@localhost``.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import jwt
import requests
from flask_login import UserMixin
from jwt.algorithms import RSAAlgorithm

logger = logging.getLogger(__name__)

DEV_IDENTITY = 'dev@localhost'
DEFAULT_KEYS_TTL_SECONDS = 300
CERTS_PATH = '/cdn-cgi/access/certs'


class KeyFetchError(Exception):
    """The identity provider's key set could not be retrieved."""


@dataclass
class AccessDecision:
    allowed: bool
    identity: Optional[str] = None
    reason: Optional[str] = None


class AccessIdentity(UserMixin):
    """flask-login user for an authenticated token holder."""

    def __init__(self, email: str):
        self.id = email
        self.email = email


def fetch_team_keys(team_domain: str, timeout: float = 10) -> list[dict[str, Any]]:
    url = f'https://{team_domain}{CERTS_PATH}'
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        keys = response.json()['keys']
    except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
        raise KeyFetchError(f'Failed to fetch signing keys from {url}: {exc}') from exc
    if not isinstance(keys, list):
        raise KeyFetchError(f'Unexpected key set from {url}')
    return keys


class KeySetCache:
    """Holds the provider's JWK list for ``ttl`` seconds."""

    def __init__(
        self,
        fetch: Callable[[], list[dict[str, Any]]],
        ttl: float = DEFAULT_KEYS_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._fetch = fetch
        self._ttl = ttl
        self._clock = clock
        self._keys: Optional[list[dict[str, Any]]] = None
        self._fetched_at = 0.0
        self._lock = threading.RLock()

    def get_keys(self) -> list[dict[str, Any]]:
        with self._lock:
            now = self._clock()
            if self._keys is not None and now - self._fetched_at < self._ttl:
                return self._keys
        # Fetched outside the lock; concurrent cold misses may both fetch.
        keys = self._fetch()
        with self._lock:
            self._keys = keys
            self._fetched_at = now
        logger.debug('Fetched %d signing keys', len(keys))
        return keys

    def find(self, kid: Optional[str]) -> Optional[dict[str, Any]]:
        for key in self.get_keys():
            if key.get('kid') == kid:
                return key
        return None


class AccessGate:
    """Decides whether a request carries a valid access token."""

    def __init__(
        self,
        team_domain: str,
        audience: str,
        key_cache: Optional[KeySetCache] = None,
        cookie_name: str = 'CF_Authorization',
        header_name: str = 'Cf-Access-Jwt-Assertion',
        clock: Callable[[], float] = time.time,
        keys_ttl: float = DEFAULT_KEYS_TTL_SECONDS,
    ):
        self.team_domain = team_domain or ''
        self.audience = audience or ''
        self.cookie_name = cookie_name
        self.header_name = header_name
        self._clock = clock
        if key_cache is None and self.team_domain:
            key_cache = KeySetCache(lambda: fetch_team_keys(self.team_domain), ttl=keys_ttl, clock=clock)
        self._key_cache = key_cache

    @property
    def dev_mode(self) -> bool:
        return not self.team_domain or not self.audience

    def extract_token(self, request) -> Optional[str]:
        return request.cookies.get(self.cookie_name) or request.headers.get(self.header_name)

    def check(self, request) -> AccessDecision:
        if self.dev_mode:
            return AccessDecision(True, DEV_IDENTITY)
        token = self.extract_token(request)
        if not token:
            return AccessDecision(False, reason='no token')
        return self.verify(token)

    def verify(self, token: str) -> AccessDecision:
        if len(token.split('.')) != 3:
            return AccessDecision(False, reason='invalid token format')

        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.decode(token, options={'verify_signature': False})
        except jwt.InvalidTokenError:
            return AccessDecision(False, reason='malformed token')
        if not isinstance(claims, dict):
            return AccessDecision(False, reason='malformed token')

        aud = claims.get('aud')
        audiences = aud if isinstance(aud, list) else [aud]
        if self.audience not in audiences:
            return AccessDecision(False, reason='invalid audience')

        exp = claims.get('exp')
        if isinstance(exp, bool) or not isinstance(exp, (int, float)) or exp <= self._clock():
            return AccessDecision(False, reason='token expired')

        try:
            jwk = self._key_cache.find(header.get('kid'))
        except KeyFetchError as exc:
            logger.warning('Access key fetch failed: %s', exc)
            return AccessDecision(False, reason='key fetch failed')
        if jwk is None:
            return AccessDecision(False, reason='signing key not found')

        try:
            public_key = RSAAlgorithm.from_jwk(jwk)
            jwt.decode(
                token,
                public_key,
                algorithms=['RS256'],
                options={'verify_exp': False, 'verify_aud': False, 'verify_iat': False, 'verify_nbf': False},
            )
        except (jwt.InvalidTokenError, jwt.exceptions.InvalidKeyError, ValueError, TypeError):
            return AccessDecision(False, reason='invalid signature')

        return AccessDecision(True, claims.get('email') or claims.get('sub'))
