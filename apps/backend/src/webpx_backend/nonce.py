"""Signed, expiring tokens tied to an action name."""

from __future__ import annotations

import logging

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

CONVERT_NONCE_ACTION = "webpexpress-ajax-convert-nonce"


class NonceManager:
    """Creates and verifies nonces. A nonce only verifies for its own action."""

    def __init__(self, secret: str, max_age: int = 86400):
        self._secret = secret
        self._max_age = max_age

    def _serializer(self, action: str) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(self._secret, salt=action)

    def create(self, action: str) -> str:
        return self._serializer(action).dumps(action)

    def verify(self, token: str | None, action: str) -> bool:
        if not token or not isinstance(token, str):
            return False
        try:
            payload = self._serializer(action).loads(token, max_age=self._max_age)
        except SignatureExpired:
            logger.info("Expired nonce for %s", action)
            return False
        except BadSignature:
            logger.warning("Bad nonce for %s", action)
            return False
        return payload == action
