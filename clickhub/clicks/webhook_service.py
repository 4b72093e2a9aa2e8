from __future__ import annotations

import hashlib
import hmac
from typing import Any

from clickhub.clicks.model import REQUIRED_FIELDS
from clickhub.services.logger.factory import LoggerFactory
from clickhub.services.secrets.interface import SecretsInterface

SIGNATURE_HEADER = "X-Signature"
SECRET_KEY = "WEBHOOK_SECRET"


class WebhookService:
    def __init__(self, secrets: SecretsInterface, logger: LoggerFactory) -> None:
        self.secrets = secrets
        self.log = logger.create()

    def configured_secret(self) -> str | None:
        return self.secrets.get(SECRET_KEY) or None

    def sign(self, body: bytes | str, secret_key: str) -> str:
        if isinstance(body, str):
            body = body.encode("utf-8")
        digest = hmac.new(secret_key.encode("utf-8"), body, hashlib.sha256).hexdigest()
        return f"sha256={digest}"

    def verify_signature(
        self, body: bytes | str, signature: str | None, secret_key: str | None = None
    ) -> bool:
        """Compare ``sha256=<hex hmac>`` of *body* with the header value."""
        if not signature:
            return False
        secret = secret_key or self.configured_secret()
        if not secret:
            self.log.warn("Webhook secret is not configured", key=SECRET_KEY)
            return False
        return hmac.compare_digest(self.sign(body, secret), signature)

    def extract_signature(self, payload: dict[str, Any]) -> str | None:
        return payload.get("signature")

    def validate_payload(self, payload: dict[str, Any]) -> bool:
        for field in REQUIRED_FIELDS:
            if field not in payload or payload[field] is None:
                self.log.warn(f"Missing required field: {field}", payload=payload)
                return False
        return True
