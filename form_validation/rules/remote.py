"""
Remote check rule.

Asks an HTTP endpoint whether a value is acceptable, for checks that only a
server can answer (is this username taken? is this coupon code live?).

Request (POST, JSON):
    {"value": <field value>}

Response (JSON):
    {"valid": true}
    {"valid": false, "params": {"suggestion": "jane_doe2"}}

The blocking requests call runs in a worker thread so the event loop keeps
serving other rules while the round-trip is in flight.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from ..errors import AsyncRuleError, RuleConfigurationError
from .base import AsyncRule, RuleFailure

logger = logging.getLogger(__name__)


class RemoteCheck(AsyncRule):
    """
    Asynchronous rule backed by an HTTP endpoint.

    Transport errors, HTTP error statuses and responses without a boolean
    "valid" member raise AsyncRuleError. They are never read as "valid".
    """

    def __init__(
        self,
        url: str,
        message_key: str,
        timeout_ms: int = 5000,
        headers: Optional[Dict[str, str]] = None,
        session: Any = None,
        rule_id: Optional[str] = None,
    ):
        """
        Args:
            url: Endpoint receiving the POST
            message_key: Key reported when the endpoint answers valid=false
            timeout_ms: Request timeout in milliseconds
            headers: Extra request headers (e.g. authorization)
            session: Object with a requests-compatible post(); defaults to
                the requests module itself
            rule_id: Optional stable identifier
        """
        if not url:
            raise RuleConfigurationError("RemoteCheck rule needs a url")
        if not message_key:
            raise RuleConfigurationError("RemoteCheck rule needs a message_key")
        if timeout_ms <= 0:
            raise RuleConfigurationError(f"RemoteCheck timeout_ms must be positive, got {timeout_ms}")
        super().__init__(rule_id=rule_id, message_key=message_key)
        self.url = url
        self.timeout_ms = timeout_ms
        self.headers = dict(headers or {})
        self.session = session if session is not None else requests

    def description(self) -> str:
        return f"Value must be accepted by {self.url}"

    async def evaluate(self, value: Any) -> List[RuleFailure]:
        data = await asyncio.to_thread(self._post, value)
        if data["valid"]:
            return []
        return [self.fail(params=data.get("params", {}))]

    def _post(self, value: Any) -> Dict[str, Any]:
        """Perform the blocking round-trip and return the decoded response."""
        logger.debug(
            "Remote check request",
            extra={'rule_id': self.get_id(), 'url': self.url}
        )
        try:
            response = self.session.post(
                self.url,
                json={"value": value},
                headers=self.headers,
                timeout=self.timeout_ms / 1000.0,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            logger.error(
                "Remote check timeout",
                extra={'url': self.url, 'timeout_ms': self.timeout_ms}
            )
            raise AsyncRuleError(
                f"Remote check timed out after {self.timeout_ms}ms: {self.url}",
                rule_id=self.get_id(),
            ) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(
                "Remote check error",
                extra={'url': self.url, 'error': str(e)}
            )
            raise AsyncRuleError(
                f"Remote check failed for {self.url}: {e}",
                rule_id=self.get_id(),
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("valid"), bool):
            raise AsyncRuleError(
                f"Remote check response from {self.url} has no boolean 'valid': {data!r}",
                rule_id=self.get_id(),
            )
        params = data.get("params", {})
        if not isinstance(params, dict):
            raise AsyncRuleError(
                f"Remote check response from {self.url} has non-object 'params': {params!r}",
                rule_id=self.get_id(),
            )
        return data
