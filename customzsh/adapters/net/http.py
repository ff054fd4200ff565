"""
HTTP adapter — HTTPS fetch for release metadata and installer scripts.

Action params:
    url (str): Absolute https:// URL.
    timeout (int): Request timeout in seconds (default: 15).
    headers (dict): Extra request headers.
"""

from __future__ import annotations

import importlib.util
import json
import logging
import urllib.error
import urllib.request

from customzsh import __version__
from customzsh.adapters.base import Adapter, ExecutionContext
from customzsh.core.models.action import Receipt

logger = logging.getLogger(__name__)

_USER_AGENT = f"customzsh/{__version__}"


class HttpAdapter(Adapter):
    """GET requests returning text or decoded JSON."""

    operations = frozenset({"get_text", "get_json"})
    required_params = {"get_text": ("url",), "get_json": ("url",)}

    @property
    def name(self) -> str:
        return "http"

    def is_available(self) -> bool:
        return importlib.util.find_spec("ssl") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        ok, msg = super().validate(context)
        if not ok:
            return ok, msg
        if not str(context.params["url"]).startswith("https://"):
            return False, f"Refusing non-HTTPS URL: {context.params['url']}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        url = context.params["url"]
        timeout = context.params.get("timeout", 15)
        headers = {"User-Agent": _USER_AGENT, **context.params.get("headers", {})}

        try:
            req = urllib.request.Request(url, headers=headers)
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                body = resp.read().decode("utf-8", errors="replace")
                status = resp.getcode()
        except urllib.error.HTTPError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"HTTP {e.code} from {url}: {e.reason}",
                metadata={"url": url, "status": e.code},
            )
        except (urllib.error.URLError, OSError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Request to {url} failed: {e}",
                metadata={"url": url},
            )

        if context.operation == "get_text":
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=body,
                metadata={"url": url, "status": status},
            )

        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Malformed JSON from {url}: {e}",
                metadata={"url": url, "status": status},
            )
        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=body,
            metadata={"url": url, "status": status, "data": data},
        )
