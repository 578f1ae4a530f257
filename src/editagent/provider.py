# editagent: Model provider port and the shared requests-based HTTP transport used by the concrete adapters.
# Adds bounded retries on timeouts, 429 and 5xx, and optional REST Client .http dumps of each call.

import json
import pathlib
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from .context import Context
from .errors import ProviderError
from .models import ModelRequest, ModelResponse

RETRY_DELAYS = [1.0, 2.0, 4.0]


def dump_http_file(file: str, url: str, method: str, headers: Dict[str, str], obj: Any) -> None:
    """Write a request in REST Client format (request line, headers, blank line, JSON body)."""
    json_str = json.dumps(obj, indent=2, ensure_ascii=False)
    with open(file, "w", encoding="utf-8") as f:
        f.write(f"{method.upper()} {url}\n")
        for key, value in headers.items():
            f.write(f"{key}: {value}\n")
        f.write("\n")
        f.write(json_str)


def _append_http_response(file: pathlib.Path, r: requests.Response, elapsed_ms: int) -> None:
    with open(file, "a", encoding="utf-8") as f:
        f.write(f"\n\n### Response - elapsed_ms: {elapsed_ms}\n")
        f.write(f"HTTP/1.1 {r.status_code} {getattr(r, 'reason', '') or ''}\n")
        for hk, hv in r.headers.items():
            f.write(f"{hk}: {hv}\n")
        f.write("\n")
        f.write(r.text)


class ModelProvider(ABC):
    """
    Port between the orchestrator and a language-model backend.

    Implementations send the whole history snapshot on every call, report tool
    calls separately from text, and raise ProviderError on transport, auth or
    rate-limit failures.
    """

    display_name = "Model provider"

    def provider_name(self) -> str:
        return self.display_name

    def supports_tool_calling(self) -> bool:
        return False

    @abstractmethod
    def send_message(self, request: ModelRequest) -> ModelResponse:
        raise NotImplementedError


class HttpModelProvider(ModelProvider):
    """
    Base for adapters that talk JSON over HTTPS with a requests.Session.

    Subclasses set auth headers on `self.session`, list header names that must be
    redacted in dumps in `secret_headers`, and implement `send_message` on top of `_post`.
    """

    secret_headers: tuple = ()

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: str,
        timeout: float = 240.0,
        max_retries: int = 2,
        ctx: Optional[Context] = None,
    ) -> None:
        if not api_key:
            raise ProviderError(self.display_name, "no API key provided")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(0, int(max_retries))
        self.ctx = ctx or Context()
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    # ---------- HTTP call dumps ----------

    def _http_log_dir(self) -> Optional[pathlib.Path]:
        """
        Directory for .http dumps, or None when disabled.

        settings.logging.httpcalls.enabled=True turns dumps on (dir defaults to
        <root>/.httpcalls); enabled=False turns them off; unset means dump only if
        <root>/.httpcalls already exists.
        """
        settings = self.ctx.settings if isinstance(self.ctx.settings, dict) else {}
        log_cfg = (settings.get("logging") or {}).get("httpcalls") or {}
        if not isinstance(log_cfg, dict):
            log_cfg = {}
        enabled = log_cfg.get("enabled")
        if enabled is False:
            return None
        default_dir = self.ctx.root / ".httpcalls"
        if enabled is True:
            custom = log_cfg.get("dir")
            base_dir = default_dir
            if custom:
                cpath = pathlib.Path(str(custom))
                base_dir = cpath if cpath.is_absolute() else self.ctx.root / cpath
            base_dir.mkdir(parents=True, exist_ok=True)
            return base_dir
        if default_dir.is_dir():
            return default_dir
        return None

    def _dump_request(self, url: str, payload: Dict[str, Any]) -> Optional[pathlib.Path]:
        try:
            base_dir = self._http_log_dir()
            if base_dir is None:
                return None
            path = base_dir / f"call-{int(time.time() * 1000)}.http"
            headers = dict(self.session.headers)
            for name in self.secret_headers:
                if name in headers:
                    headers[name] = "{{API_KEY}}"
            dump_http_file(str(path), url, "POST", headers, payload)
            return path
        except (OSError, TypeError, ValueError) as e:
            self.ctx.log(f"{self.display_name}: could not write http dump: {e}")
            return None

    # ---------- transport ----------

    def _retry_delay(self, attempt: int) -> float:
        return RETRY_DELAYS[min(attempt - 1, len(RETRY_DELAYS) - 1)] * random.uniform(0.5, 1.5)

    def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST payload as JSON and return the decoded body. Raises ProviderError when no usable reply arrives."""
        http_file = self._dump_request(url, payload)
        attempt = 0
        while True:
            attempt += 1
            t0 = time.time()
            try:
                r = self.session.post(url, json=payload, timeout=self.timeout)
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                if attempt <= self.max_retries:
                    delay = self._retry_delay(attempt)
                    self.ctx.log(f"{self.display_name}: {type(e).__name__} on attempt {attempt}; retrying in {delay:.2f}s...")
                    time.sleep(delay)
                    continue
                raise ProviderError(self.display_name, f"request failed after {attempt} attempt(s): {e}") from e
            except requests.exceptions.RequestException as e:
                raise ProviderError(self.display_name, f"request failed: {e}") from e

            if http_file is not None:
                try:
                    _append_http_response(http_file, r, int((time.time() - t0) * 1000))
                except OSError:
                    pass

            if r.status_code == 200:
                break
            if (r.status_code == 429 or r.status_code >= 500) and attempt <= self.max_retries:
                delay = self._retry_delay(attempt)
                self.ctx.log(f"{self.display_name}: attempt {attempt} received {r.status_code}; retrying in {delay:.2f}s...")
                time.sleep(delay)
                continue
            raise ProviderError(
                self.display_name,
                f"API error {r.status_code}: {r.text[:2000]}",
                status_code=r.status_code,
            )

        try:
            body = r.json()
        except ValueError as e:
            raise ProviderError(self.display_name, f"response is not valid JSON: {r.text[:2000]}") from e
        if not isinstance(body, dict):
            raise ProviderError(self.display_name, "response is not a JSON object")
        return body
