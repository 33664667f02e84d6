"""
Shared remote key/value cache.

Plain get/set of strings, no TTL and no read-modify-write. Every writer
stores a complete snapshot, so concurrent writers race harmlessly and the
last set wins.
"""

import json
import socket
import threading
from abc import ABC, abstractmethod
from http.client import HTTPException
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlparse
from urllib.request import Request, urlopen

import structlog

from ..config.defaults import SharedCacheParams
from ..errors import ConfigurationError, SharedCacheError

logger = structlog.get_logger(__name__)


class SharedCache(ABC):
    """Remote string store addressed by key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None when the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a string, overwriting any previous value."""
        pass


class InMemorySharedCache(SharedCache):
    """Process-local shared cache for single-process deployments and tests."""

    def __init__(self):
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


class UpstashSharedCache(SharedCache):
    """Upstash Redis accessed through its REST API."""

    def __init__(self, rest_url: str, rest_token: str, timeout_seconds: int = 10):
        parsed = urlparse(rest_url or "")
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(f"Invalid shared cache URL: {rest_url}", setting="shared_cache.rest_url")
        if not rest_token:
            raise ConfigurationError("KV_REST_API_TOKEN is not set", setting="shared_cache.rest_token")

        self.rest_url = rest_url.rstrip("/")
        self.rest_token = rest_token
        self.timeout_seconds = timeout_seconds

    def get(self, key: str) -> Optional[str]:
        result = self._command("get", key)
        if result is None:
            return None
        if not isinstance(result, str):
            # Callers always receive the raw string form
            return json.dumps(result)
        return result

    def set(self, key: str, value: str) -> None:
        result = self._command("set", key, body=value)
        if result != "OK":
            raise SharedCacheError(
                f"Unexpected SET reply: {result!r}",
                operation="set",
                key=key
            )

    def _command(self, command: str, key: str, body: Optional[str] = None):
        url = f"{self.rest_url}/{command}/{quote(key, safe='')}"
        data = body.encode('utf-8') if body is not None else None
        headers = {
            'Authorization': f'Bearer {self.rest_token}',
            'User-Agent': 'ecocal/1.0'
        }
        req = Request(url, data=data, headers=headers, method='POST' if data is not None else 'GET')

        try:
            with urlopen(req, timeout=self.timeout_seconds) as response:
                reply = json.loads(response.read().decode('utf-8'))

        except HTTPError as e:
            logger.error("Shared cache HTTP error", command=command, key=key, error_code=e.code)
            raise SharedCacheError(f"Shared cache {command} HTTP {e.code}", operation=command, key=key)

        except (OSError, URLError, socket.timeout) as e:
            logger.error("Shared cache network error", command=command, key=key, error=str(e))
            raise SharedCacheError(f"Shared cache {command} failed: {e}", operation=command, key=key)

        except HTTPException as e:
            logger.error("Shared cache broken response", command=command, key=key, error=repr(e))
            raise SharedCacheError(f"Shared cache {command} broken response: {e!r}", operation=command, key=key)

        except UnicodeDecodeError as e:
            raise SharedCacheError(f"Shared cache {command} reply is not UTF-8: {e}", operation=command, key=key)

        except json.JSONDecodeError as e:
            raise SharedCacheError(f"Shared cache {command} reply is not JSON: {e}", operation=command, key=key)

        if isinstance(reply, dict) and "error" in reply:
            raise SharedCacheError(f"Shared cache {command} error: {reply['error']}", operation=command, key=key)

        return reply.get("result") if isinstance(reply, dict) else None


def create_shared_cache(params: SharedCacheParams) -> SharedCache:
    """Build the shared cache backend named in configuration."""
    if params.backend == "memory":
        return InMemorySharedCache()
    if params.backend == "upstash":
        return UpstashSharedCache(params.rest_url, params.rest_token, params.timeout_seconds)
    raise ConfigurationError(f"Unknown shared cache backend: {params.backend}", setting="shared_cache.backend")
