"""
Blocking request primitive used by provider adapters
Retries, backoff and authentication policy live outside this layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx

from ..utils import get_logger

logger = get_logger(__name__)

@dataclass(frozen=True)
class TransportResult:
    """Structured outcome of a single request"""
    status_code: int
    body: Any = None

    @property
    def successful(self) -> bool:
        return self.status_code < 400

    def json(self) -> Dict[str, Any]:
        """Body as a mapping, empty when the backend returned something else"""
        return self.body if isinstance(self.body, dict) else {}

    @property
    def error_message(self) -> str:
        """Best effort failure message extracted from the body"""
        data = self.json()
        return str(data.get('message') or data.get('error') or f"HTTP {self.status_code}")

class Transport(ABC):
    """Request execution contract consumed by adapters"""

    @abstractmethod
    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None
    ) -> TransportResult:
        """Execute a request and return its status and decoded body"""
        pass

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> TransportResult:
        return self.request("GET", path, params)

    def close(self):
        """Release any held resources"""
        pass

class HttpTransport(Transport):
    """
    httpx based transport
    Network failures become a 503 result instead of an exception
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.base_url = base_url
        self.api_key = api_key
        default_headers = {"Accept": "application/json"}
        default_headers.update(headers or {})
        self.client = client or httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers=default_headers
        )

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None
    ) -> TransportResult:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        if self.api_key:
            query.setdefault("api_key", self.api_key)

        try:
            response = self.client.request(method, path, params=query)
        except httpx.HTTPError as e:
            logger.error(f"Transport error for {method} {path}: {e}")
            return TransportResult(
                status_code=503,
                body={'error': 'Transport error', 'message': str(e)}
            )

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.status_code >= 400:
            logger.debug(f"{method} {path} returned {response.status_code}")

        return TransportResult(status_code=response.status_code, body=body)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
