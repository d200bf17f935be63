import logging
import ssl
from dataclasses import dataclass
from typing import Optional, Protocol, Union

import httpx

from .errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Response:
    """Status and raw body of a service response."""

    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Synchronous request/response channel to the service under test."""

    def submit(self, method: str, payload: bytes) -> Response:
        ...


class HttpTransport:
    """
    Transport that posts JSON payloads to the service over HTTP(S).

    Each method is mapped to ``POST {host}{path_prefix}/{method}``. Connection
    pooling, TLS and timeouts are handled by the underlying httpx client.
    """

    def __init__(
        self,
        host: str,
        path_prefix: str = "/app",
        ca_file: Optional[str] = None,
        cert_file: Optional[str] = None,
        key_file: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize HttpTransport with connection parameters.

        Args:
            host: Base URL of the service (e.g., "https://127.0.0.1:8000")
            path_prefix: Path prepended to every method name (default: "/app")
            ca_file: Optional path to the CA certificate used to verify the service
            cert_file: Optional path to the client certificate
            key_file: Optional path to the client private key
            timeout: Request timeout in seconds (default: 10)
            transport: Optional httpx transport override (used by tests)
        """
        self._path_prefix = "/" + path_prefix.strip("/") if path_prefix.strip("/") else ""

        verify: Union[bool, ssl.SSLContext] = True
        if ca_file or cert_file:
            verify = ssl.create_default_context(cafile=ca_file)
            if cert_file:
                verify.load_cert_chain(cert_file, key_file)

        self._client = httpx.Client(
            base_url=host,
            verify=verify,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def submit(self, method: str, payload: bytes) -> Response:
        url = f"{self._path_prefix}/{method}"
        try:
            r = self._client.post(url, content=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} request failed: {e}") from e
        logger.debug(f"{method} -> {r.status_code}")
        return Response(status=r.status_code, body=r.content)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
