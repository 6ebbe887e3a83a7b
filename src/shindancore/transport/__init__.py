"""Session-aware HTTP transport for ShindanMaker."""

from .http_client import SessionTransport, TransportResponse

__all__ = ["SessionTransport", "TransportResponse"]
