"""HTTP client abstraction shared by the upload engine and the adapters."""

from .transport import HttpResponse, HttpTransport, HttpTransportError, HttpxTransport

__all__ = ["HttpResponse", "HttpTransport", "HttpTransportError", "HttpxTransport"]
