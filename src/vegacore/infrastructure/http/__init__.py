from .client import create_http_client, request_with_signal
from .diagnostics import DiagnosticTransport

__all__ = ["DiagnosticTransport", "create_http_client", "request_with_signal"]
