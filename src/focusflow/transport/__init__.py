from focusflow.transport.http import DEFAULT_BASE_URL, HttpClient

__all__ = ["DEFAULT_BASE_URL", "HttpClient"]
