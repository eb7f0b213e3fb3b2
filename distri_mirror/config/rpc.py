from urllib.parse import urlsplit, urlunsplit


def redacted(url: str) -> str:
    """Strip query strings and credentials, which is where RPC providers put API keys."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    query = "***REDACTED***" if parts.query else ""
    return urlunsplit((parts.scheme, host, parts.path, query, ""))
