from __future__ import annotations

import urllib.parse


def _port_of(netloc_url: str) -> int | None:
    try:
        port = urllib.parse.urlsplit(netloc_url).port
    except ValueError:
        return None
    return port or None


def resolve_port(
    host_header: str | None,
    known_callback_url: str | None = None,
    *,
    default_port: int,
) -> int:
    """Pick the port the OAuth redirect URI must carry.

    The port of a callback URL the browser actually reached wins over the
    request's Host header, which in turn wins over the configured default.
    """
    if known_callback_url:
        port = _port_of(known_callback_url.strip())
        if port is not None:
            return port

    if host_header:
        port = _port_of(f"//{host_header.strip()}")
        if port is not None:
            return port

    return default_port


def build_redirect_uri(port: int, callback_path: str) -> str:
    return f"http://localhost:{port}{callback_path}"


def append_query_params(url: str, params: dict[str, str]) -> str:
    parsed = urllib.parse.urlparse(url)
    existing = urllib.parse.parse_qs(parsed.query, keep_blank_values=True)
    for key, value in params.items():
        existing[key] = [value]

    new_query = urllib.parse.urlencode(existing, doseq=True)
    return urllib.parse.urlunparse(parsed._replace(query=new_query))
