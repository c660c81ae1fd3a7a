"""
Server URL building and query-string parsing.

URLs have the form ``<base_url><context_path>/<controller>/<container>/<action>``;
actions without an extension get ``.view``.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping
from urllib.parse import quote, unquote

from tabquery.core.config import get_settings

# Characters encodeURIComponent leaves alone, besides letters and digits.
_URI_COMPONENT_SAFE = "!'()*-._~"


def encode_uri_component(value: Any) -> str:
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def _code_path(path: str, fn: Callable[[str], str]) -> str:
    return "/".join(fn(segment) for segment in path.split("/"))


def encode_path(decoded_path: str) -> str:
    """Percent-encode each ``/``-separated segment of a container path."""
    return _code_path(decoded_path, encode_uri_component)


def decode_path(encoded_path: str) -> str:
    return _code_path(encoded_path, unquote)


def query_string(parameters: Mapping[str, Any] | None) -> str:
    """Serialise *parameters*; list values repeat the name, ``None`` becomes ""."""
    if not parameters:
        return ""
    pairs: list[str] = []
    for name, value in parameters.items():
        if value is None:
            value = ""
        values = value if isinstance(value, (list, tuple)) else [value]
        for v in values:
            pairs.append(f"{encode_uri_component(name)}={encode_uri_component(v)}")
    return "&".join(pairs)


def get_parameters(url: str | None) -> dict[str, Any]:
    """Parse the query string of *url* into a dict.

    Repeated names become lists of values; a name with no ``=`` maps to "".
    """
    if not url:
        return {}

    param_string = url.split("?", 1)[1] if "?" in url else url
    parameters: dict[str, Any] = {}

    for pair in param_string.split("&"):
        if not pair:
            continue
        raw_name, _, raw_value = pair.partition("=")
        name = unquote(raw_name)
        value = unquote(raw_value)
        if name not in parameters:
            parameters[name] = value
        elif isinstance(parameters[name], list):
            parameters[name].append(value)
        else:
            parameters[name] = [parameters[name], value]

    return parameters


def build_url(
    controller: str,
    action: str,
    container_path: str | None = None,
    parameters: Mapping[str, Any] | None = None,
) -> str:
    """Absolute URL for *controller*/*action* in a container.

    *container_path* defaults to the configured container.
    """
    settings = get_settings()
    container = encode_path(container_path or settings.container_path)

    if not container.startswith("/"):
        container = "/" + container
    if not container.endswith("/"):
        container += "/"
    if "." not in action:
        action += ".view"

    url = f"{settings.server_root}/{controller}{container}{action}"
    query = query_string(parameters)
    if query:
        url += "?" + query
    return url
