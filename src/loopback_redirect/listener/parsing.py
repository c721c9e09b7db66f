"""Authorization code extraction from an HTTP request line."""

from urllib.parse import urlsplit

from loopback_redirect.exceptions import MalformedRedirectError


CODE_PARAM = "code"


def find_query_param(query: str, name: str) -> str | None:
    """Return the raw value of the first ``name=value`` pair in ``query``.

    Values are returned verbatim: no percent or ``+`` decoding. Pairs without
    an ``=`` never match.
    """
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if sep and key == name:
            return value
    return None


def extract_authorization_code(request_line: str) -> str:
    """Extract the OAuth authorization code from a request line.

    Args:
        request_line: e.g. ``GET /?code=XYZ&state=abc HTTP/1.1``

    Returns:
        The first ``code`` query value, undecoded

    Raises:
        MalformedRedirectError: If the line is not a GET with a non-empty code
    """
    parts = request_line.split()
    if len(parts) < 2 or parts[0] != "GET":
        raise MalformedRedirectError(request_line=request_line)

    # Anything after '#' is a fragment and never part of the query
    try:
        query = urlsplit(parts[1]).query
    except ValueError as e:
        raise MalformedRedirectError(request_line=request_line) from e

    code = find_query_param(query, CODE_PARAM)
    if not code:
        raise MalformedRedirectError(request_line=request_line)
    return code
