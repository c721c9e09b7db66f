"""Confirmation page served to the browser after a successful redirect."""

import html


DEFAULT_APP_NAME = "the application"

_BODY_TEMPLATE = (
    "<html><body><h1>Connected!</h1>"
    "<p>You can close this tab and return to {app_name}.</p>"
    "</body></html>"
)


def render_confirmation_page(app_name: str = DEFAULT_APP_NAME) -> str:
    """Render the HTML body shown once the code has been captured."""
    return _BODY_TEMPLATE.format(app_name=html.escape(app_name))


def build_confirmation_response(app_name: str = DEFAULT_APP_NAME) -> bytes:
    """Build the full HTTP/1.1 200 response carrying the confirmation page.

    Content-Length counts the encoded body bytes, not characters.
    """
    body = render_confirmation_page(app_name).encode("utf-8")
    head = (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: text/html\r\n"
        f"Content-Length: {len(body)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    )
    return head.encode("ascii") + body
