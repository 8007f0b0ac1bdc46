"""
sweech — OAuth callback listener (Flask)

A short-lived local server on the redirect URI's port. It serves exactly one
successful (or failed) callback, hands the result back to the waiting CLI
and shuts down.
"""

import logging
import threading
from urllib.parse import urlparse

from flask import Flask, request
from werkzeug.serving import make_server

from sweech.errors import OAuthError

logger = logging.getLogger(__name__)

_PAGE = "<html><body><h1>{title}</h1><p>{body}</p></body></html>"
_CLOSE = "You can close this window."


def create_callback_app(path: str, expected_state: str, result: dict, done: threading.Event) -> Flask:
    app = Flask(__name__)

    @app.route(path, methods=["GET"])
    def oauth_callback():
        error = request.args.get("error")
        state = request.args.get("state")
        code = request.args.get("code")

        if error:
            result["error"] = f"OAuth error: {error}"
            done.set()
            return _PAGE.format(title="Authentication Failed", body=_CLOSE), 400

        if state != expected_state:
            result["error"] = "Invalid state parameter"
            done.set()
            return _PAGE.format(title="Invalid State", body=_CLOSE), 403

        if not code:
            result["error"] = "No authorization code received"
            done.set()
            return _PAGE.format(title="Missing Authorization Code", body=_CLOSE), 400

        result["code"] = code
        done.set()
        return _PAGE.format(
            title="✓ Authentication Successful",
            body="You can close this window and return to the terminal.",
        ), 200

    return app


def capture_oauth_callback(redirect_uri: str, expected_state: str, timeout: float = 300) -> str:
    """Block until the browser hits `redirect_uri`; return the authorization code."""
    parsed = urlparse(redirect_uri)
    host = parsed.hostname or "localhost"
    port = parsed.port or 8888
    path = parsed.path or "/callback"

    result: dict = {}
    done = threading.Event()
    app = create_callback_app(path, expected_state, result, done)

    try:
        server = make_server(host, port, app)
    except OSError as e:
        raise OAuthError(f"Could not listen on {host}:{port} for the OAuth callback: {e}")

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    logger.info("waiting for OAuth callback on %s:%s%s", host, port, path)
    try:
        if not done.wait(timeout):
            raise OAuthError(f"Timed out after {int(timeout)}s waiting for the OAuth callback")
    finally:
        server.shutdown()
        thread.join(timeout=5)

    if "error" in result:
        raise OAuthError(result["error"])
    return result["code"]
