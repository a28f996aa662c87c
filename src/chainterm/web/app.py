"""Flask application factory for the browser terminal.

The ``create_app`` function builds a session and returns a Flask app
with four endpoints:

- ``GET /`` — render the terminal HTML page.
- ``POST /api/execute`` — dispatch a command line and return JSON.
- ``GET /api/suggest`` — tab-completion candidates for a partial word.
- ``GET /api/status`` — session statistics.

The session is single-user and dispatches one line at a time.  A
non-blocking lock acts as the terminal's "busy" flag: a command that
arrives while another is still running is refused with ``409``.
The session and the lock are exposed as ``app.extensions["chainterm"]``.
"""

from __future__ import annotations

import threading

from flask import Flask, Response, jsonify, render_template, request

from chainterm.config import TerminalConfig, config_from_env
from chainterm.router import HostServices
from chainterm.session import Session

_HTTP_BAD_REQUEST = 400
_HTTP_CONFLICT = 409


class WebTerminal:
    """Collects screen requests made by a handler during one dispatch."""

    def __init__(self) -> None:
        """Start with no pending requests."""
        self.cleared = False

    def clear(self) -> None:
        """Ask the browser to clear its screen."""
        self.cleared = True


def create_app(
    *, session: Session | None = None, config: TerminalConfig | None = None
) -> Flask:
    """Create and configure the Flask application.

    Args:
        session: The session to serve.  When omitted, one is created
            from *config* (or from ``CHAINTERM_CONFIG``).
        config: Configuration for a newly created session.

    Returns:
        A configured Flask application ready to serve.

    """
    if session is None:
        session = Session(config=config or config_from_env())
    busy = threading.Lock()

    app = Flask(__name__)
    app.extensions["chainterm"] = {"session": session, "busy": busy}

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal HTML page."""
        return render_template("index.html", stats=session.stats())

    @app.route("/api/execute", methods=["POST"])
    async def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Dispatch a command line and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output``, ``success``, ``error`` and ``clear``
            fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("command"), str):
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        if not busy.acquire(blocking=False):
            return jsonify({"error": "A command is already running"}), _HTTP_CONFLICT
        try:
            terminal = WebTerminal()
            result = await session.dispatch(data["command"], HostServices(terminal=terminal))
        finally:
            busy.release()

        return jsonify(
            {
                "output": result.output,
                "success": result.success,
                "error": result.error,
                "clear": terminal.cleared,
            }
        )

    @app.route("/api/suggest")
    def suggest() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return completion candidates for the ``partial`` query parameter."""
        partial = request.args.get("partial", "")
        return jsonify({"suggestions": session.get_suggestions(partial)})

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return session statistics for the status bar."""
        stats = session.stats()
        return jsonify(
            {
                "busy": busy.locked(),
                "history_size": stats.history_size,
                "alias_count": stats.alias_count,
                "command_count": stats.command_count,
            }
        )

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``chainterm-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
