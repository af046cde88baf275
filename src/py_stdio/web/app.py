"""Flask application factory for the py-stdio notebook.

The ``create_app`` function creates a shell and a tutorial runner and
returns a Flask app with four endpoints:

- ``GET /`` — render the notebook HTML page.
- ``GET /api/lessons`` — list lessons.
- ``GET /api/lessons/<name>`` — run one lesson and return its text.
- ``POST /api/execute`` — execute a command line and return JSON.
"""

from __future__ import annotations

from pathlib import Path

from flask import Flask, Response, jsonify, render_template, request

from py_stdio.env import Environment
from py_stdio.lessons import TutorialRunner
from py_stdio.shell import Shell

_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404


def create_app(env: Environment | None = None, cwd: Path | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        env: Environment for the notebook's shell (defaults to a
            snapshot of the server's environment).
        cwd: Working directory for the notebook's shell.

    Returns:
        A configured Flask application ready to serve.

    """
    shell = Shell(env=env, cwd=cwd)
    runner = TutorialRunner()

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the notebook HTML page."""
        lessons = [(name, runner.title(name)) for name in runner.list_lessons()]
        return render_template("index.html", lessons=lessons)

    @app.route("/api/lessons")
    def lessons() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the lesson names and titles."""
        return jsonify(
            {"lessons": [{"name": n, "title": runner.title(n)} for n in runner.list_lessons()]}
        )

    @app.route("/api/lessons/<name>")
    def lesson(name: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run a lesson and return its transcript."""
        try:
            text = runner.run(name)
        except KeyError:
            return jsonify({"error": f"Unknown lesson: {name}"}), _HTTP_NOT_FOUND
        return jsonify({"name": name, "text": text})

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a command line and return its streams as JSON.

        Expects JSON body: ``{"command": "...", "stdin": "..."}``
        (``stdin`` is optional).

        Returns:
            JSON with ``stdout``, ``stderr``, and ``status`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        command = str(data["command"])
        stdin = str(data.get("stdin") or "")
        result = shell.execute(command, stdin=stdin)
        if result.stdout == Shell.EXIT_SENTINEL:
            return jsonify({"stdout": "", "stderr": "exit is not available here", "status": 1})
        return jsonify({"stdout": result.stdout, "stderr": result.stderr, "status": result.status})

    return app


def main(port: int = 8080) -> None:
    """Run the notebook development server.

    This is the ``py-stdio-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=port)
