"""Flask application factory for the py-shelf web UI.

The ``create_app`` function loads the library, creates a shell, and
returns a Flask app with four endpoints:

- ``GET /`` — render the terminal HTML page with the banner.
- ``POST /api/execute`` — execute a command and return JSON.
- ``GET /api/complete`` — autocomplete an in-progress line.
- ``GET /api/status`` — current directory and the last navigation.

The shell owns a single session; a lock serializes requests so each
command is applied completely before the next one starts.
"""

from __future__ import annotations

import threading
from typing import Any

from flask import Flask, Response, jsonify, render_template, request

from py_shelf.completer import Completer
from py_shelf.config import ShellConfig
from py_shelf.fs.loader import sample_library
from py_shelf.fs.nodes import DirectoryNode
from py_shelf.logging import Logger
from py_shelf.session import DisplayEntry, EntryKind
from py_shelf.shell import HighlightEvent, Shell

_HTTP_BAD_REQUEST = 400


def _entry_json(entry: DisplayEntry) -> dict[str, Any]:
    """Serialize a display entry for the browser."""
    return {
        "kind": str(entry.kind),
        "text": entry.text,
        "path": entry.path,
        "fixes": [{"command": fix.command, "label": fix.label} for fix in entry.fixes],
    }


def create_app(
    *,
    root: DirectoryNode | None = None,
    config: ShellConfig | None = None,
    logger: Logger | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        root: The content tree (the sample library if omitted).
        config: Shell settings (defaults if omitted).
        logger: Audit log for the session (a private one if omitted).

    Returns:
        A configured Flask application ready to serve.

    """
    location: dict[str, Any] = {"url": None, "directory": None, "file": None}

    def on_navigate(path: str) -> None:
        location["url"] = path

    def on_highlight(event: HighlightEvent) -> None:
        location["directory"] = event.directory_path
        location["file"] = event.file_path

    shell = Shell(
        root=root if root is not None else sample_library(),
        config=config,
        on_navigate=on_navigate,
        on_highlight=on_highlight,
        logger=logger,
    )
    completer = Completer(shell)
    lock = threading.Lock()

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal HTML page."""
        banner = "\n".join(e.text for e in shell.state.entries if e.kind is EntryKind.BANNER)
        return render_template("index.html", banner=banner, cwd=shell.state.cwd)

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a shell command and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output``, ``entries``, ``cwd``, ``cleared`` and
            ``chips`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        command = data["command"]  # pyright: ignore[reportUnknownVariableType]
        if not isinstance(command, str):
            return jsonify({"error": "'command' must be a string"}), _HTTP_BAD_REQUEST
        with lock:
            output = shell.execute(command)
            payload = {
                "output": output,
                "entries": [_entry_json(e) for e in shell.last_entries],
                "cwd": shell.state.cwd,
                "cleared": shell.cleared,
                "chips": [chip.command for chip in shell.try_chips()],
            }
        return jsonify(payload)

    @app.route("/api/complete")
    def complete() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return autocomplete suggestions for ``?line=...``.

        Passing ``tab=1`` applies the top suggestion (and records it in
        the audit log); otherwise ``accept`` is only a preview.
        """
        line = request.args.get("line", "")
        with lock:
            completion = completer.complete(line)
            if request.args.get("tab") == "1":
                accepted = completer.accept(line)
            else:
                accepted = completer.preview(line)
        return jsonify(
            {
                "mode": str(completion.mode),
                "ghost": completion.ghost_suffix,
                "accept": accepted,
                "suggestions": [
                    {"kind": str(s.kind), "insert": s.insert_text, "label": s.label}
                    for s in completion.suggestions
                ],
            }
        )

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the working directory and the last navigation."""
        with lock:
            return jsonify(
                {"cwd": shell.state.cwd, "commands": len(shell.state.commands), "location": dict(location)}
            )

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``py-shelf-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
