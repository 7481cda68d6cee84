"""Browser-based web UI for py-shelf.

This package provides a Flask application that exposes the library
shell through a web browser.  It is an **optional** extra; install
with::

    pip install py-shelf[web]

The ``create_app`` factory in ``app.py`` loads the library, creates a
shell, and serves the terminal page plus the JSON endpoints it calls.
"""
