"""Browser-based notebook for py-stdio.

This package provides a Flask application that serves the lessons and
a command box backed by the py-stdio shell.  It is an **optional**
extra — install with::

    pip install py-stdio[web]

The ``create_app`` factory in ``app.py`` creates a shell and serves:

- ``GET /`` — HTML notebook page listing the lessons.
- ``GET /api/lessons`` — lesson names and titles as JSON.
- ``GET /api/lessons/<name>`` — one lesson's text as JSON.
- ``POST /api/execute`` — run a command line and return its stdout,
  stderr, and exit status as JSON.
"""
