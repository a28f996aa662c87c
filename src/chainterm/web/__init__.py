"""Browser-based web UI for chainterm.

This package provides a Flask application that exposes a terminal
session through a web browser.  It is an **optional** extra — install
with::

    pip install chainterm[web]

The ``create_app`` factory in ``app.py`` creates a session and serves
the terminal page plus a small JSON API for dispatching commands,
tab completion and status polling.
"""
