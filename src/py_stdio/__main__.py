"""Allow ``python -m py_stdio``."""

from py_stdio.cli import entrypoint

entrypoint()
