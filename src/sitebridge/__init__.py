"""sitebridge — turn any website into a programmable API surface."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("sitebridge")
except Exception:
    __version__ = "0.0.0"
