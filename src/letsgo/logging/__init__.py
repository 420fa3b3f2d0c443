"""Logging subsystem for letsgo.

Public API::

    from letsgo.logging import configure_logging

    configure_logging(settings, certificate=config.filename)
"""

from letsgo.logging.setup import configure_logging

__all__ = ["configure_logging"]
