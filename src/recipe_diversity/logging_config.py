"""
Recipe Diversity - Logging setup.

Modules log through `logging.getLogger(__name__)`; this only installs the
root handler once for the CLI and the web app.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger."""
    global _configured

    root = logging.getLogger()
    root.setLevel(level)

    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # supabase/httpx log every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
