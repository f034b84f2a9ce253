"""Run the service: ``python -m ghlogin``.

Settings are validated before the server binds its port.  Missing
CLIENT_ID / CLIENT_SECRET (or any other bad setting) is reported on stderr
and the process exits with status 2 without accepting a request.
"""

from __future__ import annotations

import sys

from ghlogin.core.errors import ConfigurationError


def main() -> int:
    try:
        from ghlogin.core.config import SETTINGS
        from ghlogin.main import app
    except ConfigurationError as exc:
        print(f"github-login: configuration error: {exc}", file=sys.stderr)
        return 2

    import uvicorn

    # log_config=None keeps the root logger set up by setup_logging()
    uvicorn.run(app, host=SETTINGS.host, port=SETTINGS.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
