"""Application entry point for CasaConnect backend server."""

import structlog

from casaconnect.app import App
from casaconnect.config import Config
from casaconnect.errors import ConfigurationError
from casaconnect.logging import setup_logging
from casaconnect.web.runner import run_server

logger = structlog.get_logger(__name__)


def main() -> None:
    config = Config()
    setup_logging(bool(config.debug))
    try:
        app = App(config)
    except ConfigurationError as e:
        # No durable session store, no server
        logger.error("startup_aborted", reason=str(e))
        raise SystemExit(1) from e
    run_server(app, config)


if __name__ == "__main__":
    main()
