"""Server entry point: serves the ingestion API with uvicorn.

Bind address and port come from the ``server`` section of the YAML
configuration.
"""

import uvicorn

from src.api.app import app
from src.utils.config import load_config
from src.utils.logger import setup_logging


def main() -> None:
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
