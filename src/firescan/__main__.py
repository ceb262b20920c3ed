from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

import uvicorn

from firescan.app import build_context, create_app
from firescan.config import LoggingConfig, resolve_config_path
from firescan.errors import ClientInitError, ConfigError, TemplateError

logger = logging.getLogger("firescan")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: LoggingConfig | None = None) -> None:
    config = config or LoggingConfig()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(
            RotatingFileHandler(
                config.file,
                maxBytes=config.max_size_mb * 1024 * 1024,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=config.level.upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def main() -> None:
    configure_logging()

    config_path = resolve_config_path()
    try:
        context = build_context(config_path)
    except ConfigError as exc:
        logger.critical("failed to load config from %s: %s", config_path, exc)
        sys.exit(1)
    except TemplateError as exc:
        logger.critical("failed to parse templates: %s", exc)
        sys.exit(1)
    except ClientInitError as exc:
        logger.critical("failed to create Firestore client: %s", exc)
        sys.exit(1)

    config = context.config
    configure_logging(config.logging)

    logger.info(
        "FireScan listening on %s:%d (project: %s)", config.host, config.port, config.project_id
    )
    uvicorn.run(create_app(context), host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
