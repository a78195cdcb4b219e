"""Logging configuration for the finrecon command line."""

import logging.config

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(levelname)s %(name)s: %(message)s"},
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "simple",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "finrecon": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": True,
        },
        # SQL echo stays off unless asked for explicitly
        "sqlalchemy.engine": {"level": "WARNING", "propagate": True},
    },
}


def configure_logging(level: str = "WARNING", verbose_format: bool = False) -> None:
    """Apply :data:`LOGGING` with the given level for the finrecon loggers."""
    config = {
        **LOGGING,
        "handlers": {
            name: dict(handler) for name, handler in LOGGING["handlers"].items()
        },
        "loggers": {name: dict(logger) for name, logger in LOGGING["loggers"].items()},
    }
    config["loggers"]["finrecon"]["level"] = level.upper()
    if verbose_format:
        config["handlers"]["console"]["formatter"] = "verbose"
    logging.config.dictConfig(config)
