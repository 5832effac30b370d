"""Root logger setup — called once from the app lifespan."""

import logging

_VERBOSE_ENVIRONMENTS = ("local", "dev")


def log_level_for(environment: str) -> int:
    return logging.DEBUG if environment.lower() in _VERBOSE_ENVIRONMENTS else logging.INFO


def configure_logging(environment: str) -> None:
    logging.basicConfig(
        level=log_level_for(environment),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
