"""Job entry point: settings, logging, cluster access and exit status."""
import logging
import os
import sys

import kubernetes.config

from .config import ConfigError, load_settings
from .generator import EntropyUnavailable, assert_available_prng
from .reconcile import reconcile
from .store import KubernetesSecretStore

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_log_level(name: str):
    """Map a level name such as 'debug' to its number, or None if it is not a level."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def configure_logging(level_name: str) -> logging.Logger:
    """Send log records to stderr at the requested level, INFO if it is unknown."""
    level = resolve_log_level(level_name)
    logging.basicConfig(
        level=logging.INFO if level is None else level,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    logger = logging.getLogger("k8s-random-secret")
    if level is None:
        logger.warning(f"Unknown LOG_LEVEL '{level_name}', using INFO")
    return logger


def main(environ=None, store=None) -> int:
    """Run one provisioning job and return the process exit status."""
    environ = os.environ if environ is None else environ
    logger = configure_logging(environ.get("LOG_LEVEL", "INFO"))

    try:
        assert_available_prng()
    except EntropyUnavailable as e:
        logger.critical(str(e))
        return 1

    try:
        settings = load_settings(environ)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    logger.info(
        f"Namespace: '{settings.namespace}' Name: '{settings.name}' Key: '{settings.key}' "
        f"Mode: {settings.mode.value} Encoding: {settings.encoding.value}"
    )

    if store is None:
        try:
            store = KubernetesSecretStore.from_cluster_config()
        except kubernetes.config.ConfigException as e:
            logger.error(f"Unable to load Kubernetes configuration: {e}")
            return 1

    result = reconcile(store, settings, logger)
    if not result.succeeded:
        logger.error(f"Secret provisioning aborted: {result.reason}")
        return 1
    logger.info(f"Secret provisioning finished: {result.outcome.value}")
    return 0
