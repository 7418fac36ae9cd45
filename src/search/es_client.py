"""Elasticsearch client construction and readiness checks."""

from __future__ import annotations

import logging
import time

from elasticsearch import Elasticsearch, TransportError

from src.errors import RepositoryError

logger = logging.getLogger(__name__)


def create_es_client(
    url: str = "http://localhost:9200",
    api_key: str | None = None,
    wait_timeout: int = 0,
) -> Elasticsearch:
    """Create and verify an Elasticsearch client connection.

    Args:
        url: Elasticsearch URL.
        api_key: Optional API key for secured clusters.
        wait_timeout: Seconds to keep polling a cluster that is still
            starting; 0 checks once.

    Returns:
        Connected Elasticsearch client.

    Raises:
        RepositoryError: If the cluster does not answer a ping.
    """
    es = Elasticsearch(url, api_key=api_key) if api_key else Elasticsearch(url)
    if wait_timeout:
        reachable = wait_for_elasticsearch(es, timeout=wait_timeout)
    else:
        reachable = es_is_reachable(es)
    if not reachable:
        raise RepositoryError(f"Cannot connect to Elasticsearch at {url}")
    logger.info("Connected to Elasticsearch at %s", url)
    return es


def es_is_reachable(es: Elasticsearch) -> bool:
    """Return True if the cluster responds to a ping."""
    try:
        return bool(es.ping())
    except TransportError:
        return False


def wait_for_elasticsearch(es: Elasticsearch, timeout: int = 60, interval: float = 5.0) -> bool:
    """Poll the cluster until it answers or *timeout* seconds pass.

    Args:
        es: Client to poll.
        timeout: Maximum seconds to wait.
        interval: Seconds between pings.

    Returns:
        True if the cluster became reachable.
    """
    deadline = time.monotonic() + timeout

    while time.monotonic() < deadline:
        if es_is_reachable(es):
            logger.info("Elasticsearch is ready")
            return True
        logger.info("Waiting for Elasticsearch...")
        time.sleep(interval)

    logger.error("Elasticsearch not available after %ds", timeout)
    return False
