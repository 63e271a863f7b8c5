"""
MQM CI Bridge — logger hierarchy and round-trip timing.

  mqm           bridge service: startup banner, per-request lines
  mqm.client    MQM REST round-trips
  mqm.jenkins   build scheduling against Jenkins
"""

import logging
import time
from contextlib import contextmanager
from typing import Generator

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)-11s | %(message)s"

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt="%H:%M:%S")

logger = logging.getLogger("mqm")
client_logger = logger.getChild("client")
jenkins_logger = logger.getChild("jenkins")


@contextmanager
def round_trip(operation: str, log: logging.Logger = client_logger) -> Generator[None, None, None]:
    """Log one remote operation with its duration; failures are logged and re-raised."""
    start = time.perf_counter()
    try:
        yield
    except Exception as exc:
        log.warning(
            "%s failed after %.0f ms (%s)",
            operation, (time.perf_counter() - start) * 1000, type(exc).__name__,
        )
        raise
    log.info("%s took %.0f ms", operation, (time.perf_counter() - start) * 1000)
