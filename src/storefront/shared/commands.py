"""Synchronous command dispatch that re-runs a command when it loses a concurrent write.

Aggregate saves carry Protean's optimistic version check, so two requests
that read the same product and both take stock cannot both commit: the
second fails with ``ExpectedVersionError`` and its unit of work rolls back.
Re-processing the command opens a fresh unit of work that re-reads the
winning write, so stock and status checks run against current data.
"""

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3


def dispatch(command, attempts: int = MAX_ATTEMPTS):
    """Process ``command`` synchronously and return the handler's result."""
    for attempt in range(1, attempts + 1):
        try:
            return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError:
            if attempt == attempts:
                logger.error("Command kept conflicting with concurrent writes", command=type(command).__name__)
                raise
            logger.warning("Concurrent write detected, retrying", command=type(command).__name__, attempt=attempt)
