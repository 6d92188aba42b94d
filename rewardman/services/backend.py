"""Backend resolution and the read-retry policy."""

import logging

from django.utils.module_loading import import_string

from rewardman.conf import rewardman_settings
from rewardman.exceptions import BackendUnavailableError
from rewardman.protocols.ledger import LedgerBackend

logger = logging.getLogger(__name__)


def get_backend() -> LedgerBackend:
    """Instantiate the configured LedgerBackend."""
    backend_class = import_string(rewardman_settings.BACKEND)
    return backend_class()


def read(fn, *args, **kwargs):
    """
    Call a read-only backend method, retrying on BackendUnavailableError.

    Only for reads. Writes go straight to the backend so a transient
    failure is never turned into a double write.
    """
    attempts = 1 + max(0, rewardman_settings.READ_RETRIES)
    for attempt in range(1, attempts + 1):
        try:
            return fn(*args, **kwargs)
        except BackendUnavailableError as exc:
            if attempt == attempts:
                raise
            logger.warning(
                "Backend read %s failed (attempt %d/%d): %s",
                getattr(fn, "__name__", fn),
                attempt,
                attempts,
                exc,
            )
