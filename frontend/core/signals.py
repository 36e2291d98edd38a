"""
Session signals.

store_changed is sent synchronously on the current thread whenever the
selected store changes. Receivers get `session`, `store` (dict or None)
and `generation`, the session's store-selection counter after the change.
"""
import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

store_changed = Signal()
logged_out = Signal()


@receiver(store_changed)
def log_store_change(sender, store=None, generation=None, **kwargs):
    if store:
        logger.info(f"Current store is now {store.get('name')} (id={store.get('id')}, generation={generation})")
    else:
        logger.info(f"Current store cleared (generation={generation})")
