"""
View models for store-scoped lists.

A StoreScopedList stays subscribed to store_changed while it is open and
reloads whenever the selected store changes. Each load records the
session generation when it starts; a response that comes back after the
store has changed again is dropped instead of overwriting newer data.
"""
import logging
import threading

from .exceptions import ClientError, user_message
from .signals import logged_out, store_changed

logger = logging.getLogger(__name__)


class StoreScopedList:
    """
    Args:
        session: SessionContext the list belongs to
        fetch: callable returning the list for the current store,
               e.g. lambda: session.api.invoices.list()
        search: optional callable(items, query) used by `visible`
    """

    def __init__(self, session, fetch, search=None):
        self.session = session
        self.fetch = fetch
        self.search = search
        self.items = []
        self.error = None
        self.query = ''
        self.loaded_generation = None
        self.dropped = 0
        self._lock = threading.Lock()
        self._open = True
        store_changed.connect(self._on_store_changed, weak=False, dispatch_uid=self._uid('store'))
        logged_out.connect(self._on_logged_out, weak=False, dispatch_uid=self._uid('logout'))

    def _uid(self, name):
        return f'{self.__class__.__name__}-{id(self)}-{name}'

    @property
    def is_open(self):
        return self._open

    def begin(self):
        """Ticket for a fetch starting now"""
        return self.session.generation

    def apply(self, ticket, items):
        """Install a fetched result unless the store changed since `ticket` or the view closed"""
        with self._lock:
            if not self._open:
                return False
            if not self.session.is_current(ticket):
                self.dropped += 1
                logger.debug(
                    f"Dropping stale response (fetched for generation {ticket}, now {self.session.generation})"
                )
                return False
            self.items = list(items or [])
            self.error = None
            self.loaded_generation = ticket
            return True

    def fail(self, ticket, exc):
        with self._lock:
            if not self._open or not self.session.is_current(ticket):
                return False
            self.error = user_message(exc, 'Failed to load data')
            return True

    def refresh(self):
        """Fetch synchronously; returns True when the result was applied"""
        ticket = self.begin()
        try:
            items = self.fetch()
        except ClientError as e:
            logger.warning(f"Loading list failed: {e}")
            self.fail(ticket, e)
            return False
        return self.apply(ticket, items)

    @property
    def visible(self):
        if self.search and self.query.strip():
            return self.search(self.items, self.query)
        return list(self.items)

    def close(self):
        """Stop listening; later responses are ignored"""
        with self._lock:
            self._open = False
        store_changed.disconnect(dispatch_uid=self._uid('store'))
        logged_out.disconnect(dispatch_uid=self._uid('logout'))

    def _on_store_changed(self, sender, session=None, **kwargs):
        if session is self.session and self._open:
            self.refresh()

    def _on_logged_out(self, sender, session=None, **kwargs):
        if session is self.session:
            with self._lock:
                self.items = []
                self.error = None
                self.loaded_generation = None
