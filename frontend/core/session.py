"""
Session and store context.

One SessionContext owns the authenticated identity, its token and the
selected store. It is mutated only through login / select_store /
fetch_available_stores / logout; everything else reads a snapshot.

    anonymous -> authenticating -> authenticated (store unset)
              -> authenticated (store selected) -> anonymous (logout)

Each change of the selected store advances `generation` and sends
`store_changed`. Store-scoped fetches record the generation when they start
and drop their result if it has moved on by the time they finish.
"""
import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from .api import APIClient
from .exceptions import ClientError, NotAuthenticated, SessionError
from .serializers import LoginSerializer, OnboardingSerializer
from .signals import logged_out, store_changed
from .storage import LocalStorage, STORE_KEY, TOKEN_KEY, USER_KEY

logger = logging.getLogger(__name__)

ANONYMOUS = 'anonymous'
AUTHENTICATING = 'authenticating'
AUTHENTICATED = 'authenticated'

ROLE_STORE_WORKER = 'store_worker'
ROLE_STORE_MANAGER = 'store_manager'
ROLE_ORG_ADMIN = 'org_admin'


@dataclass(frozen=True)
class SessionSnapshot:
    state: str
    user: Optional[dict] = None
    token: Optional[str] = None
    current_store: Optional[dict] = None
    available_stores: tuple = field(default_factory=tuple)
    generation: int = 0

    @property
    def is_authenticated(self):
        return self.state == AUTHENTICATED

    @property
    def current_store_id(self):
        return _store_id(self.current_store, self.user)


def _store_id(store, user):
    """Selected store id, falling back to the user's own store"""
    if store and store.get('id') is not None:
        return store['id']
    user_store = (user or {}).get('store')
    if user_store and user_store.get('id') is not None:
        return user_store['id']
    return None


class SessionContext:
    def __init__(self, api=None, storage=None):
        self.storage = storage or LocalStorage()
        self.api = api or APIClient(session=self)
        if getattr(self.api, 'session', None) is None:
            self.api.session = self

        self._lock = threading.RLock()
        self.state = ANONYMOUS
        self.user = None
        self.token = None
        self.current_store = None
        self.available_stores = []
        self.generation = 0

        self.rehydrate()

    # -- read side -------------------------------------------------------

    @property
    def is_authenticated(self):
        return self.state == AUTHENTICATED and bool(self.user) and bool(self.token)

    @property
    def role(self):
        return (self.user or {}).get('role')

    @property
    def is_org_admin(self):
        return self.role == ROLE_ORG_ADMIN

    @property
    def is_store_manager(self):
        return self.role == ROLE_STORE_MANAGER

    @property
    def is_store_worker(self):
        return self.role == ROLE_STORE_WORKER

    @property
    def current_store_id(self):
        return _store_id(self.current_store, self.user)

    def snapshot(self):
        with self._lock:
            return SessionSnapshot(
                state=self.state,
                user=copy.deepcopy(self.user),
                token=self.token,
                current_store=copy.deepcopy(self.current_store),
                available_stores=tuple(copy.deepcopy(self.available_stores)),
                generation=self.generation,
            )

    def is_current(self, generation):
        """True while no store change has happened since `generation` was read"""
        return generation == self.generation

    # -- transitions -----------------------------------------------------

    def rehydrate(self):
        """Restore {token, user, store} from durable storage; stay anonymous if absent or malformed"""
        token = self.storage.get_item(TOKEN_KEY)
        user = self.storage.get_json(USER_KEY)
        if not token or not isinstance(token, str) or not isinstance(user, dict):
            logger.debug("No stored session to restore")
            return False

        store = self.storage.get_json(STORE_KEY)
        if not isinstance(store, dict):
            store = user.get('store') if isinstance(user.get('store'), dict) else None

        with self._lock:
            self.token = token
            self.user = user
            self.current_store = store
            self.state = AUTHENTICATED
        logger.info(f"Restored session for {user.get('email')}")
        return True

    def login(self, email, password):
        """
        Authenticate against the API.

        On failure the session is anonymous, with any previous identity
        dropped from memory and storage, and the server's reason is
        raised verbatim as APIError.
        """
        serializer = LoginSerializer(data={'email': email, 'password': password})
        serializer.is_valid(raise_exception=True)

        with self._lock:
            had_session = self.token is not None or self.user is not None
            self.state = AUTHENTICATING
        try:
            data = self.api.auth.login(
                serializer.validated_data['email'],
                serializer.validated_data['password'],
            )
        except ClientError:
            self._abandon_login(had_session)
            raise

        token = (data or {}).get('token')
        user = (data or {}).get('user')
        if not token or not isinstance(user, dict):
            self._abandon_login(had_session)
            raise SessionError('Login failed')

        return self._start_session(token, user)

    def _abandon_login(self, had_session):
        """A failed login never leaves the previous identity half in place"""
        if had_session:
            logger.info("Login failed, dropping the previous session")
            self.logout()
        else:
            with self._lock:
                self.state = ANONYMOUS

    def _start_session(self, token, user):
        """Install token and user in memory and storage, then settle the current store"""
        with self._lock:
            self.token = token
            self.user = user
            self.available_stores = []
            self.state = AUTHENTICATED
            self.storage.set_item(TOKEN_KEY, token)
            self.storage.set_json(USER_KEY, user)
        logger.info(f"Logged in as {user.get('email')} ({user.get('role')})")

        # A user bound to one store works in it straight away
        if user.get('store'):
            self._set_current_store(user['store'])
        elif self.current_store is not None:
            self._set_current_store(None)

        try:
            self.fetch_available_stores()
        except ClientError as e:
            logger.warning(f"Failed to fetch available stores: {e}")

        return self.snapshot()

    def fetch_available_stores(self):
        """
        Load the stores this identity may act on.

        With no store selected yet, pick the user's own store if listed,
        otherwise the only store when exactly one comes back.
        """
        if not self.token:
            return []

        stores = self.api.stores.available() or []
        with self._lock:
            self.available_stores = list(stores)
            selected = self.current_store

        if not selected and stores:
            user_store = (self.user or {}).get('store')
            if user_store:
                match = next((s for s in stores if s.get('id') == user_store.get('id')), None)
                if match:
                    self._set_current_store(match)
            elif len(stores) == 1:
                self._set_current_store(stores[0])

        return list(stores)

    def select_store(self, store):
        """Switch the active store (None clears it) and notify every listener"""
        if not self.is_authenticated:
            raise NotAuthenticated('Log in before selecting a store')
        self._set_current_store(store)
        return self.current_store

    def select_store_by_id(self, store_id):
        for store in self.available_stores:
            if str(store.get('id')) == str(store_id):
                return self.select_store(store)
        raise SessionError(f"Store {store_id} is not available to this user")

    def logout(self):
        """Forget everything, in memory and on disk. Safe to call twice."""
        with self._lock:
            was_authenticated = self.state != ANONYMOUS
            self.user = None
            self.token = None
            self.current_store = None
            self.available_stores = []
            self.state = ANONYMOUS
            self.generation += 1
            self.storage.remove_item(TOKEN_KEY)
            self.storage.remove_item(USER_KEY)
            self.storage.remove_item(STORE_KEY)
        if was_authenticated:
            logger.info("Logged out")
            logged_out.send(sender=self.__class__, session=self)

    def check_onboarding(self):
        return self.api.auth.check_onboarding()

    def onboard(self, organization, store, user, logo=None):
        """Create organization, first store and admin user, and start a session as that user"""
        serializer = OnboardingSerializer(data={
            'organization': organization,
            'store': store,
            'user': user,
        })
        serializer.is_valid(raise_exception=True)
        files = {'organization[logo]': logo} if logo is not None else None

        data = self.api.auth.onboard(serializer.to_form_data(), files=files)

        # The onboarding response already carries a session for the new admin
        if isinstance(data, dict) and data.get('token') and isinstance(data.get('user'), dict):
            return self._start_session(data['token'], data['user'])

        credentials = serializer.validated_data['user']
        return self.login(credentials['email'], credentials['password'])

    def _set_current_store(self, store):
        with self._lock:
            self.current_store = copy.deepcopy(store) if store else None
            if self.current_store:
                self.storage.set_json(STORE_KEY, self.current_store)
            else:
                self.storage.remove_item(STORE_KEY)
            self.generation += 1
            generation = self.generation
            payload = copy.deepcopy(self.current_store)

        store_changed.send(
            sender=self.__class__,
            session=self,
            store=payload,
            generation=generation,
        )
