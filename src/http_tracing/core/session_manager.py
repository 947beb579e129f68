# src/http_tracing/core/session_manager.py
"""
Thread-local requests.Session storage for HTTPClient.

Each thread gets its own Session so concurrent requests on one client
never share connection-pool state.
"""
import threading
import weakref
from typing import Callable, Set

import requests


class ThreadSafeSessionManager:
    """
    Manages thread-local requests.Session instances.

    Sessions are created lazily on first access per thread and tracked
    through weak references so ``close_all`` can reach every thread's
    session.

    Example:
        >>> manager = ThreadSafeSessionManager(requests.Session)
        >>> session = manager.get_session()
        >>> manager.close_all()
    """

    def __init__(self, session_factory: Callable[[], requests.Session]):
        self._session_factory = session_factory
        self._local = threading.local()
        self._all_sessions: Set[weakref.ref] = set()
        self._sessions_lock = threading.RLock()  # weakref callbacks may fire while held

    def get_session(self) -> requests.Session:
        """Return the session of the current thread, creating it if needed."""
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._session_factory()
            self._local.session = session
            with self._sessions_lock:
                self._all_sessions.add(weakref.ref(session, self._discard))
        return session

    def _discard(self, ref: weakref.ref) -> None:
        with self._sessions_lock:
            self._all_sessions.discard(ref)

    def close_all(self) -> None:
        """
        Close sessions of all threads.

        Safe to call multiple times.
        """
        with self._sessions_lock:
            refs = list(self._all_sessions)
            self._all_sessions.clear()

        for ref in refs:
            session = ref()
            if session is not None:
                session.close()

        self._local.session = None

    def get_active_sessions_count(self) -> int:
        """Number of sessions that are still alive across all threads."""
        with self._sessions_lock:
            return sum(1 for ref in self._all_sessions if ref() is not None)
