"""
Shared FastAPI dependencies.
"""
import threading

from fastapi import Request

from oas_runner.services.auth_store import AuthConfigStore
from oas_runner.services.transport import HttpTransport

_store_lock = threading.Lock()


def get_auth_store(request: Request) -> AuthConfigStore:
    """The auth config store owned by the running application."""
    state = request.app.state
    store = getattr(state, "auth_store", None)
    if store is None:
        # Normally created by the lifespan; only reached without it
        with _store_lock:
            store = getattr(state, "auth_store", None)
            if store is None:
                store = AuthConfigStore()
                state.auth_store = store
    return store


def get_transport():
    """Transport used to probe target APIs; one session per request."""
    transport = HttpTransport()
    try:
        yield transport
    finally:
        transport.close()
