"""
Session-side mirror of the signed-in user's registration.

The browser keeps the same view in local storage so it can show
"already registered" optimistically. Here the copy lives in the Django
session, and the store always wins when it can be read.
"""
import logging

from .exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

SESSION_KEY = 'user'

SOURCE_SERVER = 'server'
SOURCE_CACHE = 'cache'


def remember(session, view):
    session[SESSION_KEY] = dict(view)


def cached(session):
    return session.get(SESSION_KEY)


def forget(session):
    session.pop(SESSION_KEY, None)


def reconcile(session, store):
    """
    Refresh the cached view from the store.

    Returns ``(view, source)``. ``view`` is None when nothing is cached or the
    registration no longer exists. When the store cannot be read the cached
    view is returned with ``source == 'cache'``, for display only.
    """
    view = cached(session)
    if not view or not view.get('identifier'):
        return None, None

    try:
        registration = store.get(view['identifier'])
    except StoreUnavailable as e:
        logger.warning(f"Serving cached registration for {view['identifier']}: {e.message}")
        return view, SOURCE_CACHE

    if registration is None:
        forget(session)
        return None, None

    fresh = registration.to_dict()
    if fresh != view:
        remember(session, fresh)
    return fresh, SOURCE_SERVER
