from dataclasses import dataclass
from typing import Optional

SESSION_KEY = "portal_user"


@dataclass(frozen=True)
class PortalSession:
    """
    Who is signed in. Holds identity only: the role is looked up in the
    profiles table whenever a privileged action needs it.
    """
    user_id: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_authenticated(self):
        return self.user_id is not None


ANONYMOUS = PortalSession()


class SessionRepository:
    """Round-trips a PortalSession through Django's session store."""

    def __init__(self, store):
        self.store = store

    def load(self):
        data = self.store.get(SESSION_KEY)
        if not data or not data.get("id"):
            return ANONYMOUS
        return PortalSession(user_id=data["id"], email=data.get("email"))

    def save(self, portal_session):
        # new key on sign-in
        self.store.cycle_key()
        self.store[SESSION_KEY] = {
            "id": portal_session.user_id,
            "email": portal_session.email,
        }

    def clear(self):
        self.store.flush()


class PortalSessionMiddleware:
    """Attaches ``request.portal_session`` for views and templates."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.portal_session = SessionRepository(request.session).load()
        return self.get_response(request)
