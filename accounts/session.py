"""Session provider for pages that require a signed-in user.

Pages receive a :class:`SessionState` value instead of reading
``request.user`` themselves, so the "loading", "authenticated" and
"unauthenticated" cases are handled in one place.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.contrib.auth import logout
from django.shortcuts import redirect, resolve_url
from django.utils.http import url_has_allowed_host_and_scheme

LOADING = "loading"
AUTHENTICATED = "authenticated"
UNAUTHENTICATED = "unauthenticated"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    user_display_name: str


@dataclass(frozen=True)
class SessionState:
    status: str
    session: Optional[Session] = None

    @property
    def is_loading(self) -> bool:
        return self.status == LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.status == AUTHENTICATED and self.session is not None


def display_name(user) -> str:
    full_name = f"{user.first_name} {user.last_name}".strip()
    return full_name or user.get_username()


def get_session_state(request) -> SessionState:
    """Resolve the session for ``request``.

    The user is attached by ``AuthenticationMiddleware``; a request that has
    not been through it yet is reported as still loading.
    """
    user = getattr(request, "user", None)
    if user is None:
        return SessionState(LOADING)
    if user.is_authenticated:
        return SessionState(AUTHENTICATED, Session(user_display_name=display_name(user)))
    return SessionState(UNAUTHENTICATED)


def safe_redirect_target(request, url: Optional[str], fallback: str) -> str:
    if url and url_has_allowed_host_and_scheme(
        url, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return url
    return resolve_url(fallback)


def sign_out(request, callback_url: Optional[str] = None):
    """End the session and redirect to ``callback_url`` (the login page by default)."""
    target = safe_redirect_target(request, callback_url, settings.LOGIN_URL)
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        logger.info("Signing out user=%s", user.get_username())
    logout(request)
    return redirect(target)
