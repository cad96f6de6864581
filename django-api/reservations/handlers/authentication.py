"""Trusts the identity provider's opaque user id passed in a header."""

from dataclasses import dataclass

from rest_framework import authentication, exceptions
from rest_framework.request import Request

USER_HEADER = "X-User-Id"


@dataclass(frozen=True)
class ExternalUser:
    """Caller identified upstream; no local user record exists."""

    user_id: str

    is_authenticated = True
    is_anonymous = False

    def __str__(self) -> str:
        return self.user_id


class HeaderUserAuthentication(authentication.BaseAuthentication):
    """Authenticate requests carrying ``X-User-Id``."""

    def authenticate(self, request: Request):
        user_id = request.headers.get(USER_HEADER, "").strip()
        if not user_id:
            return None
        if len(user_id) > 255:
            raise exceptions.AuthenticationFailed("Invalid user id")
        return ExternalUser(user_id=user_id), None

    def authenticate_header(self, request: Request) -> str:
        return USER_HEADER
