"""Bearer-token authentication resolving requests to a Principal."""

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from festivals.services.tokens import InvalidTokenError, SignedTokenService


class PrincipalTokenAuthentication(BaseAuthentication):
    """Authorization: Bearer <token>"""

    keyword = "Bearer"

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None
        if len(auth) != 2:
            raise exceptions.AuthenticationFailed("Invalid token header.")

        try:
            token = auth[1].decode()
            principal = SignedTokenService().resolve(token)
        except (UnicodeError, InvalidTokenError) as exc:
            raise exceptions.AuthenticationFailed(str(exc)) from exc
        return principal, token

    def authenticate_header(self, request) -> str:
        return self.keyword
