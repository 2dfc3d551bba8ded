"""Principal tokens.

A token is a signed, timestamped ``{identity, role}`` payload. Resolving one
yields the Principal the workflow service acts on behalf of.
"""

from abc import ABC, abstractmethod

from django.conf import settings
from django.core import signing

from festivals.domain import Principal, Role, User, UserId


class InvalidTokenError(Exception):
    """Raised when a token is malformed, tampered with or expired."""


class TokenService(ABC):
    @abstractmethod
    def issue(self, user: User) -> str:
        ...

    @abstractmethod
    def resolve(self, token: str) -> Principal:
        """Return the principal a token was issued for.

        Raises:
            InvalidTokenError: If the token does not verify.
        """
        ...


class SignedTokenService(TokenService):
    """Tokens signed with SECRET_KEY via django.core.signing."""

    salt = "festivals.principal"

    def __init__(self, max_age: int | None = None) -> None:
        self._max_age = max_age if max_age is not None else settings.FESTIVALS_TOKEN_MAX_AGE

    def issue(self, user: User) -> str:
        return signing.dumps({"sub": str(user.id), "role": user.role.value}, salt=self.salt)

    def resolve(self, token: str) -> Principal:
        try:
            payload = signing.loads(token, salt=self.salt, max_age=self._max_age)
            return Principal(identity=UserId.from_string(payload["sub"]), role=Role(payload["role"]))
        except signing.SignatureExpired as exc:
            raise InvalidTokenError("Token has expired") from exc
        except (signing.BadSignature, KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Invalid token") from exc
