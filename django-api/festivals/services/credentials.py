"""Credential service: password hashing and verification."""

from abc import ABC, abstractmethod

from django.contrib.auth.hashers import check_password, make_password


class CredentialService(ABC):
    @abstractmethod
    def hash(self, secret: str) -> str:
        ...

    @abstractmethod
    def verify(self, secret: str, digest: str) -> bool:
        ...


class DjangoCredentialService(CredentialService):
    """Hashes with the hashers configured in PASSWORD_HASHERS."""

    def hash(self, secret: str) -> str:
        return make_password(secret)

    def verify(self, secret: str, digest: str) -> bool:
        return check_password(secret, digest)
