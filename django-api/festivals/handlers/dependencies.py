"""Wiring of the workflow service's collaborators for HTTP handlers."""

from festivals.services.credentials import DjangoCredentialService
from festivals.services.tokens import SignedTokenService
from festivals.services.workflow_service import WorkflowService
from festivals.stores.django_store import DjangoEntityStore


def get_workflow_service() -> WorkflowService:
    return WorkflowService(
        store=DjangoEntityStore(),
        credentials=DjangoCredentialService(),
        tokens=SignedTokenService(),
    )
