from typing import Dict

from fastapi import Depends, Request

from ..domain.models import OAuthProvider
from ..services.oauth_providers import OAuthClient
from .container import ApplicationContainer


def get_container(request: Request) -> ApplicationContainer:
    container = getattr(request.app.state, "container", None)
    if not container:
        raise RuntimeError("Application container not initialised.")
    return container


def get_settings(container: ApplicationContainer = Depends(get_container)):
    return container.settings


def get_auth_service(container: ApplicationContainer = Depends(get_container)):
    return container.auth_service


def get_account_service(container: ApplicationContainer = Depends(get_container)):
    return container.account_service


def get_token_issuer(container: ApplicationContainer = Depends(get_container)):
    return container.token_issuer


def get_oauth_clients(container: ApplicationContainer = Depends(get_container)) -> Dict[OAuthProvider, OAuthClient]:
    return container.oauth_clients


def get_transaction_service(container: ApplicationContainer = Depends(get_container)):
    return container.transaction_service


def get_category_service(container: ApplicationContainer = Depends(get_container)):
    return container.category_service


def get_analytics_service(container: ApplicationContainer = Depends(get_container)):
    return container.analytics_service
