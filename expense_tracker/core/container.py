from dataclasses import dataclass
from typing import Dict

from ..application.services.account_service import AccountService
from ..application.services.analytics_service import AnalyticsService
from ..application.services.auth_service import AuthService
from ..application.services.category_service import CategoryService
from ..application.services.transaction_service import TransactionService
from ..domain.models import OAuthProvider
from ..domain.ports.persistence import PersistenceGateway
from ..services.email_service import EmailService
from ..services.oauth_providers import OAuthClient
from ..services.token_issuer import TokenIssuer
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    persistence: PersistenceGateway
    token_issuer: TokenIssuer
    email_service: EmailService
    oauth_clients: Dict[OAuthProvider, OAuthClient]
    auth_service: AuthService
    account_service: AccountService
    transaction_service: TransactionService
    category_service: CategoryService
    analytics_service: AnalyticsService
