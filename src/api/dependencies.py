"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAccountRepository
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.config.settings import get_settings
from src.domain.accounts import AccountLifecycleManager
from src.domain.admin import AdminPolicy
from src.domain.credentials import CredentialHasher
from src.domain.models import Account
from src.domain.ports import EmailSender
from src.domain.verification import VerificationCodeIssuer


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> PostgresAccountRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresAccountRepository(pool)


@lru_cache
def get_email_sender() -> EmailSender:
    """Build the configured email sender (singleton)."""
    settings = get_settings()
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_ssl=settings.smtp_use_ssl,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout,
        )
    return ConsoleEmailSender()


@lru_cache
def get_credential_hasher() -> CredentialHasher:
    """Hasher singleton, so its dummy hash is computed once per process."""
    settings = get_settings()
    return CredentialHasher(algorithm=settings.password_algorithm, bcrypt_rounds=settings.bcrypt_cost)


@lru_cache
def get_admin_policy() -> AdminPolicy:
    """Admin designation resolved once from settings."""
    return AdminPolicy(admin_email=get_settings().admin_email)


def get_account_service(request: Request) -> AccountLifecycleManager:
    """
    Create account service with injected dependencies.

    Wires together the repository, email sender, hasher and admin policy.
    """
    settings = get_settings()
    return AccountLifecycleManager(
        repository=get_repository(request),
        email_sender=get_email_sender(),
        admin_policy=get_admin_policy(),
        hasher=get_credential_hasher(),
        code_issuer=VerificationCodeIssuer(ttl=timedelta(seconds=settings.verification_ttl_seconds)),
    )


# HTTP BASIC AUTH security scheme for admin endpoints
http_basic = HTTPBasic()


def get_basic_auth_credentials(
    credentials: HTTPBasicCredentials = Depends(http_basic),
) -> tuple[str, str]:
    """
    Extract credentials from HTTP BASIC AUTH header.

    FastAPI's HTTPBasic automatically:
    - Returns 401 for missing Authorization header
    - Returns 401 for malformed base64 encoding
    - Parses base64(email:password) format

    Returns:
        Tuple of (email, password), email stripped of whitespace
    """
    return credentials.username.strip(), credentials.password


def require_admin(
    credentials: tuple[str, str] = Depends(get_basic_auth_credentials),
    service: AccountLifecycleManager = Depends(get_account_service),
) -> Account:
    """
    Authenticate the requester and require the admin account.

    Raises:
        HTTPException: 401 for bad credentials, 403 for non-admin requesters
    """
    email, password = credentials
    requester = service.verify_credentials(email, password)
    if requester is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
            headers={"WWW-Authenticate": "Basic"},
        )
    if not service.is_admin(requester):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the admin can manage accounts.",
            headers={"X-Error-Kind": "forbidden"},
        )
    return requester
