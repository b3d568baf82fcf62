"""
API v1 routes.

Defines REST endpoints for account signup, verification, login,
profile and password management, and admin account moderation.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.dependencies import get_account_service, require_admin
from src.api.models import (
    AccountResponse,
    ChangePasswordRequest,
    CreateAccountRequest,
    ErrorResponse,
    LoginRequest,
    UpdateProfileRequest,
    VerifyEmailRequest,
)
from src.domain.accounts import AccountLifecycleManager
from src.domain.exceptions import (
    AccountError,
    AuthError,
    ConflictError,
    DeliveryError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from src.domain.models import Account

router = APIRouter(tags=["v1"])

# Domain error kind -> HTTP status
ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    AuthError: status.HTTP_401_UNAUTHORIZED,
    ExpiredError: status.HTTP_410_GONE,
    DeliveryError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(error: AccountError) -> HTTPException:
    """Translate a domain error into an HTTPException carrying its kind."""
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(
        status_code=status_code,
        detail=str(error),
        headers={"X-Error-Kind": error.kind},
    )


def _response(service: AccountLifecycleManager, account: Account) -> AccountResponse:
    return AccountResponse.from_account(account, is_admin=service.is_admin(account))


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing account fields"},
        403: {"model": ErrorResponse, "description": "Reserved email address"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        503: {"model": ErrorResponse, "description": "Verification email could not be sent"},
        422: {"description": "Validation error"},
    },
    summary="Create an account",
    description="Register with email, password and name. "
    "A 6-digit verification code is emailed to the address.",
)
def create_account(
    request_data: CreateAccountRequest,
    service: AccountLifecycleManager = Depends(get_account_service),
) -> AccountResponse:
    try:
        account = service.create_account(
            email=request_data.email,
            password=request_data.password,
            name=request_data.name,
            role=request_data.role,
            location=request_data.location,
            bio=request_data.bio,
        )
    except AccountError as e:
        raise to_http_exception(e) from None
    return _response(service, account)


@router.get(
    "/accounts",
    response_model=list[AccountResponse],
    summary="List accounts",
)
def list_accounts(
    service: AccountLifecycleManager = Depends(get_account_service),
) -> list[AccountResponse]:
    return [_response(service, account) for account in service.list_accounts()]


@router.post(
    "/accounts/verify-email",
    response_model=AccountResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No verification pending"},
        401: {"model": ErrorResponse, "description": "Incorrect code"},
        404: {"model": ErrorResponse, "description": "Account not found"},
        410: {"model": ErrorResponse, "description": "Code expired"},
        422: {"description": "Validation error"},
    },
    summary="Verify email with code",
    description="Submit the 6-digit code received by email. "
    "Verifying an already verified account succeeds without checking the code.",
)
def verify_email(
    request_data: VerifyEmailRequest,
    service: AccountLifecycleManager = Depends(get_account_service),
) -> AccountResponse:
    try:
        account = service.verify_email(request_data.email, request_data.code)
    except AccountError as e:
        raise to_http_exception(e) from None
    return _response(service, account)


@router.get(
    "/accounts/{account_id}",
    response_model=AccountResponse,
    responses={404: {"model": ErrorResponse, "description": "Account not found"}},
    summary="Get an account",
)
def get_account(
    account_id: str,
    service: AccountLifecycleManager = Depends(get_account_service),
) -> AccountResponse:
    try:
        account = service.get_account(account_id)
    except AccountError as e:
        raise to_http_exception(e) from None
    return _response(service, account)


@router.patch(
    "/accounts/{account_id}",
    response_model=AccountResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Credential or unknown field"},
        403: {"model": ErrorResponse, "description": "Reserved email address"},
        404: {"model": ErrorResponse, "description": "Account not found"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Update profile fields",
)
def update_profile(
    account_id: str,
    request_data: UpdateProfileRequest,
    service: AccountLifecycleManager = Depends(get_account_service),
) -> AccountResponse:
    try:
        account = service.update_profile(account_id, request_data.model_dump(exclude_unset=True))
    except AccountError as e:
        raise to_http_exception(e) from None
    return _response(service, account)


@router.patch(
    "/accounts/{account_id}/password",
    response_model=AccountResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Password rules not met"},
        401: {"model": ErrorResponse, "description": "Current password incorrect"},
        404: {"model": ErrorResponse, "description": "Account not found"},
    },
    summary="Change password",
)
def change_password(
    account_id: str,
    request_data: ChangePasswordRequest,
    service: AccountLifecycleManager = Depends(get_account_service),
) -> AccountResponse:
    try:
        account = service.change_password(
            account_id, request_data.current_password, request_data.new_password
        )
    except AccountError as e:
        raise to_http_exception(e) from None
    return _response(service, account)


@router.post(
    "/login",
    response_model=AccountResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid email or password"},
        403: {"model": ErrorResponse, "description": "Email not verified"},
    },
    summary="Check credentials",
    description="Returns the account for a valid email and password. "
    "Accounts must have verified their email, except the admin account.",
)
def login(
    request_data: LoginRequest,
    service: AccountLifecycleManager = Depends(get_account_service),
) -> AccountResponse:
    account = service.verify_credentials(request_data.email, request_data.password)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
            headers={"X-Error-Kind": AuthError.kind},
        )
    if not account.email_verified and not service.is_admin(account):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Please verify your email to continue.",
            headers={"X-Error-Kind": "email_not_verified"},
        )
    return _response(service, account)


@router.post(
    "/admin/accounts/{account_id}/verify",
    response_model=AccountResponse,
    responses={
        401: {"description": "Missing or invalid credentials"},
        403: {"model": ErrorResponse, "description": "Requester is not the admin"},
        404: {"model": ErrorResponse, "description": "Account not found"},
    },
    summary="Force-verify an account",
    description="Admin only. Marks the account verified without a code.",
)
def force_verify(
    account_id: str,
    admin: Account = Depends(require_admin),
    service: AccountLifecycleManager = Depends(get_account_service),
) -> AccountResponse:
    try:
        account = service.force_verify(account_id)
    except AccountError as e:
        raise to_http_exception(e) from None
    return _response(service, account)


@router.delete(
    "/admin/accounts/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"description": "Missing or invalid credentials"},
        403: {"model": ErrorResponse, "description": "Admin account or non-admin requester"},
        404: {"model": ErrorResponse, "description": "Account not found"},
    },
    summary="Delete an account",
    description="Admin only. Removes the account and all content it authored. "
    "The admin account itself cannot be deleted.",
)
def delete_account(
    account_id: str,
    admin: Account = Depends(require_admin),
    service: AccountLifecycleManager = Depends(get_account_service),
) -> Response:
    try:
        service.delete_account(account_id)
    except AccountError as e:
        raise to_http_exception(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
