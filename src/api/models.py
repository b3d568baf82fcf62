"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.domain.models import Account


class StatEntryModel(BaseModel):
    label: str
    value: str | int


class UpcomingItemModel(BaseModel):
    title: str
    detail: str


class CreateAccountRequest(BaseModel):
    """Request model for signup."""

    email: EmailStr
    password: str = Field(..., min_length=8, description="Account password (min 8 characters)")
    name: str = Field(..., min_length=1, description="Display name")
    role: str = ""
    location: str = ""
    bio: str = ""


class UpdateProfileRequest(BaseModel):
    """
    Request model for profile updates.

    Unknown keys are passed through so the domain can reject credential
    fields with a meaningful error instead of a schema error.
    """

    model_config = ConfigDict(extra="allow")

    email: EmailStr | None = None
    name: str | None = None
    role: str | None = None
    location: str | None = None
    bio: str | None = None
    stats: list[StatEntryModel] | None = None
    focus_areas: list[str] | None = None
    upcoming: list[UpcomingItemModel] | None = None


class ChangePasswordRequest(BaseModel):
    """Request model for password change. Rules are enforced by the domain."""

    current_password: str
    new_password: str


class VerifyEmailRequest(BaseModel):
    """Request model for email verification."""

    email: EmailStr
    code: str = Field(
        ...,
        min_length=6,
        max_length=6,
        pattern=r"^\d{6}$",
        description="6-digit verification code",
    )


class LoginRequest(BaseModel):
    """Request model for credential check."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AccountResponse(BaseModel):
    """Sanitized account representation."""

    id: str
    email: str
    email_verified: bool
    is_admin: bool
    name: str
    role: str
    location: str
    bio: str
    stats: list[StatEntryModel]
    focus_areas: list[str]
    upcoming: list[UpcomingItemModel]
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account, is_admin: bool) -> "AccountResponse":
        return cls(
            id=account.id,
            email=account.email,
            email_verified=account.email_verified,
            is_admin=is_admin,
            name=account.name,
            role=account.role,
            location=account.location,
            bio=account.bio,
            stats=[StatEntryModel(label=s.label, value=s.value) for s in account.stats],
            focus_areas=list(account.focus_areas),
            upcoming=[UpcomingItemModel(title=u.title, detail=u.detail) for u in account.upcoming],
            created_at=account.created_at,
        )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
