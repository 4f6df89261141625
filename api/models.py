"""
API request and response models for the MindConnect REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields that the service checks for presence (email, password, token,
...) are Optional here on purpose: a missing field must reach the service and
come back as MISSING_FIELDS / MISSING_CREDENTIALS, not as a generic schema
error. Length caps only guard against oversized payloads.
"""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Account

# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


class FrequencyEnum(str, Enum):
    immediate = "immediate"
    daily = "daily"
    weekly = "weekly"


class VisibilityEnum(str, Enum):
    public = "public"
    private = "private"


class FontSizeEnum(str, Enum):
    small = "small"
    medium = "medium"
    large = "large"


class NotificationSettings(BaseModel):
    email: bool = True
    push: bool = False
    sms: bool = False
    frequency: FrequencyEnum = FrequencyEnum.immediate


class PrivacySettings(BaseModel):
    profile_visibility: VisibilityEnum = VisibilityEnum.private
    data_sharing: bool = False
    analytics_opt_out: bool = False


class AccessibilitySettings(BaseModel):
    font_size: FontSizeEnum = FontSizeEnum.medium
    high_contrast: bool = False
    text_to_speech: bool = False
    keyboard_navigation: bool = False


class UserPreferences(BaseModel):
    """Stored as a JSON blob on the account. Omitted sections take defaults."""

    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    accessibility: AccessibilitySettings = Field(default_factory=AccessibilitySettings)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    No whitespace stripping: passwords are taken exactly as typed.
    """

    email: Optional[str] = Field(default=None, max_length=255)
    username: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)
    date_of_birth: Optional[date] = None
    preferences: Optional[UserPreferences] = None


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[str] = Field(default=None, max_length=255)


class PasswordResetConfirm(BaseModel):
    token: Optional[str] = Field(default=None, max_length=2048)
    new_password: Optional[str] = Field(default=None, max_length=128)


class VerifyEmailRequest(BaseModel):
    token: Optional[str] = Field(default=None, max_length=2048)


class UpdateProfileRequest(BaseModel):
    """Request body for PUT /api/v1/profile/update. Omitted fields are unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: Optional[str] = Field(default=None, max_length=255)
    date_of_birth: Optional[date] = None
    preferences: Optional[UserPreferences] = None


class ChangePasswordRequest(BaseModel):
    current_password: Optional[str] = Field(default=None, max_length=128)
    new_password: Optional[str] = Field(default=None, max_length=128)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    """Public view of an account. There is no password hash field to leak."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    username: str
    date_of_birth: Optional[str] = None
    is_verified: bool
    preferences: Optional[dict[str, Any]] = None
    profile_picture: Optional[str] = None
    created_at: str
    last_active: Optional[str] = None

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        """Factory Method -- the mapping lives next to the output model."""
        return cls(
            id=account.id,
            email=account.email,
            username=account.username,
            date_of_birth=account.date_of_birth,
            is_verified=account.is_verified,
            preferences=account.preferences,
            profile_picture=account.profile_picture,
            created_at=account.created_at or "",
            last_active=account.last_active,
        )


class AuthData(BaseModel):
    model_config = ConfigDict(frozen=True)

    account: AccountResponse
    token: str
    token_type: str = "bearer"
    expires_in: int


class AuthResponse(BaseModel):
    """Response for register (201) and login (200)."""

    model_config = ConfigDict(frozen=True)

    message: str
    data: AuthData


class AccountEnvelope(BaseModel):
    """Response for the profile read and update routes."""

    model_config = ConfigDict(frozen=True)

    message: Optional[str] = None
    data: AccountResponse


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload.

    requestId is camelCase on the wire to match what the frontend reads.
    Always dump with by_alias=True.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str
    message: str
    details: Optional[list[str]] = None
    timestamp: str
    request_id: str = Field(serialization_alias="requestId")


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    components: dict[str, str]
