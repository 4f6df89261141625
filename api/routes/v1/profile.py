"""
api/routes/v1/profile.py -- Profile management endpoints (all require auth).

Routes:
  PUT    /api/v1/profile/update    -- username, date of birth, preferences
  PUT    /api/v1/profile/password  -- change password (current password required)
  DELETE /api/v1/profile/picture   -- clear the stored profile picture reference

The account id always comes from the verified session token, never from the
request body, so a caller can only modify their own account.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.models import AccountEnvelope, AccountResponse, ChangePasswordRequest, MessageResponse, UpdateProfileRequest
from auth.dependencies import get_auth_service, get_current_account
from auth.models import Account
from auth.service import AuthService

router = APIRouter()


@router.put("/profile/update", response_model=AccountEnvelope)
def update_profile(
    body: UpdateProfileRequest,
    account: Account = Depends(get_current_account),
    service: AuthService = Depends(get_auth_service),
) -> AccountEnvelope:
    updated = service.update_profile(
        account.id,
        username=body.username,
        date_of_birth=body.date_of_birth.isoformat() if body.date_of_birth else None,
        preferences=body.preferences.model_dump(mode="json") if body.preferences else None,
    )
    return AccountEnvelope(message="Profile updated successfully", data=AccountResponse.from_account(updated))


@router.put("/profile/password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    service.change_password(account.id, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")


@router.delete("/profile/picture", response_model=AccountEnvelope)
def delete_profile_picture(
    account: Account = Depends(get_current_account),
    service: AuthService = Depends(get_auth_service),
) -> AccountEnvelope:
    updated = service.delete_profile_picture(account.id)
    return AccountEnvelope(message="Profile picture deleted successfully", data=AccountResponse.from_account(updated))
