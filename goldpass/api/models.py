"""Pydantic request/response models for the Gold Pass API.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Claim
# =============================================================================


class ClaimRequest(CamelModel):
    """Request to claim a Gold Pass.

    Fields are validated together by the canonicalizer so every problem
    is reported at once.
    """

    name: Optional[str] = Field(None, description="Full name (2-50 characters)")
    email: Optional[str] = Field(None, description="Email address")
    phone: Optional[str] = Field(None, description="Phone number, national or E.164")
    device_id: Optional[str] = Field(
        None, alias="deviceId", description="Requesting device, recorded in the owner token"
    )


class ClaimResponse(CamelModel):
    uid: str = Field(..., description="Deterministic member UID")
    add_to_wallet_url: str = Field(..., alias="addToWalletUrl")
    profile_url: str = Field(..., alias="profileUrl")
    existing: bool = Field(..., description="True if this identity had already claimed")
    edit_token: Optional[str] = Field(
        None,
        alias="editToken",
        description="Profile edit token (only returned on creation, store securely)",
    )


# =============================================================================
# Profile completion
# =============================================================================


class ProfileCompleteRequest(CamelModel):
    uid: Optional[str] = None
    token: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[Union[int, str]] = None
    street1: Optional[str] = None


class ProfileCompleteResponse(CamelModel):
    success: bool
    message: str


# =============================================================================
# Passes
# =============================================================================


class PassRequest(CamelModel):
    uid: Optional[str] = Field(None, description="Member UID from the claim response")


# =============================================================================
# Health
# =============================================================================


class HealthResponse(CamelModel):
    ok: bool
    database: bool = Field(..., description="Whether the store answered a ping")
