"""Wallet authentication schemas."""

from pydantic import BaseModel, ConfigDict, Field


class WalletAuthRequest(BaseModel):
    """Signed login message from a browser wallet."""

    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str = Field(..., alias="walletAddress", min_length=1)
    signature: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class WalletAuthResponse(BaseModel):
    """Session issued after a successful wallet login."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user_id: str = Field(..., alias="userId")
    token: str
