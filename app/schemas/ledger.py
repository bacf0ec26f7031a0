"""Token ledger schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt


class TokenAwardRequest(BaseModel):
    """Request body for awarding tokens.

    ``amount`` is checked by the ledger service so that zero, negative and
    fractional amounts all fail with the same INVALID_AMOUNT error.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    amount: StrictInt | StrictFloat
    reason: str = Field(..., min_length=1)
    related_entity_id: str | None = Field(default=None, alias="relatedEntityId")
    related_entity_type: str | None = Field(default=None, alias="relatedEntityType")


class TokenAwardResponse(BaseModel):
    """Result of a successful award."""

    success: bool = True
    balance: int


class TokenTransactionResponse(BaseModel):
    """A single ledger transaction."""

    id: str
    user_id: str
    amount: int
    type: str
    reason: str
    related_entity_id: str | None = None
    related_entity_type: str | None = None
    created_at: datetime


class TokenBalanceResponse(BaseModel):
    """Current balance with the most recent transactions, newest first."""

    balance: int = 0
    transactions: list[TokenTransactionResponse] = []
