"""
Pydantic schemas for API requests and responses
"""

from typing import Dict
from pydantic import BaseModel, Field

from .wallet import U64_MAX


class SendTokensRequest(BaseModel):
    to_address: str = Field(..., min_length=1, description="Recipient address")
    amount: int = Field(..., strict=True, ge=0, le=U64_MAX, description="Number of tokens to send")


class ReceiveTokensRequest(BaseModel):
    from_address: str = Field(..., min_length=1, description="Sender address")
    amount: int = Field(..., strict=True, ge=0, le=U64_MAX, description="Number of tokens received")


class BalanceResponse(BaseModel):
    balance: int


class AddressBalanceResponse(BaseModel):
    address: str
    balance: int


class OperationResponse(BaseModel):
    message: str
    balance: int


class SnapshotResponse(BaseModel):
    owner_balance: int
    balances: Dict[str, int]
    total: int
    taken_at: str
