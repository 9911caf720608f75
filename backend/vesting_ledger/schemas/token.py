"""Token schemas"""
from pydantic import BaseModel, Field


class BalanceResponse(BaseModel):
    identity: str
    balance: int


class MintRequest(BaseModel):
    recipient: str
    amount: int = Field(gt=0)


class TransferRequest(BaseModel):
    recipient: str
    amount: int = Field(gt=0)


class TransferResponse(BaseModel):
    message: str
    sender: str
    recipient: str
    amount: int
    sender_balance: int
