"""Contracts for the yield backend API.

The backend speaks camelCase JSON; models accept it via aliases and expose
snake_case attributes.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

USDC_DECIMALS = 6


class YieldAction(str, Enum):
    """Transaction-building actions and their endpoint names."""

    DEPOSIT = "lend"
    INITIATE_WITHDRAW = "initiate-withdraw"
    COMPLETE_WITHDRAW = "complete-withdraw"

    @property
    def label(self) -> str:
        return {
            YieldAction.DEPOSIT: "deposit",
            YieldAction.INITIATE_WITHDRAW: "initiate withdraw",
            YieldAction.COMPLETE_WITHDRAW: "complete withdraw",
        }[self]

    @property
    def is_withdrawal(self) -> bool:
        return self is not YieldAction.DEPOSIT


class ApyRates(BaseModel):
    """APY snapshot over several lookback windows, in percent."""

    model_config = ConfigDict(populate_by_name=True)

    current: float = Field(0.0, alias="CURRENT")
    one_hour: float = Field(0.0, alias="1HR")
    one_day: float = Field(0.0, alias="24HR")
    seven_days: float = Field(0.0, alias="7DAY")
    thirty_days: float = Field(0.0, alias="30DAY")
    one_year: float = Field(0.0, alias="1YR")


class ApyInfo(BaseModel):
    """APY for the regular and protected pools."""

    regular: ApyRates = Field(default_factory=ApyRates)
    protected: ApyRates = Field(default_factory=ApyRates)


class BalanceInfo(BaseModel):
    """Deposited value held by the yield service."""

    model_config = ConfigDict(populate_by_name=True)

    total_usd_value: Decimal = Field(Decimal("0"), alias="totalUsdValue")


class PendingWithdrawal(BaseModel):
    """A withdrawal that was initiated and waits for its maturation window."""

    model_config = ConfigDict(populate_by_name=True)

    withdrawal_id: Union[int, str] = Field(..., alias="withdrawalId")
    native_amount: int = Field(..., alias="nativeAmount", description="Amount in smallest unit")
    created_timestamp: float = Field(..., alias="createdTimestamp", description="Unix seconds")

    @property
    def amount(self) -> Decimal:
        """Amount in USDC."""
        return Decimal(self.native_amount) / Decimal(10**USDC_DECIMALS)


class TransactionEnvelope(BaseModel):
    """Reply of the transaction-building endpoints."""

    success: bool = False
    transaction: Optional[str] = Field(None, description="Base64 unsigned transaction")
    error: Optional[str] = None
