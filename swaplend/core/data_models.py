"""
Data models for the swap-and-lend pipeline
Uses Pydantic for validation and serialization
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Tuple
from datetime import datetime
from enum import Enum
from decimal import Decimal

from web3 import Web3

from swaplend.utils.helpers import (
    HumanAmount,
    from_base_units,
    format_amount,
    same_address,
    to_base_units,
)


def _check_address(value: str) -> str:
    # Accepts any case; rejects wrong length, non-hex and bad EIP-55 checksums
    if not Web3.is_address(value):
        raise ValueError(f'Invalid Ethereum address: {value!r}')
    return value


class TokenDescriptor(BaseModel):
    """An ERC-20 asset on one network; owns its decimal precision"""
    model_config = ConfigDict(frozen=True)

    chain_id: int
    address: str
    decimals: int = Field(ge=0, le=77)
    symbol: str
    name: str

    @field_validator('address')
    @classmethod
    def validate_address(cls, v):
        return _check_address(v)

    def same_asset(self, other: "TokenDescriptor") -> bool:
        return self.chain_id == other.chain_id and same_address(self.address, other.address)

    def to_base_units(self, amount: HumanAmount) -> int:
        """Human-readable amount of this token -> smallest-unit integer"""
        return to_base_units(amount, self.decimals)

    def from_base_units(self, raw: int) -> Decimal:
        """Smallest-unit integer of this token -> human-readable Decimal"""
        return from_base_units(raw, self.decimals)

    def format(self, raw: int) -> str:
        return format_amount(raw, self.decimals, self.symbol)


class WorkflowConfig(BaseModel):
    """Static contract and token configuration for one swap-and-lend workflow"""
    model_config = ConfigDict(frozen=True)

    chain_id: int
    factory_address: str
    router_address: str
    lending_pool_address: str
    token_in: TokenDescriptor
    token_out: TokenDescriptor
    fee_tier: int = Field(gt=0)
    referral_code: int = Field(default=0, ge=0, le=65535)
    explorer_tx_url: str

    @field_validator('factory_address', 'router_address', 'lending_pool_address')
    @classmethod
    def validate_contract_address(cls, v):
        return _check_address(v)

    @field_validator('token_out')
    @classmethod
    def validate_pair(cls, v, info):
        token_in = info.data.get('token_in')
        if token_in is not None and token_in.same_asset(v):
            raise ValueError('token_in and token_out must be different assets')
        return v


class PoolHandle(BaseModel):
    """A resolved exchange pool; the fee tier is part of its identity"""
    model_config = ConfigDict(frozen=True)

    address: str
    token0: str
    token1: str
    fee: int

    def has_tokens(self, token_a: str, token_b: str) -> bool:
        pool_tokens = {self.token0.lower(), self.token1.lower()}
        return pool_tokens == {token_a.lower(), token_b.lower()}


class PoolInfo(BaseModel):
    """Pool resolver result: the handle plus the raw values read from the pool"""
    model_config = ConfigDict(frozen=True)

    pool: PoolHandle
    token0: str
    token1: str
    fee: int


class SwapRequest(BaseModel):
    """Exact-input single-hop swap parameters"""
    model_config = ConfigDict(frozen=True)

    token_in: str
    token_out: str
    fee: int = Field(ge=0)
    recipient: str
    amount_in: int = Field(ge=0)
    amount_out_minimum: int = Field(default=0, ge=0)
    sqrt_price_limit_x96: int = Field(default=0, ge=0)

    def as_contract_params(self) -> Tuple[str, str, int, str, int, int, int]:
        """ExactInputSingleParams tuple in ABI order"""
        return (
            self.token_in,
            self.token_out,
            self.fee,
            self.recipient,
            self.amount_in,
            self.amount_out_minimum,
            self.sqrt_price_limit_x96,
        )


class PendingTransaction(BaseModel):
    """Handle for a submitted, not yet confirmed transaction"""
    model_config = ConfigDict(frozen=True)

    tx_hash: str


class TransactionReceipt(BaseModel):
    """Confirmed transaction outcome"""
    model_config = ConfigDict(frozen=True)

    tx_hash: str
    status: bool
    block_number: Optional[int] = None
    gas_used: Optional[int] = None


class PipelineStage(str, Enum):
    """Pipeline stages in execution order, plus the two terminal states"""
    APPROVE_INPUT = "approve_input"
    RESOLVE_POOL = "resolve_pool"
    BUILD_SWAP = "build_swap"
    EXECUTE_SWAP = "execute_swap"
    READ_BALANCE = "read_balance"
    APPROVE_OUTPUT = "approve_output"
    DEPOSIT = "deposit"
    DONE = "done"
    FAILED = "failed"


class PipelineRun(BaseModel):
    """Record of one pipeline run"""
    run_id: str
    amount: Optional[Decimal] = None
    stage: PipelineStage = PipelineStage.APPROVE_INPUT
    failed_stage: Optional[PipelineStage] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    receipts: Dict[PipelineStage, TransactionReceipt] = Field(default_factory=dict)
    amount_in: Optional[int] = None
    output_balance: Optional[int] = None
    started_at: datetime
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.stage == PipelineStage.DONE

    @property
    def committed_tx_hashes(self) -> Tuple[str, ...]:
        """Hashes of transactions that confirmed during this run"""
        return tuple(receipt.tx_hash for receipt in self.receipts.values())
