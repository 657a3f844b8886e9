"""
Tests for the ERC-20, Uniswap V3 and lending connectors
"""
import pytest
from decimal import Decimal
from pydantic import ValidationError

from swaplend.connectors.dex.uniswap import build_swap_request
from swaplend.connectors.erc20 import approve_token, get_token_balance
from swaplend.core.data_models import PoolHandle, TokenDescriptor
from swaplend.core.exceptions import (
    ApprovalFailed,
    BalanceReadFailed,
    DepositFailed,
    PoolNotFound,
    SwapFailed,
    TransactionReverted,
)

SPENDER = "0x3bFA4769FB09eefC5a80d6E87c3B9C650f7Ae48E"


def _token(decimals: int) -> TokenDescriptor:
    return TokenDescriptor(
        chain_id=11155111,
        address="0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
        decimals=decimals,
        symbol="TKN",
        name="Test Token",
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("amount, decimals, expected", [
    (1, 6, 1_000_000),
    ("2.5", 6, 2_500_000),
    (Decimal("0.000001"), 6, 1),
    ("1", 18, 10**18),
    ("123.456789012345678901", 18, 123_456_789_012_345_678_901),
    (7, 0, 7),
])
async def test_approve_encodes_amount_in_token_units(account, chain, amount, decimals, expected):
    """Approval submits exactly one transaction for amount * 10^decimals"""
    receipt = await approve_token(account, _token(decimals), SPENDER, amount)

    assert len(chain.sent) == 1
    sent = chain.sent[0]
    assert sent.fn_name == "approve"
    assert sent.args == (SPENDER, expected)
    assert sent.sender == account.address
    assert receipt.status is True
    assert receipt.tx_hash == sent.tx_hash


@pytest.mark.asyncio
async def test_approve_rejects_excess_precision_before_submitting(account, chain):
    """More fractional digits than the token supports never reach the chain"""
    with pytest.raises(ApprovalFailed) as exc_info:
        await approve_token(account, _token(6), SPENDER, "0.0000001")

    assert isinstance(exc_info.value.cause, ValueError)
    assert chain.sent == []


@pytest.mark.asyncio
async def test_approve_reverted_wraps_cause(account, chain):
    """A mined approval with failure status raises ApprovalFailed"""
    chain.revert_fns.add("approve")

    with pytest.raises(ApprovalFailed) as exc_info:
        await approve_token(account, _token(6), SPENDER, 1)

    assert isinstance(exc_info.value.cause, TransactionReverted)
    assert exc_info.value.__cause__ is exc_info.value.cause
    # Gas was spent: the transaction was still submitted
    assert len(chain.sent) == 1


@pytest.mark.asyncio
async def test_approve_rejected_submission(account, chain):
    """A transaction the node refuses to build raises ApprovalFailed"""
    chain.reject_fns.add("approve")

    with pytest.raises(ApprovalFailed) as exc_info:
        await approve_token(account, _token(6), SPENDER, 1)

    assert "rejected" in str(exc_info.value.cause)
    assert chain.sent == []


@pytest.mark.asyncio
async def test_get_token_balance(account, chain, workflow):
    """Balance reader returns the raw integer balance"""
    link = workflow.token_out
    chain.balances[(link.address.lower(), account.address.lower())] = 42

    assert await get_token_balance(chain, link, account.address) == 42
    assert chain.read_names() == ["balanceOf"]


@pytest.mark.asyncio
async def test_get_token_balance_failure(account, chain, workflow):
    chain.failing_reads.add("balanceOf")

    with pytest.raises(BalanceReadFailed) as exc_info:
        await get_token_balance(chain, workflow.token_out, account.address)

    assert isinstance(exc_info.value.cause, ConnectionError)


@pytest.mark.asyncio
async def test_resolve_pool_missing_fee_tier(uniswap, chain, workflow):
    """No pool at the fee tier: PoolNotFound and no pool reads"""
    with pytest.raises(PoolNotFound):
        await uniswap.resolve_pool(workflow.token_in, workflow.token_out, 500)

    assert chain.read_names() == ["getPool"]


@pytest.mark.asyncio
async def test_resolve_pool_factory_failure(uniswap, chain, workflow):
    chain.failing_reads.add("getPool")

    with pytest.raises(PoolNotFound) as exc_info:
        await uniswap.resolve_pool(workflow.token_in, workflow.token_out, workflow.fee_tier)

    assert isinstance(exc_info.value.cause, ConnectionError)
    assert chain.read_names() == ["getPool"]


@pytest.mark.asyncio
@pytest.mark.parametrize("reverse", [False, True])
async def test_resolve_pool_returns_pair_tokens(uniswap, chain, workflow, reverse):
    """{token0, token1} equals the pair regardless of argument order"""
    token_a, token_b = workflow.token_in, workflow.token_out
    if reverse:
        token_a, token_b = token_b, token_a

    info = await uniswap.resolve_pool(token_a, token_b, workflow.fee_tier)

    assert {info.token0.lower(), info.token1.lower()} == {
        workflow.token_in.address.lower(),
        workflow.token_out.address.lower(),
    }
    assert info.fee == workflow.fee_tier
    assert info.pool.fee == workflow.fee_tier
    assert sorted(chain.read_names()) == ["fee", "getPool", "token0", "token1"]
    assert chain.read_names()[0] == "getPool"


@pytest.mark.asyncio
async def test_verify_pool_rejects_foreign_pair(uniswap, chain, workflow):
    info = await uniswap.resolve_pool(workflow.token_in, workflow.token_out, workflow.fee_tier)
    other = workflow.token_out.model_copy(update={"address": "0x" + "22" * 20})

    with pytest.raises(PoolNotFound):
        uniswap.verify_pool(info, workflow.token_in, other, workflow.fee_tier)

    with pytest.raises(PoolNotFound):
        uniswap.verify_pool(info, workflow.token_in, workflow.token_out, 10000)

    pool = uniswap.verify_pool(info, workflow.token_in, workflow.token_out, workflow.fee_tier)
    assert pool == info.pool


@pytest.mark.parametrize("amount_in", [0, 1, 1_000_000, 2**200])
def test_build_swap_request_accepts_any_output(workflow, account, amount_in):
    """Minimum output is always zero and the account always receives the output"""
    pool = PoolHandle(address="0x" + "ab" * 20, token0="0x01", token1="0x02", fee=3000)

    request = build_swap_request(workflow, pool, account.address, amount_in)

    assert request.amount_out_minimum == 0
    assert request.recipient == account.address
    assert request.amount_in == amount_in
    assert request.sqrt_price_limit_x96 == 0
    assert request.token_in == workflow.token_in.address
    assert request.token_out == workflow.token_out.address
    assert request.fee == pool.fee


def test_build_swap_request_rejects_negative_amount(workflow, account):
    pool = PoolHandle(address="0x" + "ab" * 20, token0="0x01", token1="0x02", fee=3000)

    with pytest.raises(ValidationError):
        build_swap_request(workflow, pool, account.address, -1)


@pytest.mark.asyncio
async def test_execute_swap_submits_exact_input_single(uniswap, account, chain, workflow):
    pool = PoolHandle(address="0x" + "ab" * 20, token0="0x01", token1="0x02", fee=3000)
    request = build_swap_request(workflow, pool, account.address, 1_000_000)

    receipt = await uniswap.execute_swap(request, account)

    swaps = chain.sent_calls("exactInputSingle")
    assert len(swaps) == 1
    assert swaps[0].contract == workflow.router_address
    assert swaps[0].args == (request.as_contract_params(),)
    assert receipt.status is True


@pytest.mark.asyncio
async def test_execute_swap_reverted(uniswap, account, chain, workflow):
    chain.revert_fns.add("exactInputSingle")
    pool = PoolHandle(address="0x" + "ab" * 20, token0="0x01", token1="0x02", fee=3000)
    request = build_swap_request(workflow, pool, account.address, 1_000_000)

    with pytest.raises(SwapFailed) as exc_info:
        await uniswap.execute_swap(request, account)

    assert isinstance(exc_info.value.cause, TransactionReverted)


@pytest.mark.asyncio
async def test_deposit_credits_account_with_zero_referral(lending, account, chain, workflow):
    receipt = await lending.deposit(account, workflow.token_out, 555)

    deposits = chain.sent_calls("deposit")
    assert len(deposits) == 1
    assert deposits[0].contract == workflow.lending_pool_address
    assert deposits[0].args == (workflow.token_out.address, 555, account.address, 0)
    assert receipt.status is True


@pytest.mark.asyncio
async def test_deposit_reverted(lending, account, chain, workflow):
    chain.revert_fns.add("deposit")

    with pytest.raises(DepositFailed) as exc_info:
        await lending.deposit(account, workflow.token_out, 555)

    assert isinstance(exc_info.value.cause, TransactionReverted)
