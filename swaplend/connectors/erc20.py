"""
ERC-20 token operations: allowance approval and balance reads
"""
import logging

from swaplend.core.account import WalletAccount
from swaplend.core.chain_client import BaseChainClient, ContractRef
from swaplend.core.data_models import TokenDescriptor, TransactionReceipt
from swaplend.core.exceptions import ApprovalFailed, BalanceReadFailed
from swaplend.utils.helpers import HumanAmount


logger = logging.getLogger(__name__)


ERC20_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "spender", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    }
]


def token_contract(token: TokenDescriptor) -> ContractRef:
    return ContractRef(address=token.address, abi=ERC20_ABI)


async def approve_token(
    account: WalletAccount,
    token: TokenDescriptor,
    spender: str,
    amount: HumanAmount
) -> TransactionReceipt:
    """
    Allow ``spender`` to move up to ``amount`` of ``token`` from the account

    ``amount`` is human-readable and is scaled with the token's own decimals.
    The new allowance replaces any previous one. Blocks until the approval
    is mined.

    Raises:
        ApprovalFailed: bad amount, rejected submission, or reverted approval
    """
    try:
        raw_amount = token.to_base_units(amount)
    except ValueError as e:
        raise ApprovalFailed(f"Invalid {token.symbol} approval amount: {e}", cause=e) from e

    logger.info(f"Approving {token.format(raw_amount)} for spender {spender}")
    try:
        return await account.transact(
            token_contract(token),
            "approve",
            spender,
            raw_amount,
            label=f"{token.symbol} approval"
        )
    except Exception as e:
        logger.error(f"An error occurred during {token.symbol} approval: {e}")
        raise ApprovalFailed(f"{token.symbol} approval failed: {e}", cause=e) from e


async def get_token_balance(client: BaseChainClient, token: TokenDescriptor, owner: str) -> int:
    """Current smallest-unit balance of ``owner``"""
    try:
        balance = await client.call(token_contract(token), "balanceOf", owner)
    except Exception as e:
        raise BalanceReadFailed(f"Failed to read {token.symbol} balance: {e}", cause=e) from e

    logger.info(f"{token.symbol} balance of {owner}: {token.format(balance)}")
    return int(balance)
