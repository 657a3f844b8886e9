"""
Aave lending pool connector
"""
import logging

from swaplend.core.account import WalletAccount
from swaplend.core.chain_client import ContractRef
from swaplend.core.data_models import TokenDescriptor, TransactionReceipt, WorkflowConfig
from swaplend.core.exceptions import DepositFailed


logger = logging.getLogger(__name__)


class AaveLendingConnector:
    """Deposits into an Aave V2 style LendingPool"""

    LENDING_POOL_ABI = [
        {
            "inputs": [
                {"internalType": "address", "name": "asset", "type": "address"},
                {"internalType": "uint256", "name": "amount", "type": "uint256"},
                {"internalType": "address", "name": "onBehalfOf", "type": "address"},
                {"internalType": "uint16", "name": "referralCode", "type": "uint16"}
            ],
            "name": "deposit",
            "outputs": [],
            "stateMutability": "nonpayable",
            "type": "function"
        }
    ]

    def __init__(self, config: WorkflowConfig):
        self.config = config
        self.lending_pool = ContractRef(address=config.lending_pool_address, abi=self.LENDING_POOL_ABI)

    async def deposit(
        self,
        account: WalletAccount,
        token: TokenDescriptor,
        amount: int
    ) -> TransactionReceipt:
        """
        Deposit ``amount`` (smallest units) of ``token`` for the account

        The account is the beneficiary of the interest-bearing position.

        Raises:
            DepositFailed: rejected submission or reverted deposit
        """
        logger.info(f"Depositing {token.format(amount)} to lending pool {self.lending_pool.address}")
        try:
            return await account.transact(
                self.lending_pool,
                "deposit",
                token.address,
                amount,
                account.address,
                self.config.referral_code,
                label="Deposit"
            )
        except Exception as e:
            logger.error(f"An error occurred during lending deposit: {e}")
            raise DepositFailed(f"Deposit of {token.symbol} failed: {e}", cause=e) from e
