"""
Signing account bound to one address and one chain client
"""
import asyncio
import logging
from typing import Any

from eth_account import Account

from swaplend.core.chain_client import BaseChainClient, ContractRef
from swaplend.core.data_models import PendingTransaction, TransactionReceipt
from swaplend.core.exceptions import TransactionReverted
from swaplend.utils.helpers import explorer_tx_link


logger = logging.getLogger(__name__)


class WalletAccount:
    """
    The single identity allowed to sign and submit transactions

    Submissions go through one lock so two coroutines sharing the account
    never read the same pending nonce. Confirmation waits happen outside
    the lock.
    """

    def __init__(self, client: BaseChainClient, private_key: str, explorer_tx_url: str = ""):
        self.client = client
        self._signer = Account.from_key(private_key)
        self.explorer_tx_url = explorer_tx_url
        self._submit_lock = asyncio.Lock()

    @property
    def address(self) -> str:
        return self._signer.address

    async def submit(self, contract: ContractRef, fn_name: str, *args: Any) -> PendingTransaction:
        """Build, sign and send a transaction; returns without waiting for inclusion"""
        async with self._submit_lock:
            transaction = await self.client.build_transaction(
                contract, fn_name, *args, sender=self.address
            )
            signed = self._signer.sign_transaction(transaction)
            return await self.client.send_raw_transaction(signed.raw_transaction)

    async def confirm(self, pending: PendingTransaction) -> TransactionReceipt:
        """Wait for inclusion; raises TransactionReverted on failure status"""
        receipt = await self.client.wait_for_receipt(pending)
        if not receipt.status:
            raise TransactionReverted(
                f"Transaction {receipt.tx_hash} reverted", tx_hash=receipt.tx_hash
            )
        return receipt

    async def transact(
        self,
        contract: ContractRef,
        fn_name: str,
        *args: Any,
        label: str = "Transaction"
    ) -> TransactionReceipt:
        """Submit and confirm, logging progress with an explorer link"""
        logger.info(f"Sending {label} transaction...")
        pending = await self.submit(contract, fn_name, *args)
        logger.info(f"{label} transaction sent: {pending.tx_hash}", extra={"tx_hash": pending.tx_hash})

        receipt = await self.confirm(pending)
        logger.info(
            f"{label} transaction confirmed in block {receipt.block_number}: "
            f"{explorer_tx_link(self.explorer_tx_url, receipt.tx_hash)}",
            extra={"tx_hash": receipt.tx_hash}
        )
        return receipt
