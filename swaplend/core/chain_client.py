"""
Chain client for contract reads and transaction submission
Provides the common interface and the Web3.py implementation
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from web3 import AsyncWeb3, AsyncHTTPProvider

from swaplend.core.data_models import PendingTransaction, TransactionReceipt
from swaplend.core.exceptions import ChainConnectionError
from swaplend.utils.helpers import normalize_tx_hash


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractRef:
    """A contract address together with the ABI fragment used to talk to it"""
    address: str
    abi: List[Dict[str, Any]]


class BaseChainClient(ABC):
    """Base class for blockchain clients"""

    def __init__(self, chain_id: int):
        self.chain_id = chain_id
        self._is_connected = False

    async def __aenter__(self):
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.disconnect()

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the network"""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the network"""
        pass

    @abstractmethod
    async def call(self, contract: ContractRef, fn_name: str, *args: Any) -> Any:
        """Read-only contract call returning the decoded result"""
        pass

    @abstractmethod
    async def build_transaction(
        self,
        contract: ContractRef,
        fn_name: str,
        *args: Any,
        sender: str
    ) -> Dict[str, Any]:
        """Populate an unsigned transaction calling ``fn_name`` from ``sender``"""
        pass

    @abstractmethod
    async def send_raw_transaction(self, raw_transaction: bytes) -> PendingTransaction:
        """Submit a signed transaction"""
        pass

    @abstractmethod
    async def wait_for_receipt(self, pending: PendingTransaction) -> TransactionReceipt:
        """Block until the transaction is included and return its receipt"""
        pass

    @property
    def is_connected(self) -> bool:
        """Check if client is connected"""
        return self._is_connected


class Web3ChainClient(BaseChainClient):
    """Chain client backed by an AsyncWeb3 HTTP provider"""

    def __init__(
        self,
        rpc_url: str,
        chain_id: int,
        receipt_timeout: Optional[float] = None,
        poll_latency: float = 0.5
    ):
        super().__init__(chain_id)
        self.rpc_url = rpc_url
        self.receipt_timeout = receipt_timeout
        self.poll_latency = poll_latency
        self.w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))

    async def connect(self) -> None:
        """Check the RPC endpoint answers and serves the expected chain"""
        if self._is_connected:
            return
        try:
            connected = await self.w3.is_connected()
            remote_chain_id = await self.w3.eth.chain_id if connected else None
        except Exception as e:
            raise ChainConnectionError(f"Failed to connect to RPC: {e}", cause=e) from e
        if not connected:
            raise ChainConnectionError("Failed to connect to RPC")

        if remote_chain_id != self.chain_id:
            raise ChainConnectionError(
                f"RPC serves chain {remote_chain_id}, expected {self.chain_id}"
            )

        self._is_connected = True
        logger.info(f"Connected to chain {self.chain_id} via Web3")

    async def disconnect(self) -> None:
        if self._is_connected:
            await self.w3.provider.disconnect()
            self._is_connected = False
            logger.info(f"Disconnected from chain {self.chain_id}")

    def _contract(self, contract: ContractRef):
        return self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract.address),
            abi=contract.abi
        )

    async def call(self, contract: ContractRef, fn_name: str, *args: Any) -> Any:
        function = getattr(self._contract(contract).functions, fn_name)
        return await function(*args).call()

    async def build_transaction(
        self,
        contract: ContractRef,
        fn_name: str,
        *args: Any,
        sender: str
    ) -> Dict[str, Any]:
        sender = AsyncWeb3.to_checksum_address(sender)
        nonce = await self.w3.eth.get_transaction_count(sender, "pending")
        function = getattr(self._contract(contract).functions, fn_name)
        return await function(*args).build_transaction({
            "from": sender,
            "nonce": nonce,
            "chainId": self.chain_id,
        })

    async def send_raw_transaction(self, raw_transaction: bytes) -> PendingTransaction:
        tx_hash = await self.w3.eth.send_raw_transaction(raw_transaction)
        return PendingTransaction(tx_hash=normalize_tx_hash(tx_hash))

    async def wait_for_receipt(self, pending: PendingTransaction) -> TransactionReceipt:
        receipt = await self.w3.eth.wait_for_transaction_receipt(
            pending.tx_hash,
            timeout=self.receipt_timeout,
            poll_latency=self.poll_latency
        )
        return TransactionReceipt(
            tx_hash=normalize_tx_hash(receipt["transactionHash"]),
            status=receipt["status"] == 1,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )
