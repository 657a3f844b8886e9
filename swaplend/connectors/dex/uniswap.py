"""
Uniswap V3 DEX connector implementation
Pool lookup, swap parameter construction and exact-input swaps
"""
import asyncio
import logging

from swaplend.core.account import WalletAccount
from swaplend.core.chain_client import BaseChainClient, ContractRef
from swaplend.core.data_models import (
    PoolHandle,
    PoolInfo,
    SwapRequest,
    TokenDescriptor,
    TransactionReceipt,
    WorkflowConfig,
)
from swaplend.core.exceptions import PoolNotFound, SwapFailed
from swaplend.utils.helpers import is_zero_address


logger = logging.getLogger(__name__)


def build_swap_request(
    config: WorkflowConfig,
    pool: PoolHandle,
    recipient: str,
    amount_in: int
) -> SwapRequest:
    """
    Assemble exact-input single-hop swap parameters

    The fee comes from the already resolved pool handle. The minimum output
    is zero, so the swap accepts whatever the pool pays at execution time;
    the caller carries the price risk. No price limit is set.
    """
    return SwapRequest(
        token_in=config.token_in.address,
        token_out=config.token_out.address,
        fee=pool.fee,
        recipient=recipient,
        amount_in=amount_in,
        amount_out_minimum=0,
        sqrt_price_limit_x96=0,
    )


class UniswapV3Connector:
    """Uniswap V3 DEX connector"""

    # Minimal ABIs for required functions
    FACTORY_ABI = [
        {
            "inputs": [
                {"internalType": "address", "name": "tokenA", "type": "address"},
                {"internalType": "address", "name": "tokenB", "type": "address"},
                {"internalType": "uint24", "name": "fee", "type": "uint24"}
            ],
            "name": "getPool",
            "outputs": [{"internalType": "address", "name": "pool", "type": "address"}],
            "stateMutability": "view",
            "type": "function"
        }
    ]

    POOL_ABI = [
        {
            "inputs": [],
            "name": "token0",
            "outputs": [{"internalType": "address", "name": "", "type": "address"}],
            "stateMutability": "view",
            "type": "function"
        },
        {
            "inputs": [],
            "name": "token1",
            "outputs": [{"internalType": "address", "name": "", "type": "address"}],
            "stateMutability": "view",
            "type": "function"
        },
        {
            "inputs": [],
            "name": "fee",
            "outputs": [{"internalType": "uint24", "name": "", "type": "uint24"}],
            "stateMutability": "view",
            "type": "function"
        }
    ]

    # SwapRouter02: ExactInputSingleParams has no deadline field
    SWAP_ROUTER_ABI = [
        {
            "inputs": [
                {
                    "components": [
                        {"internalType": "address", "name": "tokenIn", "type": "address"},
                        {"internalType": "address", "name": "tokenOut", "type": "address"},
                        {"internalType": "uint24", "name": "fee", "type": "uint24"},
                        {"internalType": "address", "name": "recipient", "type": "address"},
                        {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
                        {"internalType": "uint256", "name": "amountOutMinimum", "type": "uint256"},
                        {"internalType": "uint160", "name": "sqrtPriceLimitX96", "type": "uint160"}
                    ],
                    "internalType": "struct IV3SwapRouter.ExactInputSingleParams",
                    "name": "params",
                    "type": "tuple"
                }
            ],
            "name": "exactInputSingle",
            "outputs": [{"internalType": "uint256", "name": "amountOut", "type": "uint256"}],
            "stateMutability": "payable",
            "type": "function"
        }
    ]

    def __init__(self, client: BaseChainClient, config: WorkflowConfig):
        self.client = client
        self.config = config
        self.factory_contract = ContractRef(address=config.factory_address, abi=self.FACTORY_ABI)
        self.router_contract = ContractRef(address=config.router_address, abi=self.SWAP_ROUTER_ABI)

    async def resolve_pool(
        self,
        token_in: TokenDescriptor,
        token_out: TokenDescriptor,
        fee: int
    ) -> PoolInfo:
        """
        Find the pool for a token pair at one fee tier

        The factory canonicalizes the pair, so argument order does not
        matter. token0/token1 come back in the pool's own order, which need
        not match ``token_in``/``token_out``.

        Raises:
            PoolNotFound: factory has no pool at that fee tier, or a read failed
        """
        try:
            pool_address = await self.client.call(
                self.factory_contract, "getPool", token_in.address, token_out.address, fee
            )
        except Exception as e:
            logger.error(f"Error getting pool address: {str(e)}")
            raise PoolNotFound(
                f"Pool lookup failed for {token_in.symbol}/{token_out.symbol} at fee {fee}: {e}",
                cause=e
            ) from e

        if is_zero_address(pool_address):
            raise PoolNotFound(f"No pool for {token_in.symbol}/{token_out.symbol} at fee {fee}")

        pool_contract = ContractRef(address=pool_address, abi=self.POOL_ABI)
        try:
            token0, token1, pool_fee = await asyncio.gather(
                self.client.call(pool_contract, "token0"),
                self.client.call(pool_contract, "token1"),
                self.client.call(pool_contract, "fee"),
            )
        except Exception as e:
            raise PoolNotFound(f"Failed to read pool {pool_address}: {e}", cause=e) from e

        logger.info(f"Resolved pool {pool_address} (token0={token0}, token1={token1}, fee={pool_fee})")
        handle = PoolHandle(address=pool_address, token0=token0, token1=token1, fee=pool_fee)
        return PoolInfo(pool=handle, token0=token0, token1=token1, fee=pool_fee)

    def verify_pool(
        self,
        info: PoolInfo,
        token_in: TokenDescriptor,
        token_out: TokenDescriptor,
        fee: int
    ) -> PoolHandle:
        """Check the resolved pool trades exactly this pair at this fee tier"""
        if not info.pool.has_tokens(token_in.address, token_out.address):
            raise PoolNotFound(
                f"Pool {info.pool.address} holds {info.token0}/{info.token1}, "
                f"not {token_in.symbol}/{token_out.symbol}"
            )
        if info.fee != fee:
            raise PoolNotFound(f"Pool {info.pool.address} has fee {info.fee}, expected {fee}")
        return info.pool

    async def execute_swap(self, request: SwapRequest, account: WalletAccount) -> TransactionReceipt:
        """
        Submit exactInputSingle on the router and wait for inclusion

        Raises:
            SwapFailed: rejected submission or reverted swap
        """
        try:
            return await account.transact(
                self.router_contract,
                "exactInputSingle",
                request.as_contract_params(),
                label="Swap"
            )
        except Exception as e:
            logger.error(f"An error occurred during swap: {e}")
            raise SwapFailed(f"Swap failed: {e}", cause=e) from e
