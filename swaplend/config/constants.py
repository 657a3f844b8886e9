"""
Constants and static workflow configuration
"""
from swaplend.core.data_models import TokenDescriptor, WorkflowConfig

SEPOLIA_CHAIN_ID = 11155111

# Uniswap V3 on Sepolia
POOL_FACTORY_ADDRESS = "0x0227628f3F023bb0B980b67D528571c95c6DaC1c"
SWAP_ROUTER_ADDRESS = "0x3bFA4769FB09eefC5a80d6E87c3B9C650f7Ae48E"  # SwapRouter02

# Aave V2 LendingPool
LENDING_POOL_ADDRESS = "0x7d2768dE32b0b80b7a3454c06BdAc94A69DDc7A9"

DEFAULT_FEE_TIER = 3000

SEPOLIA_EXPLORER_TX_URL = "https://sepolia.etherscan.io/tx/"

USDC = TokenDescriptor(
    chain_id=SEPOLIA_CHAIN_ID,
    address="0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
    decimals=6,
    symbol="USDC",
    name="USD//C",
)

LINK = TokenDescriptor(
    chain_id=SEPOLIA_CHAIN_ID,
    address="0x779877A7B0D9E8603169DdbD7836e478b4624789",
    decimals=18,
    symbol="LINK",
    name="Chainlink",
)

# Swap USDC for LINK, then deposit the LINK
DEFAULT_WORKFLOW = WorkflowConfig(
    chain_id=SEPOLIA_CHAIN_ID,
    factory_address=POOL_FACTORY_ADDRESS,
    router_address=SWAP_ROUTER_ADDRESS,
    lending_pool_address=LENDING_POOL_ADDRESS,
    token_in=USDC,
    token_out=LINK,
    fee_tier=DEFAULT_FEE_TIER,
    referral_code=0,
    explorer_tx_url=SEPOLIA_EXPLORER_TX_URL,
)
