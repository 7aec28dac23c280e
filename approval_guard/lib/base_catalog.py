"""
Bundled reference catalog for the Base network.

Known tokens and known spender contracts, tagged with category and a-priori
risk. Addresses are verified mainnet deployments on Base (chain id 8453).
"""

BASE_TOKENS = [
    # Stablecoins
    {
        "address": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        "symbol": "USDC",
        "name": "USD Coin",
        "decimals": 6,
        "category": "stablecoin",
        "is_native": True,
    },
    {
        "address": "0xd9aAEc86B65D86f6A7B5B1b0c42FFA531710b6CA",
        "symbol": "USDbC",
        "name": "USD Base Coin",
        "decimals": 6,
        "category": "bridged",
        "is_native": False,
    },
    {
        "address": "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb",
        "symbol": "DAI",
        "name": "Dai Stablecoin",
        "decimals": 18,
        "category": "stablecoin",
        "is_native": False,
    },
    {
        "address": "0x4621b7A9c75199271F773Ebd9A499dbd165c3191",
        "symbol": "DOLA",
        "name": "Dola USD Stablecoin",
        "decimals": 18,
        "category": "stablecoin",
        "is_native": False,
    },
    # Major assets
    {
        "address": "0x4200000000000000000000000000000000000006",
        "symbol": "WETH",
        "name": "Wrapped Ether",
        "decimals": 18,
        "category": "native",
        "is_native": True,
    },
    {
        "address": "0x2Ae3F1Ec7F1F5012CFEab0185bfc7aa3cf0DEc22",
        "symbol": "cbETH",
        "name": "Coinbase Wrapped Staked ETH",
        "decimals": 18,
        "category": "native",
        "is_native": True,
    },
    {
        "address": "0xcbB7C0000aB88B473b1f5aFd9ef808440eed33Bf",
        "symbol": "cbBTC",
        "name": "Coinbase Wrapped BTC",
        "decimals": 8,
        "category": "native",
        "is_native": True,
    },
    {
        "address": "0x236aa50979D5f3De3Bd1Eeb40E81137F22ab794b",
        "symbol": "tBTC",
        "name": "Threshold BTC",
        "decimals": 18,
        "category": "bridged",
        "is_native": False,
    },
    # DeFi tokens
    {
        "address": "0x940181a94A35A4569E4529A3CDfB74e38FD98631",
        "symbol": "AERO",
        "name": "Aerodrome Finance",
        "decimals": 18,
        "category": "defi",
        "is_native": True,
    },
    {
        "address": "0xA88594D404727625A9437C3f886C7643872296AE",
        "symbol": "WELL",
        "name": "Moonwell",
        "decimals": 18,
        "category": "defi",
        "is_native": True,
    },
    {
        "address": "0x78a087d713Be963Bf307b18F2Ff8122EF9A63ae9",
        "symbol": "BSWAP",
        "name": "BaseSwap Token",
        "decimals": 18,
        "category": "defi",
        "is_native": True,
    },
    {
        "address": "0x1C7a460413dD4e964f96D8dFC56CF7B4d9C42e02",
        "symbol": "SEAM",
        "name": "Seamless",
        "decimals": 18,
        "category": "defi",
        "is_native": True,
    },
    {
        "address": "0x9e1028F5F1D5eDE59748FFceE5532509976840E0",
        "symbol": "COMP",
        "name": "Compound",
        "decimals": 18,
        "category": "defi",
        "is_native": False,
    },
    {
        "address": "0xc3De830EA07524a0761646a6a4e4be0e114a3C83",
        "symbol": "UNI",
        "name": "Uniswap",
        "decimals": 18,
        "category": "defi",
        "is_native": False,
    },
    # Meme and community tokens
    {
        "address": "0x4ed4E862860beD51a9570B96d89aF5E1B0Efefed",
        "symbol": "DEGEN",
        "name": "Degen",
        "decimals": 18,
        "category": "social",
        "is_native": True,
    },
    {
        "address": "0x532f27101965dd16442E59d40670FaF5eBb142E4",
        "symbol": "BRETT",
        "name": "Brett",
        "decimals": 18,
        "category": "meme",
        "is_native": True,
    },
    {
        "address": "0x0578d8A44db98B23BF096A382e016e29a5Ce0ffe",
        "symbol": "HIGHER",
        "name": "Higher",
        "decimals": 18,
        "category": "social",
        "is_native": True,
    },
    {
        "address": "0xAC1Bd2486aAf3B5C0fc3Fd868558b082a531B2B4",
        "symbol": "TOSHI",
        "name": "Toshi",
        "decimals": 18,
        "category": "meme",
        "is_native": True,
    },
    # Gaming
    {
        "address": "0xfA980cEd6895AC314E7dE34Ef1bFAE90a5AdD21b",
        "symbol": "PRIME",
        "name": "Echelon Prime",
        "decimals": 18,
        "category": "other",
        "is_native": False,
    },
    {
        "address": "0x60a3E35Cc302bFA44Cb288Bc5a4F316Fdb1adb42",
        "symbol": "EURC",
        "name": "EURC",
        "decimals": 6,
        "category": "stablecoin",
        "is_native": True,
    },
]

BASE_SPENDERS = [
    # Uniswap
    {
        "address": "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",
        "name": "Uniswap Universal Router",
        "protocol": "Uniswap V3",
        "category": "dex",
        "risk": "low",
        "is_native": False,
        "website": "https://app.uniswap.org",
    },
    {
        "address": "0x2626664c2603336E57B271c5C0b26F421741e481",
        "name": "Uniswap SwapRouter02",
        "protocol": "Uniswap V3",
        "category": "dex",
        "risk": "low",
        "is_native": False,
        "website": "https://app.uniswap.org",
    },
    {
        "address": "0x000000000022D473030F116dDEE9F6B43aC78BA3",
        "name": "Uniswap Permit2",
        "protocol": "Uniswap",
        "category": "other",
        "risk": "medium",
        "is_native": False,
        "website": "https://app.uniswap.org",
    },
    # Aerodrome
    {
        "address": "0xcF77a3Ba9A5CA399B7c97c74d54e5b1Beb874E43",
        "name": "Aerodrome Router",
        "protocol": "Aerodrome Finance",
        "category": "dex",
        "risk": "low",
        "is_native": True,
        "website": "https://aerodrome.finance",
        "tvl": "$1.2B",
    },
    {
        "address": "0x16613524e02ad97eDfeF371bC883F2F5d6C480A5",
        "name": "Aerodrome Voter",
        "protocol": "Aerodrome Finance",
        "category": "farming",
        "risk": "low",
        "is_native": True,
        "website": "https://aerodrome.finance",
    },
    {
        "address": "0xeBf418Fe2512e7E6bd9b87a8F0f294aCDC67e6B4",
        "name": "Aerodrome veAERO",
        "protocol": "Aerodrome Finance",
        "category": "staking",
        "risk": "low",
        "is_native": True,
        "website": "https://aerodrome.finance",
    },
    # Aggregators
    {
        "address": "0x1111111254EEB25477B68fb85Ed929f73A960582",
        "name": "1inch Aggregation Router V5",
        "protocol": "1inch Network",
        "category": "aggregator",
        "risk": "medium",
        "is_native": False,
        "website": "https://1inch.io",
    },
    {
        "address": "0xDef1C0ded9bec7F1a1670819833240f027b25EfF",
        "name": "0x Exchange Proxy",
        "protocol": "0x Protocol",
        "category": "aggregator",
        "risk": "medium",
        "is_native": False,
        "website": "https://0x.org",
    },
    {
        "address": "0x6131B5fae19EA4f9D964eAc0408E4408b66337b5",
        "name": "KyberSwap Meta Aggregation Router",
        "protocol": "KyberSwap",
        "category": "aggregator",
        "risk": "medium",
        "is_native": False,
        "website": "https://kyberswap.com",
    },
    # Lending
    {
        "address": "0xb125E6687d4313864e53df431d5425969c15Eb2F",
        "name": "Compound V3 USDC",
        "protocol": "Compound Finance",
        "category": "lending",
        "risk": "low",
        "is_native": False,
        "website": "https://compound.finance",
    },
    {
        "address": "0x46e6b214b524310239732D51387075E0e70970bf",
        "name": "Compound V3 WETH",
        "protocol": "Compound Finance",
        "category": "lending",
        "risk": "low",
        "is_native": False,
        "website": "https://compound.finance",
    },
    {
        "address": "0x8F44Fd754285aa6A2b8B9B97739B79746e0475a7",
        "name": "Seamless Pool",
        "protocol": "Seamless",
        "category": "lending",
        "risk": "medium",
        "is_native": True,
        "website": "https://seamlessprotocol.com",
    },
    {
        "address": "0xfBb21d0380beE3312B33c4353c8936a0F13EF26C",
        "name": "Moonwell Comptroller",
        "protocol": "Moonwell",
        "category": "lending",
        "risk": "medium",
        "is_native": True,
        "website": "https://moonwell.fi",
    },
    # DEXs and AMMs
    {
        "address": "0x327Df1E6de05895d2ab08513aaDD9313Fe505d86",
        "name": "BaseSwap Router",
        "protocol": "BaseSwap",
        "category": "dex",
        "risk": "medium",
        "is_native": True,
        "website": "https://baseswap.fi",
    },
    {
        "address": "0x6BDED42c6DA8FBf0d2bA55B2fa120C5e0c8D7891",
        "name": "SushiSwap Router",
        "protocol": "SushiSwap",
        "category": "dex",
        "risk": "medium",
        "is_native": False,
        "website": "https://sushi.com",
    },
    # Bridges
    {
        "address": "0x49048044D57e1C92A77f79988d21Fa8fAF74E97e",
        "name": "Base Portal",
        "protocol": "Base Official Bridge",
        "category": "bridge",
        "risk": "low",
        "is_native": True,
        "website": "https://bridge.base.org",
    },
    {
        "address": "0x09aea4b2242abC8bb4BB78D537A67a245A7bEC64",
        "name": "Across Spoke Pool",
        "protocol": "Across Protocol",
        "category": "bridge",
        "risk": "medium",
        "is_native": False,
        "website": "https://across.to",
    },
    {
        "address": "0x45f1A95A4D3f3836523F5c83673c797f4d4d263B",
        "name": "Stargate Finance Router",
        "protocol": "Stargate Finance",
        "category": "bridge",
        "risk": "medium",
        "is_native": False,
        "website": "https://stargate.finance",
    },
    # Yield farming
    {
        "address": "0xBB505c54D71E9e599cB8435b4F0cEEc05fC71cbD",
        "name": "Extra Finance Lending",
        "protocol": "Extra Finance",
        "category": "farming",
        "risk": "high",
        "is_native": True,
        "website": "https://extrafi.io",
    },
    {
        "address": "0xeC3a7Ce3Bdc096DC6A0AEF76DB95A2aCe7C2cE0B",
        "name": "Beefy Finance Vault",
        "protocol": "Beefy Finance",
        "category": "farming",
        "risk": "medium",
        "is_native": False,
        "website": "https://beefy.finance",
    },
]
