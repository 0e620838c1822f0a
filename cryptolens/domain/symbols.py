"""
Reference data for well-known coins and chains

Used by the intent resolver (ticker synonyms), the price providers
(CoinGecko ids, display names) and the synthetic generators (plausible
reference prices).
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class CoinInfo:
    symbol: str
    name: str
    coingecko_id: str
    reference_price: float
    market_cap: float
    aliases: Tuple[str, ...] = ()


# Lower-case aliases that double as English words ("dot", "link") are left
# out; those coins still match by upper-case ticker or cashtag
KNOWN_COINS: Dict[str, CoinInfo] = {
    coin.symbol: coin for coin in (
        CoinInfo("BTC", "Bitcoin", "bitcoin", 67234.56, 1.30e12, ("btc", "bitcoin")),
        CoinInfo("ETH", "Ethereum", "ethereum", 3567.89, 4.30e11, ("eth", "ethereum", "ether")),
        CoinInfo("SOL", "Solana", "solana", 178.45, 8.0e10, ("sol", "solana")),
        CoinInfo("USDT", "Tether", "tether", 1.00, 1.10e11, ("usdt", "tether")),
        CoinInfo("USDC", "USD Coin", "usd-coin", 1.00, 3.40e10, ("usdc", "usd coin")),
        CoinInfo("BNB", "Binance Coin", "binancecoin", 412.34, 6.0e10, ("bnb", "binance coin")),
        CoinInfo("XRP", "Ripple", "ripple", 0.63, 3.5e10, ("xrp", "ripple")),
        CoinInfo("ADA", "Cardano", "cardano", 0.52, 1.8e10, ("ada", "cardano")),
        CoinInfo("DOGE", "Dogecoin", "dogecoin", 0.085, 1.2e10, ("doge", "dogecoin")),
        CoinInfo("MATIC", "Polygon", "matic-network", 0.78, 7.2e9, ("matic", "polygon")),
        CoinInfo("AVAX", "Avalanche", "avalanche-2", 36.20, 1.4e10, ("avax",)),
        CoinInfo("DOT", "Polkadot", "polkadot", 7.10, 9.5e9, ("polkadot",)),
        CoinInfo("LINK", "Chainlink", "chainlink", 14.80, 8.7e9, ("chainlink",)),
        CoinInfo("UNI", "Uniswap", "uniswap", 7.90, 4.7e9, ("uni",)),
        CoinInfo("AAVE", "Aave", "aave", 92.40, 1.4e9, ("aave",)),
        CoinInfo("SHIB", "Shiba Inu", "shiba-inu", 0.000024, 1.4e10, ("shib", "shiba")),
        CoinInfo("PEPE", "Pepe", "pepe", 0.0000088, 3.7e9, ("pepe",)),
        CoinInfo("BONK", "Bonk", "bonk", 0.00002, 1.5e9, ("bonk",)),
        CoinInfo("WIF", "dogwifhat", "dogwifhat", 2.45, 2.4e9, ("wif", "dogwifhat")),
        CoinInfo("JUP", "Jupiter", "jupiter-exchange-solana", 0.95, 1.3e9, ("jup",)),
    )
}

# Chain names as DefiLlama spells them
KNOWN_CHAINS: Dict[str, str] = {
    "solana": "Solana",
    "ethereum": "Ethereum",
    "arbitrum": "Arbitrum",
    "polygon": "Polygon",
    "avalanche": "Avalanche",
    "bsc": "BSC",
    "optimism": "Optimism",
    "base": "Base",
    "tron": "Tron",
}

# Ticker extraction ignores these even when written as cashtags
NON_TICKER_WORDS = frozenset({"I", "A", "THE", "AND", "OR", "TO", "IS", "IT", "FOR", "USD", "TVL", "APY"})


def coin_for(symbol: str) -> Optional[CoinInfo]:
    return KNOWN_COINS.get(symbol.upper())


def display_name(symbol: str) -> str:
    coin = coin_for(symbol)
    return coin.name if coin else symbol.upper()


def canonical_chain(chain: Optional[str]) -> Optional[str]:
    if not chain:
        return None
    return KNOWN_CHAINS.get(chain.lower(), chain[:1].upper() + chain[1:])
