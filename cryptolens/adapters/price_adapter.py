"""
Price adapters - implement ProviderPort for spot prices and market listings

Spot prices (symbol-keyed): CoinGecko simple price, then CoinCap.
Market listings (top coins by market cap): CoinMarketCap, then CoinGecko.
"""

from typing import Any, Dict, List

from cryptolens.adapters.http_provider import HttpProvider, from_iso, to_float
from cryptolens.domain.models import FetchCriteria, PriceRecord, utc_now
from cryptolens.domain.symbols import KNOWN_COINS, display_name


class CoinGeckoPriceProvider(HttpProvider):
    """CoinGecko ``/simple/price`` for the requested tickers"""

    name = "coingecko"

    def _headers(self) -> Dict[str, str]:
        if self.config.coingecko_api_key:
            return {"x-cg-demo-api-key": self.config.coingecko_api_key}
        return {}

    def _fetch_records(self, criteria: FetchCriteria) -> List[PriceRecord]:
        ids = {
            KNOWN_COINS[symbol].coingecko_id: symbol
            for symbol in criteria.symbols
            if symbol in KNOWN_COINS
        }
        if not ids:
            return []

        payload = self._get_json(
            f"{self.config.coingecko_url}/simple/price",
            params={
                "ids": ",".join(ids),
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_market_cap": "true",
                "include_24hr_vol": "true",
            },
            headers=self._headers(),
        )

        records = []
        for coin_id, symbol in ids.items():
            quote = payload.get(coin_id)
            if not quote:
                continue
            records.append(PriceRecord(
                symbol=symbol,
                name=display_name(symbol),
                price=to_float(quote.get("usd"), None),
                change_24h_percent=to_float(quote.get("usd_24h_change")),
                market_cap=to_float(quote.get("usd_market_cap"), None),
                volume_24h=to_float(quote.get("usd_24h_vol"), None),
            ))
        return records


class CoinCapPriceProvider(HttpProvider):
    """CoinCap ``/assets``, filtered to the requested tickers"""

    name = "coincap"

    def _fetch_records(self, criteria: FetchCriteria) -> List[PriceRecord]:
        payload = self._get_json(f"{self.config.coincap_url}/assets", params={"limit": 50})
        wanted = set(criteria.symbols)

        records = []
        for asset in payload["data"]:
            symbol = str(asset.get("symbol", "")).upper()
            if wanted and symbol not in wanted:
                continue
            records.append(PriceRecord(
                symbol=symbol,
                name=asset.get("name") or symbol,
                price=to_float(asset.get("priceUsd"), None),
                change_24h_percent=to_float(asset.get("changePercent24Hr")),
                market_cap=to_float(asset.get("marketCapUsd"), None),
                volume_24h=to_float(asset.get("volumeUsd24Hr"), None),
                rank=int(asset["rank"]) if asset.get("rank") else None,
            ))
        return records


class CoinMarketCapListingsProvider(HttpProvider):
    """CoinMarketCap latest listings sorted by market cap"""

    name = "coinmarketcap"

    def _fetch_records(self, criteria: FetchCriteria) -> List[PriceRecord]:
        payload = self._get_json(
            f"{self.config.coinmarketcap_url}/cryptocurrency/listings/latest",
            params={
                "start": 1,
                "limit": criteria.limit,
                "convert": "USD",
                "sort": "market_cap",
                "sort_dir": "desc",
            },
            headers={"X-CMC_PRO_API_KEY": self.config.coinmarketcap_api_key or ""},
        )
        return [self._to_record(coin) for coin in payload["data"]]

    def _to_record(self, coin: Dict[str, Any]) -> PriceRecord:
        quote = coin["quote"]["USD"]
        return PriceRecord(
            symbol=coin["symbol"],
            name=coin.get("name") or coin["symbol"],
            price=to_float(quote.get("price"), None),
            change_24h_percent=to_float(quote.get("percent_change_24h")),
            market_cap=to_float(quote.get("market_cap"), None),
            volume_24h=to_float(quote.get("volume_24h"), None),
            rank=coin.get("cmc_rank"),
            last_updated=from_iso(quote.get("last_updated")) or utc_now(),
        )


class CoinGeckoMarketsProvider(CoinGeckoPriceProvider):
    """CoinGecko ``/coins/markets`` ordered by market cap"""

    name = "coingecko-markets"

    def _fetch_records(self, criteria: FetchCriteria) -> List[PriceRecord]:
        payload = self._get_json(
            f"{self.config.coingecko_url}/coins/markets",
            params={
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": criteria.limit,
                "page": 1,
                "sparkline": "false",
            },
            headers=self._headers(),
        )
        if not isinstance(payload, list):
            raise self._malformed("expected a list of markets")

        return [
            PriceRecord(
                symbol=str(coin["symbol"]).upper(),
                name=coin.get("name") or "",
                price=to_float(coin.get("current_price"), None),
                change_24h_percent=to_float(coin.get("price_change_percentage_24h")),
                market_cap=to_float(coin.get("market_cap"), None),
                volume_24h=to_float(coin.get("total_volume"), None),
                rank=coin.get("market_cap_rank"),
                last_updated=from_iso(coin.get("last_updated")) or utc_now(),
            )
            for coin in payload
        ]
