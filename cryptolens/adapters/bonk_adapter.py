"""
Bonk ecosystem adapters - implement ProviderPort for Bonk tokens

Three sources in decreasing order of specificity: the Bonk ecosystem API,
DexScreener pair search, and a Jupiter price quote for BONK itself.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from cryptolens.adapters.http_provider import HttpProvider, from_epoch, to_float, to_int
from cryptolens.domain.models import FetchCriteria, TokenRecord, utc_now


BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
BONK_CIRCULATING_SUPPLY = 69_000_000_000_000
BONK_LAUNCH = datetime(2022, 12, 25, tzinfo=timezone.utc)


class BonkApiProvider(HttpProvider):
    """Official Bonk ecosystem token listing"""

    name = "bonk-api"

    def _fetch_records(self, criteria: FetchCriteria) -> List[TokenRecord]:
        headers = {}
        if self.config.bonk_api_key:
            headers["Authorization"] = f"Bearer {self.config.bonk_api_key}"

        payload = self._get_json(
            f"{self.config.bonk_api_url}/tokens",
            params={"limit": criteria.limit, "ecosystem": "bonk"},
            headers=headers,
        )
        tokens = payload.get("tokens") if isinstance(payload, dict) else payload
        if not isinstance(tokens, list):
            raise self._malformed("expected a list of tokens")

        return [
            TokenRecord(
                id=str(token["mint"]),
                name=token.get("name") or "",
                symbol=token.get("symbol") or "",
                platform="bonk",
                launch_time=from_epoch(token["created_timestamp"]),
                market_cap=to_float(token.get("market_cap")),
                price_usd=to_float(token.get("price_usd")),
                volume_24h=to_float(token.get("volume_24h")),
                holders=to_int(token.get("holders")),
                creator=token.get("creator"),
                description=token.get("description"),
            )
            for token in tokens
        ]


class DexScreenerBonkProvider(HttpProvider):
    """Solana pairs matching 'bonk' on DexScreener"""

    name = "dexscreener"

    def _fetch_records(self, criteria: FetchCriteria) -> List[TokenRecord]:
        payload = self._get_json(
            f"{self.config.dexscreener_url}/search",
            params={"q": "bonk solana"},
        )
        pairs = payload.get("pairs") or []

        records = []
        for pair in pairs:
            base = pair.get("baseToken")
            if not base or pair.get("chainId") != "solana":
                continue
            records.append(self._to_record(pair, base))
        return records

    def _to_record(self, pair: Dict[str, Any], base: Dict[str, Any]) -> TokenRecord:
        created = from_epoch(pair.get("pairCreatedAt")) or utc_now()
        return TokenRecord(
            id=str(base["address"]),
            name=base.get("name") or "",
            symbol=base.get("symbol") or "",
            platform="bonk",
            launch_time=created,
            market_cap=to_float(pair.get("marketCap")) or to_float(pair.get("fdv")),
            price_usd=to_float(pair.get("priceUsd")),
            volume_24h=to_float((pair.get("volume") or {}).get("h24")),
            creator=pair.get("dexId"),
            description=f"{base.get('name')} - Bonk ecosystem token",
        )


class JupiterBonkProvider(HttpProvider):
    """BONK itself, priced by Jupiter"""

    name = "jupiter"

    def _fetch_records(self, criteria: FetchCriteria) -> List[TokenRecord]:
        payload = self._get_json(f"{self.config.jupiter_url}/price", params={"ids": BONK_MINT})
        quote = (payload.get("data") or {}).get(BONK_MINT)
        if not quote:
            return []

        price = to_float(quote.get("price"))
        return [
            TokenRecord(
                id=BONK_MINT,
                name="Bonk",
                symbol="BONK",
                platform="bonk",
                launch_time=BONK_LAUNCH,
                market_cap=price * BONK_CIRCULATING_SUPPLY,
                price_usd=price,
                description="The first Solana dog coin for the people, by the people.",
            )
        ]
