"""
pump.fun adapter - implements ProviderPort for token launches

pump.fun exposes the same coin listing under several hosts; each host is a
separate provider so the fallback chain can try them in turn.
"""

from typing import Any, Dict, List
from urllib.parse import urlparse

from cryptolens.adapters.http_provider import HttpProvider, from_epoch, to_float, to_int
from cryptolens.config import ProviderConfig
from cryptolens.domain.models import FetchCriteria, TokenRecord


class PumpFunProvider(HttpProvider):
    """
    One pump.fun coin-listing endpoint

    Returns the newest coins first; threshold and window filtering happen
    in the chain refinement step.
    """

    PAGE_SIZE = 100

    def __init__(self, config: ProviderConfig, endpoint: str):
        """
        Args:
            config: provider configuration (API key, timeout)
            endpoint: full URL of the coins listing
        """
        super().__init__(config)
        self.endpoint = endpoint
        self.name = f"pump.fun ({urlparse(endpoint).netloc})"

    def _fetch_records(self, criteria: FetchCriteria) -> List[TokenRecord]:
        headers = {}
        if self.config.pump_fun_api_key:
            headers["Authorization"] = f"Bearer {self.config.pump_fun_api_key}"

        params = {
            "offset": 0,
            "limit": max(criteria.limit, self.PAGE_SIZE),
            "sort": "created_timestamp",
            "order": "DESC",
            "includeNsfw": "false",
        }
        payload = self._get_json(self.endpoint, params=params, headers=headers)

        if isinstance(payload, list):
            coins = payload
        elif isinstance(payload, dict) and isinstance(payload.get("coins"), list):
            coins = payload["coins"]
        else:
            raise self._malformed("expected a list of coins")

        return [self._to_record(coin) for coin in coins]

    def _to_record(self, coin: Dict[str, Any]) -> TokenRecord:
        market_cap = to_float(coin.get("usd_market_cap")) or to_float(coin.get("market_cap"))
        total_supply = to_float(coin.get("total_supply"))
        price = market_cap / total_supply if total_supply else 0.0

        return TokenRecord(
            id=str(coin["mint"]),
            name=coin.get("name") or "",
            symbol=coin.get("symbol") or "",
            platform="pumpfun",
            launch_time=from_epoch(coin["created_timestamp"]),
            market_cap=market_cap,
            price_usd=price,
            volume_24h=to_float(coin.get("volume_24h")),
            holders=to_int(coin.get("holder_count")),
            creator=coin.get("creator"),
            description=coin.get("description"),
        )
