"""
DefiLlama adapters - implement ProviderPort for protocol TVL and yields
"""

from typing import List

from cryptolens.adapters.http_provider import HttpProvider, to_float
from cryptolens.domain.models import FetchCriteria, ProtocolRecord, YieldPoolRecord


class DefiLlamaProtocolsProvider(HttpProvider):
    """All protocols tracked by DefiLlama with their current TVL"""

    name = "defillama"

    def _fetch_records(self, criteria: FetchCriteria) -> List[ProtocolRecord]:
        payload = self._get_json(f"{self.config.defillama_url}/protocols")
        if not isinstance(payload, list):
            raise self._malformed("expected a list of protocols")

        return [
            ProtocolRecord(
                id=str(protocol.get("slug") or protocol["id"]),
                name=protocol.get("name") or "",
                symbol=protocol.get("symbol") or "-",
                tvl=to_float(protocol.get("tvl")),
                category=protocol.get("category") or "",
                chains=tuple(protocol.get("chains") or ()),
                change_1d=to_float(protocol.get("change_1d"), None),
                change_7d=to_float(protocol.get("change_7d"), None),
                url=protocol.get("url"),
            )
            for protocol in payload
        ]


class DefiLlamaYieldsProvider(HttpProvider):
    """Yield pools from the DefiLlama yields service"""

    name = "defillama-yields"

    def _fetch_records(self, criteria: FetchCriteria) -> List[YieldPoolRecord]:
        payload = self._get_json(f"{self.config.defillama_yields_url}/pools")
        pools = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(pools, list):
            raise self._malformed("expected a 'data' list of pools")

        return [
            YieldPoolRecord(
                pool=str(pool["pool"]),
                name=pool.get("project") or "",
                symbol=pool.get("symbol") or "",
                chain=pool.get("chain") or "",
                apy=to_float(pool.get("apy")),
                tvl_usd=to_float(pool.get("tvlUsd")),
                apy_base=to_float(pool.get("apyBase"), None),
                apy_reward=to_float(pool.get("apyReward"), None),
                stablecoin=bool(pool.get("stablecoin")),
            )
            for pool in pools
        ]
