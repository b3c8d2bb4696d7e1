"""Per-request loader set.

``create_loaders`` is called once per inbound request and hands the
resolvers a fresh set of DataLoaders; nothing in the returned object may
outlive the request.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from dex_data.config.state import ConfigState, get_config
from dex_data.infrastructure.cache.ports import ICacheClient
from dex_data.loaders.batch import NOT_FOUND, DataLoader
from dex_data.loaders.cache_through import CacheThroughBatch, ComputeFn
from dex_data.pricing import ReservePriceCalculator
from dex_data.shared.models.enums import CacheTier
from dex_data.storage.repositories import EntityAdapter, PonderDb

TOKEN_KEY = "token:{}"
PAIR_KEY = "pair:{}"
USER_STATS_KEY = "user:{}"
PAIR_RESERVE_KEY = "pair:{}:reserveUsd"
TOKEN_PRICE_KEY = "token:{}:priceUSD"


def _lower(key: Any) -> Any:
    return key.lower() if isinstance(key, str) else key


def _is_price(value: Any) -> bool:
    return value not in (None, "", "0", 0)


def _rows_by(adapter: EntityAdapter, field: str, normalize: Callable[[Any], Any] = lambda v: v):
    """Bulk fetch: {normalized field value: row} for one IN query."""

    async def fetch(keys: list[Any]) -> dict[Any, Any]:
        rows = await adapter.find_many({"where": {field: {"in": keys}}})
        found: dict[Any, Any] = {}
        for row in rows:
            found.setdefault(normalize(row.get(field)), row)
        return found

    return fetch


@dataclass
class Loaders:
    token_loader: DataLoader
    token_by_address_loader: DataLoader
    pair_loader: DataLoader
    pair_by_address_loader: DataLoader
    reserve_usd_loader: DataLoader
    token_price_loader: DataLoader
    user_stats_loader: DataLoader


def create_loaders(
    db: PonderDb,
    cache: ICacheClient | None = None,
    *,
    price_computer: ComputeFn | None = None,
    settings: ConfigState | None = None,
) -> Loaders:
    """Build the loaders for one request.

    Args:
        db: Adapter bundle (shared)
        cache: Distributed cache (shared); None disables the cache layer
        price_computer: Fallback for token prices; defaults to the
            reserve-derived calculator
        settings: Configuration; defaults to the process-wide config
    """
    settings = settings or get_config()
    loader_cfg = settings.loader
    ttl = loader_cfg.local_ttl_seconds

    def entity_loader(
        name: str,
        adapter: EntityAdapter,
        field: str,
        batch_size: int,
        by_address: bool,
        key_format: str | None = None,
        tier: CacheTier = CacheTier.STANDARD,
    ):
        """Rows by ``field``; with ``key_format`` rows go through the shared cache."""
        normalize = _lower if by_address else (lambda v: v)
        batch_fn = CacheThroughBatch(
            name,
            cache=cache if key_format else None,
            fetch=_rows_by(adapter, field, normalize),
            key_format=key_format or "{}",
            ttl=settings.redis.ttl_for(tier),
            default=NOT_FOUND,
            write_back=key_format is not None,
        )
        return DataLoader(
            batch_fn,
            name=name,
            max_batch_size=batch_size,
            cache_key_fn=normalize,
            ttl=ttl,
        )

    async def latest_reserves(pair_ids: list[Any]) -> dict[Any, Any]:
        snapshots = await db.pair_reserve_snapshot.latest_per_key("pairId", pair_ids)
        return {row["pairId"]: row.get("reserveUSD") for row in snapshots}

    async def stored_prices(token_ids: list[Any]) -> dict[Any, Any]:
        rows = await db.token.find_many(
            {"where": {"id": {"in": token_ids}}, "select": {"id": True, "priceUSD": True}}
        )
        return {row["id"]: row["priceUSD"] for row in rows if _is_price(row.get("priceUSD"))}

    compute = price_computer or ReservePriceCalculator(db, settings.query.stablecoin_symbols)

    reserve_batch = CacheThroughBatch(
        "reserve_usd_loader",
        cache=cache,
        fetch=latest_reserves,
        key_format=PAIR_RESERVE_KEY,
        ttl=settings.redis.ttl_for(CacheTier.STANDARD),
        default=loader_cfg.default_value,
        write_back=False,
        coerce=str,
    )
    price_batch = CacheThroughBatch(
        "token_price_loader",
        cache=cache,
        fetch=stored_prices,
        compute=compute,
        key_format=TOKEN_PRICE_KEY,
        ttl=settings.redis.ttl_for(CacheTier.VOLATILE),
        default=loader_cfg.default_value,
        write_back=True,
        coerce=str,
    )

    return Loaders(
        token_loader=entity_loader(
            "token_loader", db.token, "id", loader_cfg.token_batch_size, False, TOKEN_KEY
        ),
        token_by_address_loader=entity_loader(
            "token_by_address_loader", db.token, "address", loader_cfg.token_batch_size, True
        ),
        pair_loader=entity_loader(
            "pair_loader", db.pair, "id", loader_cfg.pair_batch_size, False, PAIR_KEY
        ),
        pair_by_address_loader=entity_loader(
            "pair_by_address_loader", db.pair, "address", loader_cfg.pair_batch_size, True
        ),
        reserve_usd_loader=DataLoader(
            reserve_batch,
            name="reserve_usd_loader",
            max_batch_size=loader_cfg.default_batch_size,
            ttl=ttl,
        ),
        token_price_loader=DataLoader(
            price_batch,
            name="token_price_loader",
            max_batch_size=loader_cfg.price_batch_size,
            ttl=ttl,
        ),
        user_stats_loader=entity_loader(
            "user_stats_loader",
            db.user_stat,
            "userAddress",
            loader_cfg.user_batch_size,
            True,
            USER_STATS_KEY,
            CacheTier.EXTENDED,
        ),
    )
