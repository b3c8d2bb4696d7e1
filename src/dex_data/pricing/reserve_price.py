"""Token USD price derived from pool reserves.

Used as the computation callback of the token price loader when neither
the cache nor the token row carries a price. The token is priced
against the deepest pool it shares with a stablecoin:

    price = stable_reserve * 10**token_decimals // token_reserve

which is the stablecoin amount (in its smallest unit) for one whole
token, then scaled down by the stablecoin's decimals. Integer
arithmetic throughout so 18-decimal reserves do not lose precision.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from dex_data.infrastructure.observability import get_pricing_logger
from dex_data.storage.repositories import PonderDb

DEFAULT_DECIMALS = 18
MIN_PRICE = Decimal("0.000001")
MAX_PRICE = Decimal("1000000000")


def _as_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    return int(Decimal(str(value)))


def _decimals(token: dict[str, Any] | None) -> int:
    if token and token.get("decimals") is not None:
        return int(token["decimals"])
    return DEFAULT_DECIMALS


class ReservePriceCalculator:
    """Callable computing a token's USD price from stablecoin pools."""

    def __init__(self, db: PonderDb, stablecoin_symbols: Iterable[str] = ("USDT", "USDC")):
        self.db = db
        self.stablecoin_symbols = {s.upper() for s in stablecoin_symbols}
        self.log = get_pricing_logger("reserve-price")

    async def __call__(self, token_id: str) -> str | None:
        return await self.compute(token_id)

    async def compute(self, token_id: str) -> str | None:
        """Return the price as a decimal string, or None if it cannot be derived."""
        token = await self.db.token.find_first({"where": {"id": token_id}})
        if token is None:
            self.log.warning("token_not_found", token_id=token_id)
            return None

        address = token.get("address")
        pairs = await self.db.pair.find_many(
            {
                "where": {"OR": [{"token0Address": address}, {"token1Address": address}]},
                "include": {"token0": True, "token1": True},
            }
        )

        candidates = []
        for pair in pairs:
            is_token0 = (pair.get("token0Address") or "").lower() == (address or "").lower()
            stable = pair.get("token1") if is_token0 else pair.get("token0")
            if stable and str(stable.get("symbol", "")).upper() in self.stablecoin_symbols:
                candidates.append((pair, is_token0, stable))

        if not candidates:
            self.log.debug("no_stablecoin_pairs", token_id=token_id)
            return None

        pair, is_token0, stable = max(
            candidates,
            key=lambda c: _as_int(c[0].get("reserve0")) + _as_int(c[0].get("reserve1")),
        )

        token_reserve = _as_int(pair.get("reserve0") if is_token0 else pair.get("reserve1"))
        stable_reserve = _as_int(pair.get("reserve1") if is_token0 else pair.get("reserve0"))
        if token_reserve <= 0:
            self.log.warning("empty_token_reserve", token_id=token_id, pair=pair.get("address"))
            return None

        raw_price = stable_reserve * 10 ** _decimals(token) // token_reserve
        price = Decimal(raw_price).scaleb(-_decimals(stable))

        if not MIN_PRICE < price < MAX_PRICE:
            self.log.warning(
                "price_out_of_bounds",
                token_id=token_id,
                price=str(price),
                stablecoin=stable.get("symbol"),
            )
            return None

        self.log.debug("price_derived", token_id=token_id, price=str(price), pair=pair.get("address"))
        return format(price.normalize(), "f")
