"""
Test fixtures package for the data access layer.

Provides an sqlite-backed store that speaks the same execute() contract
as the asyncpg adapter, a recording store for statement assertions, and
a small seeded indexer schema.
"""

import re
import sqlite3
from typing import Any

PLACEHOLDER = re.compile(r"\$(\d+)")

# Raw reserves: 18-decimal KOI against 6-decimal stablecoins
KOI_USDT_RESERVES = (str(1000 * 10**18), str(2500 * 10**6))  # 2.5 USDT per KOI
KOI_USDC_RESERVES = (str(10 * 10**18), str(30 * 10**6))  # shallower, 3.0

SCHEMA = """
CREATE TABLE token (
    id TEXT PRIMARY KEY,
    address TEXT NOT NULL,
    symbol TEXT,
    name TEXT,
    decimals INTEGER,
    price_usd TEXT,
    volume_usd_24h TEXT
);
CREATE TABLE pair (
    id TEXT PRIMARY KEY,
    address TEXT NOT NULL,
    token0_address TEXT,
    token1_address TEXT,
    reserve0 TEXT,
    reserve1 TEXT,
    reserve_usd TEXT
);
CREATE TABLE swap (
    id TEXT PRIMARY KEY,
    pair_address TEXT,
    amount0_in TEXT,
    timestamp INTEGER
);
CREATE TABLE liquidity_position (
    id TEXT PRIMARY KEY,
    pair_id TEXT,
    user_address TEXT,
    liquidity_tokens TEXT
);
CREATE TABLE protocol_metric (
    id TEXT PRIMARY KEY,
    total_value_locked_usd TEXT,
    timestamp INTEGER
);
CREATE TABLE user_stat (
    id TEXT PRIMARY KEY,
    user_address TEXT NOT NULL,
    total_swaps INTEGER,
    total_volume_usd TEXT,
    last_seen INTEGER
);
"""

TOKENS = [
    ("t1", "0xa1", "USDT", "Tether USD", 6, "1", "1200000"),
    ("t2", "0xa2", "USDC", "USD Coin", 6, "1", "800000"),
    ("t3", "0xa3", "DAI", "Dai Stablecoin", 18, "1", None),
    ("t4", "0xa4", "KOI", "Koi Token", 18, None, "5000"),
]

# token0 addresses are stored upper-cased to exercise case-insensitive matching
PAIRS = [
    ("p1", "0xb1", "0xA4", "0xa1", *KOI_USDT_RESERVES, "5000"),
    ("p2", "0xb2", "0xA4", "0xa2", *KOI_USDC_RESERVES, "60"),
    ("p3", "0xb3", "0xA3", "0xa1", str(50 * 10**18), str(50 * 10**6), "100"),
]

SWAPS = [
    ("s1", "0xb1", "100", 1700000000),
    ("s2", "0xB2", "200", 1700000100),
    ("s3", None, "300", 1700000200),
    ("s4", "0xb1", "400", 1700000300),
]

POSITIONS = [
    ("lp1", "p1", "0xc1", "10"),
    ("lp2", "p3", "0xc1", "20"),
    ("lp3", None, "0xc2", "30"),
]

METRICS = [
    ("m1", "1000", 1700000000),
    ("m2", "2000", 1700003600),
    ("m3", "1500", 1700001800),
]

USER_STATS = [
    ("u1", "0xc1", 12, "3400", 1700000300),
    ("u2", "0xc2", 1, "15", 1700000100),
]


def to_sqlite(statement: str) -> str:
    """Rewrite PostgreSQL $n placeholders to sqlite ?n."""
    return PLACEHOLDER.sub(r"?\1", statement)


class SqliteStore:
    """In-memory sqlite implementing IDatabaseAdapter.execute()."""

    def __init__(self, seed: bool = True):
        self.conn = sqlite3.connect(":memory:")
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(SCHEMA)
        self.statements: list[tuple[str, list[Any]]] = []
        if seed:
            self.seed()

    def seed(self) -> None:
        self.conn.executemany("INSERT INTO token VALUES (?, ?, ?, ?, ?, ?, ?)", TOKENS)
        self.conn.executemany("INSERT INTO pair VALUES (?, ?, ?, ?, ?, ?, ?)", PAIRS)
        self.conn.executemany("INSERT INTO swap VALUES (?, ?, ?, ?)", SWAPS)
        self.conn.executemany("INSERT INTO liquidity_position VALUES (?, ?, ?, ?)", POSITIONS)
        self.conn.executemany("INSERT INTO protocol_metric VALUES (?, ?, ?)", METRICS)
        self.conn.executemany("INSERT INTO user_stat VALUES (?, ?, ?, ?, ?)", USER_STATS)
        self.conn.commit()

    async def execute(self, statement: str, params: list[Any] | None = None) -> list[dict]:
        params = list(params or [])
        self.statements.append((statement, params))
        cursor = self.conn.execute(to_sqlite(statement), params)
        return [dict(row) for row in cursor.fetchall()]

    def count_for(self, table: str) -> int:
        return sum(1 for statement, _ in self.statements if f"FROM {table}" in statement)

    async def disconnect(self) -> None:
        self.conn.close()


class RecordingStore:
    """Store fake returning canned rows and recording every statement."""

    def __init__(self, rows: list[dict] | None = None):
        self.rows = rows or []
        self.statements: list[tuple[str, list[Any]]] = []

    async def execute(self, statement: str, params: list[Any] | None = None) -> list[dict]:
        self.statements.append((statement, list(params or [])))
        return [dict(row) for row in self.rows]

    @property
    def last(self) -> tuple[str, list[Any]]:
        return self.statements[-1]
