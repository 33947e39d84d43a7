import sqlite3
import logging
from datetime import date, datetime
from typing import List, Optional, Union
from pathlib import Path

from config.settings import DATABASE_PATH, ALLOCATION_CONFIG
from core.exceptions import PersistenceError
from data.interfaces import PricePoint, PriceSeries
from allocation.models import AllocationDecision, BudgetState, Holding, StrategyTag

logger = logging.getLogger("core.data.database")

MEMORY = ":memory:"

class Database:
    """
    SQLite Database Manager.
    Implements the holdings, allocation log, budget and price cache stores
    on one connection. Every failed statement is raised as PersistenceError.
    """

    def __init__(self, db_path: Union[Path, str] = DATABASE_PATH,
                 default_budget: float = ALLOCATION_CONFIG["DEFAULT_BUDGET"],
                 first_batch_id: int = ALLOCATION_CONFIG["FIRST_BATCH_ID"]):
        self.db_path = db_path
        self.default_budget = default_budget
        self.first_batch_id = first_batch_id

        if str(db_path) != MEMORY:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self.conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open database at {self.db_path}: {e}") from e
        self.conn.row_factory = sqlite3.Row # Return dict-like rows by default

        self._init_schema()
        logger.info(f"Database connected at {self.db_path}")

    def close(self):
        """Explicitly close the connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("Database connection closed.")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _init_schema(self):
        """Initialize the database schema if it doesn't exist."""
        try:
            cursor = self.conn.cursor()

            # 1. Portfolio
            cursor.execute('''
            CREATE TABLE IF NOT EXISTS holdings (
                ticker TEXT PRIMARY KEY,
                name TEXT NOT NULL DEFAULT '',
                quantity REAL NOT NULL DEFAULT 0,
                average_cost REAL NOT NULL DEFAULT 0,
                current_price REAL NOT NULL DEFAULT 0,
                sma200 REAL NOT NULL DEFAULT 0,
                ema_trend REAL NOT NULL DEFAULT 0,
                recommendation TEXT NOT NULL DEFAULT '',
                updated_at DATETIME
            )
            ''')

            # 2. Allocation log, one logical collection per strategy
            cursor.execute('''
            CREATE TABLE IF NOT EXISTS allocation_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                strategy TEXT NOT NULL,
                batch_id INTEGER NOT NULL,
                ticker TEXT NOT NULL,
                name TEXT NOT NULL DEFAULT '',
                invested_amount REAL NOT NULL,
                price_per_share REAL NOT NULL,
                quantity_delta REAL NOT NULL,
                timestamp DATETIME NOT NULL
            )
            ''')

            # 3. Budget (single row)
            cursor.execute('''
            CREATE TABLE IF NOT EXISTS budget (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                amount REAL NOT NULL,
                next_batch_id INTEGER NOT NULL
            )
            ''')

            # 4. Daily close cache
            cursor.execute('''
            CREATE TABLE IF NOT EXISTS price_history (
                ticker TEXT NOT NULL,
                date DATE NOT NULL,
                close REAL NOT NULL,
                fetched_on DATE NOT NULL,
                PRIMARY KEY (ticker, date)
            )
            ''')

            cursor.execute('CREATE INDEX IF NOT EXISTS idx_logs_strategy ON allocation_logs (strategy, batch_id, timestamp)')

            self.conn.commit()
            logger.debug("Database schema and indices initialized.")

        except sqlite3.Error as e:
            logger.error(f"Failed to init schema: {e}")
            raise PersistenceError(f"Failed to init schema: {e}") from e

    def _write(self, sql: str, params=(), what: str = "write") -> sqlite3.Cursor:
        try:
            cursor = self.conn.execute(sql, params)
            self.conn.commit()
            return cursor
        except sqlite3.Error as e:
            self.conn.rollback()
            raise PersistenceError(f"Failed to {what}: {e}") from e

    def _read(self, sql: str, params=(), what: str = "read") -> List[sqlite3.Row]:
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to {what}: {e}") from e

    # ------------------------------------------------------------------
    # Holdings store
    # ------------------------------------------------------------------

    def load_holdings(self) -> List[Holding]:
        rows = self._read('''
            SELECT ticker, name, quantity, average_cost, current_price, sma200, ema_trend, recommendation
            FROM holdings ORDER BY ticker ASC
        ''', what="load holdings")
        return [Holding(**dict(row)) for row in rows]

    def get_holding(self, ticker: str) -> Optional[Holding]:
        rows = self._read('''
            SELECT ticker, name, quantity, average_cost, current_price, sma200, ema_trend, recommendation
            FROM holdings WHERE ticker = ?
        ''', (ticker,), what=f"load holding {ticker}")
        return Holding(**dict(rows[0])) if rows else None

    def save_holding(self, holding: Holding):
        """Insert or replace a holding keyed by ticker."""
        self._write('''
            INSERT OR REPLACE INTO holdings
            (ticker, name, quantity, average_cost, current_price, sma200, ema_trend, recommendation, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            holding.ticker, holding.name, holding.quantity, holding.average_cost,
            holding.current_price, holding.sma200, holding.ema_trend, holding.recommendation,
            datetime.now().isoformat(),
        ), what=f"save holding {holding.ticker}")

    def delete_holding(self, ticker: str) -> bool:
        cursor = self._write('DELETE FROM holdings WHERE ticker = ?', (ticker,), what=f"delete holding {ticker}")
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Allocation log store
    # ------------------------------------------------------------------

    def append_decision(self, decision: AllocationDecision) -> int:
        cursor = self._write('''
            INSERT INTO allocation_logs
            (strategy, batch_id, ticker, name, invested_amount, price_per_share, quantity_delta, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            decision.strategy.value, decision.batch_id, decision.ticker, decision.name,
            decision.invested_amount, decision.price_per_share, decision.quantity_delta,
            decision.timestamp.isoformat(),
        ), what=f"log {decision.strategy.value} decision for {decision.ticker}")
        return cursor.lastrowid

    def list_decisions(self, tag: StrategyTag) -> List[AllocationDecision]:
        """All entries of one strategy, ordered by batch then timestamp."""
        rows = self._read('''
            SELECT id, strategy, batch_id, ticker, name, invested_amount, price_per_share, quantity_delta, timestamp
            FROM allocation_logs
            WHERE strategy = ?
            ORDER BY batch_id ASC, timestamp ASC, id ASC
        ''', (tag.value,), what=f"list {tag.value} decisions")
        return [self._row_to_decision(r) for r in rows]

    def delete_decision(self, log_id: int) -> bool:
        cursor = self._write('DELETE FROM allocation_logs WHERE id = ?', (log_id,), what=f"delete log {log_id}")
        return cursor.rowcount > 0

    def delete_batch(self, batch_id: int, tag: Optional[StrategyTag] = None) -> int:
        """Delete one batch from every collection, or only from ``tag``. Returns rows removed."""
        if tag is None:
            cursor = self._write('DELETE FROM allocation_logs WHERE batch_id = ?', (batch_id,),
                                 what=f"delete batch {batch_id}")
        else:
            cursor = self._write('DELETE FROM allocation_logs WHERE batch_id = ? AND strategy = ?',
                                 (batch_id, tag.value), what=f"delete batch {batch_id} ({tag.value})")
        logger.info(f"Deleted {cursor.rowcount} log entries of batch {batch_id}")
        return cursor.rowcount

    @staticmethod
    def _row_to_decision(row: sqlite3.Row) -> AllocationDecision:
        return AllocationDecision(
            ticker=row["ticker"],
            name=row["name"],
            batch_id=row["batch_id"],
            invested_amount=row["invested_amount"],
            price_per_share=row["price_per_share"],
            quantity_delta=row["quantity_delta"],
            strategy=StrategyTag(row["strategy"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            log_id=row["id"],
        )

    # ------------------------------------------------------------------
    # Budget store
    # ------------------------------------------------------------------

    def load_budget(self) -> BudgetState:
        """Current budget; the default row is created on first access."""
        rows = self._read('SELECT amount, next_batch_id FROM budget WHERE id = 1', what="load budget")
        if rows:
            return BudgetState(amount=rows[0]["amount"], next_batch_id=rows[0]["next_batch_id"])

        state = BudgetState(amount=self.default_budget, next_batch_id=self.first_batch_id)
        self.save_budget(state)
        logger.info(f"Budget initialized to {state.amount:.2f} (batch {state.next_batch_id})")
        return state

    def save_budget(self, state: BudgetState):
        self._write('''
            INSERT OR REPLACE INTO budget (id, amount, next_batch_id) VALUES (1, ?, ?)
        ''', (state.amount, state.next_batch_id), what="save budget")

    # ------------------------------------------------------------------
    # Price cache
    # ------------------------------------------------------------------

    def save_series(self, series: PriceSeries, fetched_on: Optional[date] = None):
        """Replace the cached closes of a ticker."""
        fetched_on = (fetched_on or date.today()).isoformat()
        data = [(series.ticker, p.date.isoformat(), p.close, fetched_on) for p in series.points]
        try:
            self.conn.execute('DELETE FROM price_history WHERE ticker = ?', (series.ticker,))
            self.conn.executemany('''
                INSERT INTO price_history (ticker, date, close, fetched_on) VALUES (?, ?, ?, ?)
            ''', data)
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise PersistenceError(f"Failed to cache prices for {series.ticker}: {e}") from e
        logger.debug(f"Cached {len(data)} closes for {series.ticker}")

    def load_series(self, ticker: str) -> Optional[PriceSeries]:
        """Cached closes, newest first, or None when nothing is cached."""
        rows = self._read('''
            SELECT date, close FROM price_history WHERE ticker = ? ORDER BY date DESC
        ''', (ticker,), what=f"load cached prices for {ticker}")
        if not rows:
            return None
        try:
            points = tuple(PricePoint(date=date.fromisoformat(r["date"]), close=r["close"]) for r in rows)
            return PriceSeries(ticker=ticker, points=points)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Corrupt cached prices for {ticker}: {e}") from e

    def series_fetched_on(self, ticker: str) -> Optional[date]:
        rows = self._read('SELECT MAX(fetched_on) AS fetched_on FROM price_history WHERE ticker = ?',
                          (ticker,), what=f"read cache date for {ticker}")
        if not rows or rows[0]["fetched_on"] is None:
            return None
        return date.fromisoformat(rows[0]["fetched_on"])
