"""DuckDB quote log."""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

import duckdb

from ..models import Property, RatingResult


def _serialize_datetime(obj: Any) -> Any:
    """JSON serializer for datetime objects."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


class Storage:
    """
    DuckDB storage for rated quotes.
    """

    def __init__(self, db_path: Path | str = "hotel_rater.duckdb") -> None:
        self.db_path = Path(db_path)
        self._conn: duckdb.DuckDBPyConnection | None = None

    def _connect(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = duckdb.connect(str(self.db_path))
            self._init_schema()
        return self._conn

    def _init_schema(self) -> None:
        conn = self._conn
        conn.execute("""
            CREATE TABLE IF NOT EXISTS quotes (
                quote_id TEXT PRIMARY KEY,
                property_name TEXT,
                state TEXT,
                room_count INTEGER,
                profile TEXT,
                config_version TEXT,
                total_insurable_value BIGINT,
                property_premium BIGINT,
                general_liability_premium BIGINT,
                umbrella_premium BIGINT,
                flood_premium BIGINT,
                total_estimated_premium BIGINT,
                risk_grade TEXT,
                property_input JSON,
                full_result JSON,
                created_at TIMESTAMP
            )
        """)

    def save_quote(self, prop: Property, result: RatingResult) -> str:
        """Insert one quote and return its id."""
        conn = self._connect()
        quote_id = uuid.uuid4().hex[:12]
        conn.execute(
            """
            INSERT INTO quotes
            (quote_id, property_name, state, room_count, profile, config_version,
             total_insurable_value, property_premium, general_liability_premium,
             umbrella_premium, flood_premium, total_estimated_premium, risk_grade,
             property_input, full_result, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                quote_id,
                prop.property_name,
                result.state,
                result.room_count,
                result.profile,
                result.config_version,
                result.total_insurable_value,
                result.property_premium,
                result.general_liability_premium,
                result.umbrella_excess_premium,
                result.flood_premium,
                result.total_estimated_premium,
                result.risk_grade,
                json.dumps(prop.to_dict()),
                json.dumps(result.to_dict(), default=_serialize_datetime),
                datetime.utcnow(),
            ],
        )
        return quote_id

    def load_quotes(self, limit: int = 20) -> list[dict[str, Any]]:
        """Most recent quotes first."""
        conn = self._connect()
        rows = conn.execute(
            """
            SELECT quote_id, property_name, state, room_count, profile, config_version,
                   total_estimated_premium, risk_grade, full_result, created_at
            FROM quotes
            ORDER BY created_at DESC
            LIMIT ?
            """,
            [limit],
        ).fetchall()
        cols = ["quote_id", "property_name", "state", "room_count", "profile", "config_version",
                "total_estimated_premium", "risk_grade", "full_result", "created_at"]
        quotes = []
        for row in rows:
            d = dict(zip(cols, row))
            full = d.get("full_result")
            if isinstance(full, str):
                d["full_result"] = json.loads(full)
            quotes.append(d)
        return quotes

    def load_quote(self, quote_id: str) -> dict[str, Any] | None:
        """Stored property input and result for one quote, or None."""
        conn = self._connect()
        row = conn.execute(
            "SELECT property_input, full_result FROM quotes WHERE quote_id = ?",
            [quote_id],
        ).fetchone()
        if row is None:
            return None
        prop, full = row
        return {
            "quote_id": quote_id,
            "property": json.loads(prop) if isinstance(prop, str) else prop,
            "rating": json.loads(full) if isinstance(full, str) else full,
        }

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
