"""Form state repository — SQLite key-value store of last-used form values.

Read when the form opens, written whenever a field changes.  Nothing in
the sizing engine depends on it.
"""

import json
from datetime import datetime, timezone

from lotcalc.repos.db import get_connection

DEFAULT_FORM_STATE: dict = {
    "selected_pair": "EUR/USD",
    "entry_price": 0,
    "stop_loss": 0,
    "account_capital": 1000,
    "risk_percentage": 1,
    "trade_type": "buy",
}


class FormStateRepo:
    """Data access layer for the ``form_state`` table.

    Args:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    # ── Read ─────────────────────────────────────────────────────────────

    def load(self) -> dict:
        """Return the defaults overlaid with every stored value."""
        state = dict(DEFAULT_FORM_STATE)
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute("SELECT key, value FROM form_state").fetchall()
        finally:
            conn.close()
        for row in rows:
            if row["key"] in state:
                state[row["key"]] = json.loads(row["value"])
        return state

    # ── Write ────────────────────────────────────────────────────────────

    def save(self, fields: dict) -> dict:
        """Upsert the known keys of *fields* and return the full state.

        Unknown keys are ignored.
        """
        now = datetime.now(timezone.utc).isoformat()
        rows = [
            (key, json.dumps(value), now)
            for key, value in fields.items()
            if key in DEFAULT_FORM_STATE
        ]
        conn = get_connection(self._db_path)
        try:
            conn.executemany(
                """
                INSERT INTO form_state (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                rows,
            )
            conn.commit()
        finally:
            conn.close()
        return self.load()

    def clear(self) -> None:
        """Forget every stored value."""
        conn = get_connection(self._db_path)
        try:
            conn.execute("DELETE FROM form_state")
            conn.commit()
        finally:
            conn.close()
