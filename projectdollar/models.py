# projectdollar/models.py
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class StateRecord(Base):
    """
    Namespaced JSON document holding the user's persisted state.

    The application keeps exactly one row (key = settings.state_key) whose
    payload looks like:

        {
            "preferences": {...},
            "balances": {"USD": "100.00", "EUR": "0.00"},
            "assets": [{"id": "...", "symbol": "AAPL", ...}]
        }

    Prices and exchange rates are never stored here; they live in their
    in-process caches.
    """
    __tablename__ = "app_state"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
