"""Data models for provider outage status."""

from dataclasses import dataclass
from typing import Optional, Any

from pydantic import BaseModel, ConfigDict, field_validator


class HouseOutage(BaseModel):
    """Outage slot reported by DTEK for a single house number."""

    model_config = ConfigDict(extra="ignore")

    sub_type: str = ""
    start_date: str = ""
    end_date: str = ""
    type: str = ""

    @field_validator("sub_type", "start_date", "end_date", "type", mode="before")
    @classmethod
    def coerce_blank(cls, v: Any) -> str:
        """Treat null as an empty slot and strip whitespace."""
        if v is None:
            return ""
        return str(v).strip()

    @property
    def has_outage(self) -> bool:
        """Check if any outage field is filled in."""
        return any((self.sub_type, self.start_date, self.end_date, self.type))


@dataclass(frozen=True)
class OutageState:
    """Outage status for the configured address, recomputed every cycle."""

    active: bool
    reason: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    observed_at: Optional[str] = None

    @classmethod
    def inactive(cls, observed_at: Optional[str] = None) -> "OutageState":
        return cls(active=False, observed_at=observed_at)
