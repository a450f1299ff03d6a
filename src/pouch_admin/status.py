"""Key status derivation shared by every view that renders a key."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pouch_admin.models.key import Key

NEVER = "Never"


class DisplayState(str, Enum):
    EXPIRED = "Expired"
    CAPPED = "Capped"
    SIMULATION = "Simulation"
    ONLINE = "Online"


@dataclass(frozen=True)
class KeyStatus:
    is_expired: bool
    expires_text: str
    usage_percent: float
    is_depleted: bool
    is_mock: bool
    budget_limit: float


def get_key_status(key: Key, now: datetime | None = None) -> KeyStatus:
    """Derive expiry, depletion and simulation flags for ``key``.

    Args:
        key: Key as returned by the backend.
        now: Evaluation instant; defaults to the current time.

    Returns:
        KeyStatus. ``usage_percent`` is clamped to 100 and is 0 for keys
        without a budget limit.
    """
    now_ts = (now or datetime.now()).timestamp()

    is_expired = False
    expires_text = NEVER
    if key.expires_at is not None:
        expires_text = datetime.fromtimestamp(key.expires_at).strftime("%x")
        is_expired = key.expires_at < now_ts

    configuration = key.configuration
    budget_limit = configuration.effective_budget_limit
    usage = key.budget_usage
    if budget_limit > 0:
        usage_percent = min(100.0, usage / budget_limit * 100)
    else:
        usage_percent = 0.0

    return KeyStatus(
        is_expired=is_expired,
        expires_text=expires_text,
        usage_percent=usage_percent,
        is_depleted=budget_limit > 0 and usage >= budget_limit,
        is_mock=configuration.is_mock,
        budget_limit=budget_limit,
    )


def display_state(status: KeyStatus) -> DisplayState:
    """Single status label. Precedence: Expired > Capped > Simulation > Online."""
    if status.is_expired:
        return DisplayState.EXPIRED
    if status.is_depleted and not status.is_mock:
        return DisplayState.CAPPED
    if status.is_mock:
        return DisplayState.SIMULATION
    return DisplayState.ONLINE


@dataclass(frozen=True)
class DashboardSummary:
    total_keys: int
    active_keys: int
    total_budget: float
    total_usage: float


def summarize_keys(keys: Iterable[Key], now: datetime | None = None) -> DashboardSummary:
    """Totals shown above the key list."""
    total = active = 0
    total_budget = total_usage = 0.0
    for key in keys:
        status = get_key_status(key, now)
        total += 1
        if not status.is_expired:
            active += 1
        total_budget += status.budget_limit
        total_usage += key.budget_usage
    return DashboardSummary(
        total_keys=total,
        active_keys=active,
        total_budget=total_budget,
        total_usage=total_usage,
    )
