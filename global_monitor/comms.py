from __future__ import annotations

import random
from datetime import datetime

INITIALIZING = "Initializing data feeds..."
CONNECTED = "Data feeds connected"
REFRESHING = "Refreshing data..."

DEFAULT_COMMS_CHANCE = 0.02

OFFICIAL_COMMS: tuple[str, ...] = (
    "NORAD: routine airspace exercise concluded",
    "STATE: embassy travel advisory unchanged",
    "DOD: press briefing scheduled 1400 local",
    "TREASURY: markets statement pending",
    "NWS: no severe weather alerts for DC metro",
    "FAA: temporary flight restriction lifted",
    "CISA: advisory issued for critical infrastructure",
    "WHITE HOUSE: pool call time moved up",
)


def timestamped(message: str, at: datetime) -> str:
    return f"[{at.strftime('%H:%M:%S')}] {message}"


class CommsGenerator:
    """Occasionally produces a simulated official-communication notice.

    Each call to ``maybe_message`` draws once from ``rng``; roughly ``chance``
    of calls return a timestamped message, the rest return None.
    """

    def __init__(
        self,
        chance: float = DEFAULT_COMMS_CHANCE,
        rng: random.Random | None = None,
        messages: tuple[str, ...] = OFFICIAL_COMMS,
    ) -> None:
        if not 0.0 <= chance <= 1.0:
            raise ValueError("comms chance must be between 0 and 1")
        if not messages:
            raise ValueError("at least one comms message is required")
        self.chance = chance
        self._rng = rng or random.Random()
        self._messages = messages

    def maybe_message(self, at: datetime) -> str | None:
        if self._rng.random() >= self.chance:
            return None
        return timestamped(self._rng.choice(self._messages), at)
