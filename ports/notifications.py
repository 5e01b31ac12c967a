from __future__ import annotations

from typing import Any, Dict, Literal, Protocol


Channel = Literal["leads", "companies"]


class NotificationSink(Protocol):
    def send(self, channel: Channel, payload: Dict[str, Any]) -> None:
        """Deliver one batch payload; implementations log failures instead of raising."""
        ...
