"""NotificationSender protocol — services depend on this, not the concrete provider."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class NotificationSender(Protocol):
    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        to_name: Optional[str] = None,
    ) -> DeliveryResult: ...
