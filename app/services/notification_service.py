"""
LINE push notifications for finalized matches
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

AREA_LABELS = {
    "shibuya": "Shibuya",
    "ebisu": "Ebisu",
    "roppongi": "Roppongi",
    "ginza": "Ginza",
    "shinjuku": "Shinjuku",
}


@dataclass
class MatchNotification:
    """Everything one table's members are told about their dinner."""

    event_date: datetime
    area: str
    restaurant_name: str
    restaurant_url: Optional[str] = None
    reservation_name: Optional[str] = None
    member_names: List[str] = field(default_factory=list)
    # LINE ids of the participant users at the table; None when not linked
    recipients: List[Optional[str]] = field(default_factory=list)


@dataclass
class CancellationNotice:
    """Tells the remaining sign-ups of a canceled event that it is off."""

    event_date: datetime
    area: str
    recipients: List[Optional[str]] = field(default_factory=list)


@dataclass
class NotificationResult:
    sent: int = 0
    failed: int = 0
    skipped: int = 0


class LineNotifier:
    """Pushes match results to members through the LINE Messaging API."""

    PUSH_ENDPOINT = "/v2/bot/message/push"

    def __init__(
        self,
        channel_access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token = channel_access_token if channel_access_token is not None else settings.LINE_CHANNEL_ACCESS_TOKEN
        self._base_url = (base_url or settings.LINE_API_BASE_URL).rstrip("/")
        self._timeout = timeout or settings.LINE_TIMEOUT_SECONDS
        self._transport = transport

    @staticmethod
    def build_message(notification: MatchNotification) -> str:
        area = AREA_LABELS.get(notification.area, notification.area)
        when = notification.event_date.strftime("%Y-%m-%d %H:%M")

        lines = [
            "Your dinner match is confirmed!",
            "",
            f"Date: {when}",
            f"Area: {area}",
            f"Restaurant: {notification.restaurant_name}",
        ]
        if notification.restaurant_url:
            lines.append(notification.restaurant_url)
        if notification.reservation_name:
            lines.append(f"Reservation name: {notification.reservation_name}")
        lines += ["", "Members:", *notification.member_names, "", "Enjoy your dinner!"]
        return "\n".join(lines)

    async def _push(self, client: httpx.AsyncClient, line_user_id: str, text: str) -> bool:
        payload = {"to": line_user_id, "messages": [{"type": "text", "text": text}]}
        try:
            response = await client.post(self.PUSH_ENDPOINT, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(f"Failed to send LINE notification to {line_user_id}: {exc}")
            return False
        return True

    @staticmethod
    def build_cancellation_message(notice: CancellationNotice) -> str:
        area = AREA_LABELS.get(notice.area, notice.area)
        when = notice.event_date.strftime("%Y-%m-%d %H:%M")
        return "\n".join([
            "Your dinner event has been canceled.",
            "",
            f"Date: {when}",
            f"Area: {area}",
            "",
            "We are sorry for the inconvenience and hope to see you at another dinner.",
        ])

    async def _send(self, messages: List[Tuple[str, List[Optional[str]]]], kind: str) -> NotificationResult:
        result = NotificationResult()

        if not self._token:
            result.skipped = sum(len(recipients) for _, recipients in messages)
            logger.warning(f"LINE_CHANNEL_ACCESS_TOKEN is not set; skipping {kind} notifications")
            return result

        headers = {"Authorization": f"Bearer {self._token}"}
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
        ) as client:
            for text, recipients in messages:
                for line_user_id in recipients:
                    if not line_user_id:
                        result.skipped += 1
                        continue
                    if await self._push(client, line_user_id, text):
                        result.sent += 1
                    else:
                        result.failed += 1

        logger.info(
            f"LINE {kind} notifications sent: {result.sent}, failed: {result.failed}, skipped: {result.skipped}"
        )
        return result

    async def send_match_notifications(self, notifications: List[MatchNotification]) -> NotificationResult:
        """Notify every linked participant; never raises on delivery failure."""
        return await self._send([(self.build_message(n), n.recipients) for n in notifications], "match")

    async def send_cancellation_notifications(self, notice: CancellationNotice) -> NotificationResult:
        return await self._send([(self.build_cancellation_message(notice), notice.recipients)], "cancellation")


line_notifier = LineNotifier()
