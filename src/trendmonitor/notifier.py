"""Webhook delivery for interactive cards."""

from __future__ import annotations

import json
import logging
from types import TracebackType

from trendmonitor.client import AsyncJsonClient
from trendmonitor.types import JsonDict

logger = logging.getLogger(__name__)


def card_payload(card: JsonDict) -> JsonDict:
    return {"msg_type": "interactive", "card": card}


class WebhookNotifier:
    """Posts cards to a Feishu/Lark bot webhook.

    Without a URL the card is logged and nothing is sent.
    """

    def __init__(self, url: str | None, timeout: float = 30.0):
        self.url = url
        self._http = AsyncJsonClient(headers={"Content-Type": "application/json"}, timeout=timeout)

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> WebhookNotifier:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def send_card(self, card: JsonDict) -> None:
        payload = card_payload(card)
        if not self.url:
            logger.warning("No webhook URL configured; card not sent")
            logger.debug(json.dumps(payload, ensure_ascii=False))
            return
        logger.info("Pushing card to webhook...")
        result = await self._http.request("POST", self.url, json=payload, fallback={})
        logger.info(f"Webhook response: {json.dumps(result, ensure_ascii=False)}")
