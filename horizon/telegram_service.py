"""
Telegram alerts to the agency admins when a request comes in
"""
import html
import logging
from typing import List, Optional

from fastapi import Request
from telegram import Bot
from telegram.error import TelegramError

from .config import Settings

logger = logging.getLogger(__name__)

REQUEST_TYPE_LABELS = {
    "booking": "Booking inquiry",
    "package": "Package request",
    "passport": "Passport service",
    "visa": "Visa service",
    "travel_plan": "Travel plan",
    "travel_buddy": "Travel buddy join",
}


class TelegramNotifier:
    """Sends HTML formatted messages to every configured admin chat"""

    def __init__(self, settings: Settings):
        self.admin_chat_ids: List[int] = settings.admin_chat_ids
        self.bot: Optional[Bot] = None

        if settings.TELEGRAM_BOT_TOKEN:
            self.bot = Bot(token=settings.TELEGRAM_BOT_TOKEN)
            logger.info("Telegram bot initialised for %d admin chat(s)", len(self.admin_chat_ids))
        else:
            logger.warning("TELEGRAM_BOT_TOKEN is not set, admin alerts disabled")

    @property
    def configured(self) -> bool:
        return self.bot is not None and bool(self.admin_chat_ids)

    async def _broadcast(self, text: str) -> bool:
        success_count = 0
        for chat_id in self.admin_chat_ids:
            try:
                await self.bot.send_message(chat_id=chat_id, text=text, parse_mode="HTML")
                success_count += 1
            except TelegramError as e:
                logger.error("Telegram send to %s failed: %s", chat_id, e)
        return success_count > 0

    async def send_new_request_notification(
        self,
        request_id: Optional[int],
        request_type: str,
        title: str,
        contact_name: Optional[str] = None,
        contact_phone: Optional[str] = None,
        contact_email: Optional[str] = None,
    ) -> bool:
        """Alert admins about a new lead, travel plan or trip join"""
        if not self.configured:
            logger.debug("Telegram alert skipped, bot or admin chats not configured")
            return False

        label = REQUEST_TYPE_LABELS.get(request_type, request_type)
        lines = [
            f"<b>New request: {html.escape(label)}</b>",
            "",
            f"<b>{html.escape(title)}</b>",
        ]
        if contact_name:
            lines.append(f"Client: {html.escape(contact_name)}")
        if contact_phone:
            lines.append(f"Phone: <code>{html.escape(contact_phone)}</code>")
        if contact_email:
            lines.append(f"Email: {html.escape(contact_email)}")
        if request_id is not None:
            lines.extend(["", f"Request #{request_id}"])
        else:
            lines.extend(["", "Not tracked (requests table unavailable)"])

        return await self._broadcast("\n".join(lines))

    async def send_test_message(self, chat_id: int) -> bool:
        if not self.bot:
            return False

        try:
            await self.bot.send_message(
                chat_id=chat_id,
                text="<b>Test message</b>\n\nBT2 Horizon admin alerts are configured correctly.",
                parse_mode="HTML",
            )
            logger.info("Test message sent to chat %s", chat_id)
            return True
        except TelegramError as e:
            logger.error("Test message to %s failed: %s", chat_id, e)
            return False


def get_notifier(request: Request) -> TelegramNotifier:
    return request.app.state.notifier
