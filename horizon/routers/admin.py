from fastapi import APIRouter, Depends, HTTPException

from ..auth import require_admin
from ..telegram_service import TelegramNotifier, get_notifier

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.post("/test-telegram")
async def test_telegram(
    notifier: TelegramNotifier = Depends(get_notifier),
    admin: dict = Depends(require_admin),
):
    """Send a test alert to every admin chat"""
    if not notifier.admin_chat_ids:
        raise HTTPException(
            status_code=400,
            detail="Telegram chat IDs are not configured. Add TELEGRAM_ADMIN_CHAT_IDS to .env",
        )

    success = False
    for chat_id in notifier.admin_chat_ids:
        if await notifier.send_test_message(chat_id):
            success = True

    if not success:
        raise HTTPException(status_code=500, detail="Failed to send test message")
    return {"message": "Test message sent successfully!"}
