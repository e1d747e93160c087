import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.core.config import settings
from ekvi.core.db import get_session
from ekvi.modules.webhooks.service import MuxWebhookService
from ekvi.modules.webhooks.signature import WebhookConfigurationError, WebhookVerificationError, unwrap

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/mux/webhook")
async def handle_mux_webhook(request: Request, db: AsyncSession = Depends(get_session)):
    """
    Receives video lifecycle events from Mux. Configure
    https://<host>/mux/webhook as the webhook URL in the Mux dashboard.

    Once a delivery is authenticated it is always acknowledged with 200, even
    when processing fails, so Mux does not keep retrying a message that cannot
    succeed. Failures are logged for manual follow-up.
    """
    body = await request.body()
    try:
        envelope = unwrap(
            body,
            request.headers,
            settings.MUX_WEBHOOK_SIGNING_SECRET,
            tolerance_seconds=settings.MUX_WEBHOOK_TOLERANCE_SECONDS,
        )
    except WebhookConfigurationError:
        logger.error("Mux webhook: signing secret not configured")
        return JSONResponse(status_code=500, content={"error": "Server configuration error"})
    except WebhookVerificationError as e:
        logger.error(f"Mux webhook: Verification failed: {e}")
        return JSONResponse(status_code=400, content={"error": "Invalid signature or webhook data"})

    logger.info(f"Mux webhook received: {envelope['type']}")
    try:
        await MuxWebhookService(db).handle(envelope)
    except Exception:
        logger.error(f"Mux webhook: Processing error for {envelope['type']}", exc_info=True)
        await db.rollback()

    return {"received": True}
