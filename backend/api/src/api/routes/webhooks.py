"""Webhook endpoints for payment providers.

Provides endpoints for:
- Paystack (charge.success)
- Stripe (payment_intent.succeeded)

These endpoints do NOT require JWT authentication as they receive
signed payloads. The body is read as raw bytes and handed to the
WebhookHandler unparsed; the signature is checked before any JSON parsing.

Responses:
- 200 {"received": true}: processed, or acknowledged without changes
- 400 plain text: signature missing/invalid or body not JSON
- 503 JSON error: order update failed; the provider will redeliver
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.status import HTTP_400_BAD_REQUEST

from api.dependencies import get_webhook_handler
from shared.models.enums import PaymentProvider
from shared.models.errors import ApiError, ErrorCode, ToolError
from shared.models.webhook import WebhookAck
from shared.services.normalizer import MalformedPayloadError
from shared.services.signature import WebhookSignatureError
from shared.services.webhook_handler import WebhookHandler, WebhookProcessingError

router = APIRouter(tags=["webhooks"])

PAYSTACK_SIGNATURE_HEADER = "x-paystack-signature"
STRIPE_SIGNATURE_HEADER = "stripe-signature"

_RESPONSES = {
    200: {"description": "Event received (processed or ignored)", "model": WebhookAck},
    400: {
        "description": "Missing or invalid signature, or invalid JSON",
        "content": {"text/plain": {}},
    },
    503: {"description": "Order could not be updated; event will be redelivered", "model": ToolError},
}


async def _process(
    provider: PaymentProvider,
    request: Request,
    handler: WebhookHandler,
    signature_header: str,
    error_prefix: str = "",
) -> Response:
    raw_body = await request.body()
    signature = request.headers.get(signature_header)

    try:
        # Database I/O happens in the handler; keep it off the event loop
        await run_in_threadpool(handler.handle, provider, raw_body, signature)
    except WebhookSignatureError as e:
        return PlainTextResponse(f"{error_prefix}{e.message}", status_code=HTTP_400_BAD_REQUEST)
    except MalformedPayloadError:
        return PlainTextResponse(f"{error_prefix}Invalid JSON", status_code=HTTP_400_BAD_REQUEST)
    except WebhookProcessingError as e:
        outcome = e.outcome
        raise ApiError(
            code=ErrorCode.WEBHOOK_PROCESSING_FAILED,
            details={
                "provider": provider.value,
                "event_kind": outcome.event_kind or "",
                "order_id": str(outcome.order_id),
            },
        ) from e

    return JSONResponse(content=WebhookAck().model_dump())


@router.post(
    "/paystack/webhook",
    summary="Receive Paystack webhook events",
    description="""
Marks the order in `metadata.custom_fields[order_id]` as Paid when a
`charge.success` event arrives. All other events are acknowledged and ignored.

Signature: `x-paystack-signature` = hex HMAC-SHA512 of the raw body keyed by
the Paystack secret key.
""",
    response_model=WebhookAck,
    responses=_RESPONSES,
)
async def paystack_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> Response:
    return await _process(PaymentProvider.PAYSTACK, request, handler, PAYSTACK_SIGNATURE_HEADER)


@router.post(
    "/stripe/webhook",
    summary="Receive Stripe webhook events",
    description="""
Marks the order in `data.object.metadata.orderId` as Paid when a
`payment_intent.succeeded` event arrives. All other events are acknowledged
and ignored.

Signature: `Stripe-Signature` header verified with the endpoint signing
secret, including the timestamp tolerance window.
""",
    response_model=WebhookAck,
    responses=_RESPONSES,
)
async def stripe_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> Response:
    return await _process(
        PaymentProvider.STRIPE,
        request,
        handler,
        STRIPE_SIGNATURE_HEADER,
        error_prefix="Webhook Error: ",
    )
