"""
PayHere notification handler.

A raw Django view (not Django Ninja): the gateway posts form-encoded data
and only cares about the status code. 4xx tells it the notification is
bad; 5xx makes it retry later.
"""

from django.db import DatabaseError
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from pydantic import ValidationError

from apps.core.logging import bind_contextvars, clear_contextvars, get_logger
from apps.payments.exceptions import InvalidSignatureError, PaymentError, UnknownOrderError
from apps.payments.gateway import NotificationPayload
from apps.payments.services import reconcile_notification

logger = get_logger(__name__)


@csrf_exempt
@require_POST
def payhere_webhook(request: HttpRequest) -> HttpResponse:
    """
    Handle a PayHere payment notification.

    Verifies the md5sig and hands off to the reconciler.
    """
    try:
        payload = NotificationPayload.model_validate(request.POST.dict())
    except ValidationError as e:
        logger.warning("payhere_webhook_invalid_payload", errors=e.error_count())
        return HttpResponse("Invalid payload", status=400)

    bind_contextvars(order_id=payload.order_id)
    try:
        return _reconcile(payload)
    finally:
        clear_contextvars()


def _reconcile(payload: NotificationPayload) -> HttpResponse:
    try:
        outcome = reconcile_notification(payload)
    except InvalidSignatureError:
        return HttpResponse("Invalid hash", status=400)
    except UnknownOrderError:
        return HttpResponse("Payment not found", status=404)
    except DatabaseError:
        logger.exception("payhere_webhook_database_error", order_id=payload.order_id)
        # Transaction rolled back; 500 so the gateway retries
        return HttpResponse("Error processing payment notification", status=500)
    except PaymentError as e:
        logger.exception("payhere_webhook_handler_error", order_id=payload.order_id, error=str(e))
        return HttpResponse("OK", status=200)

    logger.info(
        "payhere_webhook_processed",
        order_id=outcome.order_id,
        status_code=outcome.status_code,
        action=outcome.action,
    )
    return HttpResponse("OK", status=200)
