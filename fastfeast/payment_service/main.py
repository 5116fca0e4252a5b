from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from pydantic import Field

from fastfeast.events import events
from fastfeast.payment_service.coordinator import (
    ConfirmResult,
    PaymentCoordinator,
    get_payment_coordinator,
)
from fastfeast.schemas import CamelModel
from fastfeast.user_service.security import get_current_user_id

router = APIRouter(tags=["payments"])


# --- DTOs ---
class PaymentIntentRequest(CamelModel):
    order_id: int
    amount: float = Field(..., gt=0)


class PaymentIntentResponse(CamelModel):
    client_secret: str


class ConfirmPaymentRequest(CamelModel):
    payment_intent_id: str = Field(..., min_length=1)


class ConfirmPaymentResponse(CamelModel):
    success: bool
    message: str


def _announce_paid(background_tasks: BackgroundTasks, result: ConfirmResult):
    if result.newly_paid:
        order = result.order
        background_tasks.add_task(
            events.order_paid, order.id, order.restaurant_id, order.total_amount,
            order.stripe_payment_intent_id,
        )


# --- API ---
@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(payload: PaymentIntentRequest,
                          user_id: int = Depends(get_current_user_id),
                          coordinator: PaymentCoordinator = Depends(get_payment_coordinator)):
    client_secret = coordinator.create_intent(payload.order_id, payload.amount, user_id)
    return {"client_secret": client_secret}


@router.post("/confirm-payment", response_model=ConfirmPaymentResponse)
def confirm_payment(payload: ConfirmPaymentRequest, background_tasks: BackgroundTasks,
                    user_id: int = Depends(get_current_user_id),
                    coordinator: PaymentCoordinator = Depends(get_payment_coordinator)):
    result = coordinator.confirm_intent(payload.payment_intent_id, user_id=user_id)
    if not result.success:
        return JSONResponse(status_code=400, content={"success": False, "message": result.message})

    _announce_paid(background_tasks, result)
    return {"success": True, "message": result.message}


@router.post("/stripe-webhook")
async def stripe_webhook(request: Request, background_tasks: BackgroundTasks,
                         coordinator: PaymentCoordinator = Depends(get_payment_coordinator)):
    payload = await request.body()
    # Processor and database calls block, so they run off the event loop
    event = await run_in_threadpool(
        coordinator.processor.construct_event, payload, request.headers.get("stripe-signature")
    )
    result = await run_in_threadpool(coordinator.handle_webhook, event)
    if result is not None:
        await run_in_threadpool(_announce_paid, background_tasks, result)
    return {"received": True}
