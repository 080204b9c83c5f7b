"""Plan upgrade endpoints backed by Razorpay checkout."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from esign.core.config import settings
from esign.db.models import Profile, Subscription, SubscriptionStatus
from esign.db.session import get_db_dependency
from esign.deps import get_current_owner, get_gateway
from esign.schemas.api import (
    OrderCreate,
    OrderResponse,
    PaymentKeyResponse,
    PaymentVerification,
    SubscriptionResponse,
)
from esign.services.payments import PaymentError, RazorpayGateway, one_year_after

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get("/key", response_model=PaymentKeyResponse)
def get_key(gateway: RazorpayGateway = Depends(get_gateway)):
    """Public key id for the checkout widget."""
    if not gateway.key_id:
        raise HTTPException(status_code=500, detail="RAZORPAY_KEY_ID is not set")
    return PaymentKeyResponse(key_id=gateway.key_id)


@router.post("/orders", response_model=OrderResponse)
def create_order(
    body: OrderCreate,
    owner_id: str = Depends(get_current_owner),
    gateway: RazorpayGateway = Depends(get_gateway),
    db: Session = Depends(get_db_dependency),
):
    """Create a gateway order and a pending subscription for it."""
    try:
        order = gateway.create_order(body.amount, currency=settings.PAYMENT_CURRENCY)
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    subscription = Subscription(
        user_id=owner_id,
        plan_name=body.plan_name,
        status=SubscriptionStatus.pending,
        amount=body.amount,
        razorpay_order_id=order["id"],
    )
    db.add(subscription)
    db.commit()
    return OrderResponse(order=order, subscription=SubscriptionResponse.model_validate(subscription))


@router.post("/verify", response_model=SubscriptionResponse)
def verify_payment(
    body: PaymentVerification,
    owner_id: str = Depends(get_current_owner),
    gateway: RazorpayGateway = Depends(get_gateway),
    db: Session = Depends(get_db_dependency),
):
    """Check the checkout signature, activate the subscription and upgrade the plan."""
    try:
        valid = gateway.verify(body.razorpay_order_id, body.razorpay_payment_id, body.razorpay_signature)
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not valid:
        logger.warning("Invalid payment signature for order %s", body.razorpay_order_id)
        raise HTTPException(status_code=400, detail="Invalid signature")

    subscription = db.execute(
        select(Subscription).where(
            Subscription.id == body.subscription_id,
            Subscription.user_id == owner_id,
            Subscription.razorpay_order_id == body.razorpay_order_id,
        )
    ).scalar_one_or_none()
    if subscription is None:
        raise HTTPException(status_code=404, detail="Subscription not found")
    if subscription.status is not SubscriptionStatus.pending:
        raise HTTPException(status_code=409, detail=f"Subscription is already {subscription.status.value}")
    if body.plan_name is not subscription.plan_name:
        raise HTTPException(status_code=400, detail="Plan does not match the order")

    now = datetime.utcnow()
    subscription.status = SubscriptionStatus.active
    subscription.razorpay_payment_id = body.razorpay_payment_id
    subscription.expires_at = one_year_after(now)

    profile = db.get(Profile, owner_id)
    if profile is None:
        profile = Profile(id=owner_id)
        db.add(profile)
    profile.plan = subscription.plan_name

    db.commit()
    logger.info("Subscription %s active for user %s (%s)", subscription.id, owner_id, subscription.plan_name.value)
    return SubscriptionResponse.model_validate(subscription)
