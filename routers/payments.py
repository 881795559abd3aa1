import logging

import stripe
from fastapi import APIRouter
from pydantic import BaseModel, Field

from config import STRIPE_API_KEY, STRIPE_COMPANY, STRIPE_SECRET_KEY

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payment", tags=["payments"])

CURRENCY = "inr"


class PaymentRequest(BaseModel):
    amount: int = Field(..., ge=0, description="Amount in the smallest currency unit")


@router.post("/process")
def process_payment(payload: PaymentRequest):
    intent = stripe.PaymentIntent.create(
        amount=payload.amount,
        currency=CURRENCY,
        metadata={"company": STRIPE_COMPANY},
        api_key=STRIPE_SECRET_KEY,
    )
    logger.info("Created payment intent %s for %s %s", intent.id, payload.amount, CURRENCY)
    return {"success": True, "client_secret": intent.client_secret}


@router.get("/stripeapikey")
def stripe_api_key():
    return {"stripe_apikey": STRIPE_API_KEY}
