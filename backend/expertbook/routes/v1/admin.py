# backend/expertbook/routes/v1/admin.py
"""
Admin billing routes - API v1

Endpoints:
    POST /payouts                   → Record a payout to an expert
    POST /client-payments           → Record a payment from a client
    GET /expert-earnings            → Earned / paid / due per expert
    GET /clients/{user_id}/billing  → Total / paid / due for a client
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_billing_service
from ...api.errors import handle_domain_exception
from ...core.exceptions import DomainException
from ...schemas.billing import (
    ClientBillingSummary,
    ClientPaymentCreate,
    ClientPaymentResponse,
    ExpertEarnings,
    PayoutCreate,
    PayoutResponse,
)
from ...services.billing_service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-v1"])


@router.post("/payouts", response_model=PayoutResponse, status_code=status.HTTP_201_CREATED)
def record_payout(
    payload: PayoutCreate,
    service: BillingService = Depends(get_billing_service),
) -> PayoutResponse:
    try:
        payout = service.record_payout(payload.expert_id, payload.amount, payload.note)
    except DomainException as e:
        handle_domain_exception(e)
    return PayoutResponse.model_validate(payout)


@router.post(
    "/client-payments",
    response_model=ClientPaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_client_payment(
    payload: ClientPaymentCreate,
    service: BillingService = Depends(get_billing_service),
) -> ClientPaymentResponse:
    try:
        payment = service.record_client_payment(payload.user_id, payload.amount, payload.note)
    except DomainException as e:
        handle_domain_exception(e)
    return ClientPaymentResponse.model_validate(payment)


@router.get("/expert-earnings", response_model=List[ExpertEarnings])
def expert_earnings(service: BillingService = Depends(get_billing_service)) -> List[ExpertEarnings]:
    return service.expert_earnings_report()


@router.get("/clients/{user_id}/billing", response_model=ClientBillingSummary)
def client_billing(
    user_id: str,
    service: BillingService = Depends(get_billing_service),
) -> ClientBillingSummary:
    return service.client_billing_summary(user_id)
