# backend/expertbook/routes/v1/purchases.py
"""
Purchases routes - API v1

Endpoints:
    POST /              → Buy an hour package
    GET /?user_id=      → A client's packages, newest first
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import get_purchase_service
from ...api.errors import handle_domain_exception
from ...core.exceptions import DomainException
from ...schemas.booking import PurchaseCreate, PurchaseResponse
from ...services.purchase_service import PurchaseService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["purchases-v1"])


@router.post("", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
def create_purchase(
    payload: PurchaseCreate,
    service: PurchaseService = Depends(get_purchase_service),
) -> PurchaseResponse:
    try:
        purchase = service.purchase(payload.user_id, payload.expert_id, payload.hours)
    except DomainException as e:
        handle_domain_exception(e)
    return PurchaseResponse.model_validate(purchase)


@router.get("", response_model=List[PurchaseResponse])
def list_purchases(
    user_id: str = Query(..., min_length=1),
    service: PurchaseService = Depends(get_purchase_service),
) -> List[PurchaseResponse]:
    return [PurchaseResponse.model_validate(p) for p in service.list_purchases(user_id)]
