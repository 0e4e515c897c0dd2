from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from services.api.app.models.order import Order
from services.api.app.services.order_base import OrderNotFoundError, OrderRepository
from services.api.app.services.order_factory import get_order_repository

router = APIRouter()


@router.get("/orders/{order_uid}", response_model=Order)
def get_order(
    order_uid: str,
    repository: OrderRepository = Depends(get_order_repository),
) -> Order:
    try:
        return repository.get_order(order_uid)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail="Internal Server Error") from e
