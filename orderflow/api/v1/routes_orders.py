from fastapi import APIRouter, Depends, status

from orderflow.api.deps import get_order_service, orders_rate_limit, parse_id
from orderflow.api.v1.schemas import OrderCreate, OrderRead
from orderflow.core.config import settings
from orderflow.core.deadline import Deadline
from orderflow.services.orders import OrderItemRequest, OrderService

router = APIRouter()


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(orders_rate_limit)])
def create_order(payload: OrderCreate, orders: OrderService = Depends(get_order_service)) -> OrderRead:
    order = orders.create_order(
        payload.user_id,
        [OrderItemRequest(product_id=it.product_id, quantity=it.quantity) for it in payload.items],
        deadline=Deadline.after(settings.TRANSACTION_TIMEOUT_SECONDS),
    )
    return OrderRead.model_validate(order)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: str, orders: OrderService = Depends(get_order_service)) -> OrderRead:
    return OrderRead.model_validate(orders.get_order(parse_id(order_id)))


@router.patch("/{order_id}/confirm", response_model=OrderRead)
def confirm_order(order_id: str, orders: OrderService = Depends(get_order_service)) -> OrderRead:
    return OrderRead.model_validate(orders.confirm_order(parse_id(order_id)))


@router.patch("/{order_id}/cancel", response_model=OrderRead)
def cancel_order(order_id: str, orders: OrderService = Depends(get_order_service)) -> OrderRead:
    return OrderRead.model_validate(orders.cancel_order(parse_id(order_id)))
