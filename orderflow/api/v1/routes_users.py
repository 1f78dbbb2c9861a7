from fastapi import APIRouter, Depends, Query, status

from orderflow.api.deps import get_order_service, get_user_service, parse_id, users_rate_limit
from orderflow.api.v1.schemas import OrderList, OrderRead, RegisterUserPayload, UserRead
from orderflow.core.config import settings
from orderflow.services.orders import OrderService
from orderflow.services.users import UserService

router = APIRouter()  # main.py mounts at /api/v1/users


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(users_rate_limit)])
def register(payload: RegisterUserPayload, users: UserService = Depends(get_user_service)) -> UserRead:
    user = users.register_user(
        first_name=payload.first_name,
        last_name=payload.last_name,
        age=payload.age,
        password=payload.password,
        is_married=bool(payload.is_married),
    )
    return UserRead.model_validate(user)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, users: UserService = Depends(get_user_service)) -> UserRead:
    return UserRead.model_validate(users.get_user(parse_id(user_id)))


@router.get("/{user_id}/orders", response_model=OrderList)
def list_user_orders(
    user_id: str,
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
    orders: OrderService = Depends(get_order_service),
) -> OrderList:
    found = orders.list_user_orders(parse_id(user_id), limit, offset)
    return OrderList(
        orders=[OrderRead.model_validate(o) for o in found],
        total=len(found),
        limit=limit,
        offset=offset,
    )
