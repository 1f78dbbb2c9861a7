from fastapi import APIRouter, Depends, Query

from orderflow.api.deps import get_product_service, parse_id
from orderflow.api.v1.schemas import ProductCreate, ProductList, ProductRead, ProductUpdate
from orderflow.core.config import settings
from orderflow.services.products import ProductService

router = APIRouter()


@router.get("", response_model=ProductList)
def list_products(
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
    products: ProductService = Depends(get_product_service),
) -> ProductList:
    found, total = products.list_products(limit, offset)
    return ProductList(
        products=[ProductRead.model_validate(p) for p in found],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: str, products: ProductService = Depends(get_product_service)) -> ProductRead:
    return ProductRead.model_validate(products.get_product(parse_id(product_id)))


@router.post("", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, products: ProductService = Depends(get_product_service)) -> ProductRead:
    product = products.create_product(
        description=payload.description,
        tags=payload.tags,
        quantity=payload.quantity,
        price=payload.price,
    )
    return ProductRead.model_validate(product)


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: str, payload: ProductUpdate, products: ProductService = Depends(get_product_service)
) -> ProductRead:
    product = products.update_product(parse_id(product_id), **payload.model_dump(exclude_unset=True))
    return ProductRead.model_validate(product)
