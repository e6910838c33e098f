#emporium/api/routers/carts.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from emporium.data.database import get_db
from emporium.domain.errors import CartError, raise_http
from emporium.domain.schemas import CartOut, CreateCartIn, ItemIn, QuantityIn
from emporium.services.cart_service import CartService
from emporium.services.lock_service import LockService
from emporium.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/carts", tags=["carts"])


def get_lock_service() -> LockService:
    return LockService()


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


@router.get("/", response_model=List[CartOut])
def list_carts(
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    return svc.list_carts(user_id)


@router.post("/", response_model=CartOut, status_code=status.HTTP_201_CREATED)
def create_cart(payload: CreateCartIn, svc: CartService = Depends(get_service)):
    try:
        return svc.create_empty_cart(payload.user_id)
    except CartError as e:
        raise_http(e)


@router.get("/active", response_model=CartOut)
def get_active_cart(
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.get_or_create_active_cart(user_id)
    except CartError as e:
        raise_http(e)


@router.delete("/active", response_model=CartOut)
def abandon_cart(
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.abandon_cart(user_id)
    except CartError as e:
        raise_http(e)


@router.post("/active/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    logger.info(f"User {user_id} adding item {payload.product_id} quantity {payload.quantity}")
    try:
        return svc.add_item(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
    except CartError as e:
        raise_http(e)


@router.put("/active/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: UUID,
    payload: QuantityIn,
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_item_quantity(user_id, product_id, payload.quantity)
    except CartError as e:
        raise_http(e)


@router.delete("/active/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: UUID,
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.remove_item(user_id, product_id)
    except CartError as e:
        raise_http(e)


@router.post("/active/clear", response_model=CartOut)
def clear_cart(
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.clear_cart(user_id)
    except CartError as e:
        raise_http(e)


@router.post("/active/checkout", response_model=CartOut)
def checkout_cart(
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.checkout_cart(user_id)
    except CartError as e:
        raise_http(e)


@router.get("/active/warnings", response_model=List[str])
def inventory_warnings(
    user_id: UUID = Query(...),
    svc: CartService = Depends(get_service),
):
    return svc.get_inventory_warnings(user_id)
