# emporium/repos/cart_repo.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session, selectinload

from emporium.data.models.cart import CartModel, CartStatus
from emporium.data.models.cart_item import CartItemModel


def _with_items(stmt):
    return stmt.options(
        selectinload(CartModel.items).selectinload(CartItemModel.product)
    ).execution_options(populate_existing=True)


class CartRepo:
    """
    Dostep do koszykow i ich pozycji.
    Repo tylko flushuje, commit/rollback robi serwis (jedna transakcja na operacje).
    """

    def __init__(self, db: Session):
        self.db = db

    # odczyt
    def get_cart(self, cart_id: UUID) -> CartModel | None:
        return self.db.execute(
            _with_items(select(CartModel).where(CartModel.id == cart_id))
        ).scalar_one_or_none()

    def get_active_cart_by_user(self, user_id: UUID) -> CartModel | None:
        return self.db.execute(
            _with_items(
                select(CartModel).where(
                    CartModel.user_id == user_id,
                    CartModel.status == CartStatus.ACTIVE.value,
                )
            )
        ).scalar_one_or_none()

    def list_carts_by_user(self, user_id: UUID) -> List[CartModel]:
        return list(
            self.db.execute(
                _with_items(
                    select(CartModel)
                    .where(CartModel.user_id == user_id)
                    .order_by(CartModel.created_at.desc())
                )
            ).scalars().all()
        )

    def get_expired_active_carts(self, now: datetime) -> List[CartModel]:
        return list(
            self.db.execute(
                select(CartModel).where(
                    CartModel.status == CartStatus.ACTIVE.value,
                    CartModel.expires_at < now,
                )
            ).scalars().all()
        )

    def get_cart_item(self, cart_id: UUID, product_id: UUID) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    # zapis
    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def add_or_update_cart_item(
        self,
        cart_id: UUID,
        product_id: UUID,
        quantity: int,
        unit_price: Decimal,
        title: str | None = None,
        image_url: str | None = None,
        category: str | None = None,
    ) -> CartItemModel:
        item = self.get_cart_item(cart_id, product_id)

        if item is None:
            item = CartItemModel(
                cart_id=cart_id,
                product_id=product_id,
                quantity=quantity,
            )
            self.db.add(item)

        # quantity to wartosc docelowa, nie przyrost
        item.quantity = quantity
        item.unit_price_snapshot = unit_price
        if title is not None:
            item.title_snapshot = title
        if image_url is not None:
            item.image_url_snapshot = image_url
        if category is not None:
            item.category_snapshot = category

        self.db.flush()
        return item

    def remove_cart_item(self, cart_id: UUID, product_id: UUID) -> bool:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.rowcount > 0

    def clear_cart_items(self, cart_id: UUID) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.cart_id == cart_id)
        )
        return result.rowcount

    def update_cart_totals(
        self,
        cart_id: UUID,
        total_before_discount: Decimal,
        discount_amount: Decimal,
        shipping_cost: Decimal,
        final_total: Decimal,
    ) -> None:
        self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id)
            .values(
                total_before_discount=total_before_discount,
                discount_amount=discount_amount,
                shipping_cost=shipping_cost,
                final_total=final_total,
            )
        )

    def update_cart_version(
        self,
        cart_id: UUID,
        old_version: int,
        new_data: Dict[str, Any],
    ) -> int:
        # update carts set ..., version = v + 1 where id = :id and version = :v
        values = {"updated_at": datetime.now(timezone.utc), **new_data}
        values["version"] = old_version + 1
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**values)
        )
        return result.rowcount

    def soft_delete_cart(self, cart_id: UUID) -> bool:
        result = self.db.execute(
            update(CartModel)
            .where(
                CartModel.id == cart_id,
                CartModel.status == CartStatus.ACTIVE.value,
            )
            .values(
                status=CartStatus.ABANDONED.value,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount > 0

    # transakcja
    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
