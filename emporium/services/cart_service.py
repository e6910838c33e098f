# emporium/services/cart_service.py
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone, timedelta
from typing import List
from uuid import UUID

import redis
from sqlalchemy.orm import Session

from emporium.data.models.cart import CartModel, CartStatus
from emporium.data.models.cart_item import CartItemModel
from emporium.data.models.product import ProductModel
from emporium.domain.errors import (
    CartError,
    NotFoundError,
    InsufficientStockError,
    ItemNotInCartError,
    EmptyCartError,
    InvalidQuantityError,
    ActiveCartExistsError,
    ConcurrencyConflictError,
)
from emporium.domain.schemas import CartOut
from emporium.domain.snapshot import compute_totals, money, resolve_display, to_cart_out
from emporium.repos.cart_repo import CartRepo
from emporium.repos.product_repo import ProductRepo
from emporium.services.lock_service import LockService
from emporium.utils.settings import CART_TTL_SECONDS, CART_LOCK_TTL_SECONDS, LOW_STOCK_THRESHOLD
from emporium.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y domeny cart z rezerwacja stanow magazynowych.

    query (get, list, warnings) tylko odczyt
    commands (create, add, update, remove, clear, checkout, abandon) modyfikuja stan:
    - lock na koszyk usera w redisie (jedna operacja na koszyk naraz)
    - optimistic locking na produkcie i koszyku (pole version)
    - cala operacja w jednej transakcji, blad = rollback wszystkich zmian stanow

    Rezerwacja: pozycja w aktywnym koszyku trzyma `quantity` sztuk z inventory_available.
    Checkout zamienia rezerwacje na trwale zmniejszenie inventory_total.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        product_repo: ProductRepo | None = None,
        cart_repo: CartRepo | None = None,
    ):
        self.repo = cart_repo or CartRepo(db)
        self.products = product_repo or ProductRepo(db)
        self.lock_service = lock_service

    #query - odczyt
    def get_active_cart(self, user_id: UUID) -> CartOut | None:
        cart = self.repo.get_active_cart_by_user(user_id)
        if not cart:
            return None
        return to_cart_out(cart)

    def list_carts(self, user_id: UUID) -> List[CartOut]:
        return [to_cart_out(c) for c in self.repo.list_carts_by_user(user_id)]

    def get_inventory_warnings(self, user_id: UUID) -> List[str]:
        cart = self.repo.get_active_cart_by_user(user_id)
        if not cart:
            return []

        warnings = []
        for item in cart.items:
            title = resolve_display(item).title
            product = item.product

            if product is None:
                warnings.append(f"'{title}' is no longer available")
                continue

            if product.inventory_total < item.quantity:
                warnings.append(
                    f"'{title}': only {product.inventory_total} in stock "
                    f"but {item.quantity} in your cart"
                )

            if product.inventory_available <= 0:
                warnings.append(f"'{title}' is out of stock")
            elif product.inventory_available < LOW_STOCK_THRESHOLD:
                warnings.append(
                    f"'{title}' is low on stock ({product.inventory_available} left)"
                )

            old_price, new_price = money(item.unit_price_snapshot), money(product.price)
            if old_price != new_price:
                warnings.append(
                    f"Price of '{title}' changed from {old_price} to {new_price} since it was added"
                )

        return warnings

    #commands
    def get_or_create_active_cart(self, user_id: UUID) -> CartOut:
        existing = self.repo.get_active_cart_by_user(user_id)
        if existing:
            return to_cart_out(existing)

        with self._unit_of_work(user_id, "get_or_create_active_cart"):
            cart_id = self._ensure_active_cart(user_id).id

        return self._snapshot(cart_id)

    def create_empty_cart(self, user_id: UUID) -> CartOut:
        with self._unit_of_work(user_id, "create_empty_cart"):
            if self.repo.get_active_cart_by_user(user_id):
                raise ActiveCartExistsError()
            cart_id = self._new_cart(user_id).id

        return self._snapshot(cart_id)

    def add_item(self, user_id: UUID, product_id: UUID, quantity: int) -> CartOut:
        if quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        with self._unit_of_work(user_id, "add_item"):
            cart = self._ensure_active_cart(user_id)
            cart_id, old_version = cart.id, cart.version

            product = self._load_product(product_id)
            if quantity > product.inventory_available:
                logger.info(
                    f"Product {product_id}: requested {quantity}, "
                    f"available {product.inventory_available}"
                )
                raise InsufficientStockError()

            # rezerwacja
            self._write_stock(product, available=product.inventory_available - quantity)

            existing = self._find_item(cart, product_id)
            new_quantity = quantity + (existing.quantity if existing else 0)
            if existing:
                logger.info(
                    f"Product {product_id} already in cart {cart_id}, "
                    f"quantity {existing.quantity} -> {new_quantity}"
                )

            self.repo.add_or_update_cart_item(
                cart_id,
                product_id,
                new_quantity,
                unit_price=product.price,
                title=product.title,
                image_url=product.image_url,
                category=product.category,
            )
            self._finish(cart_id, old_version)

        logger.info(f"Added {quantity} x {product_id} to cart {cart_id} of user {user_id}")
        return self._snapshot(cart_id)

    def update_item_quantity(self, user_id: UUID, product_id: UUID, new_quantity: int) -> CartOut:
        if new_quantity < 0:
            raise InvalidQuantityError("Quantity cannot be negative")

        with self._unit_of_work(user_id, "update_item_quantity"):
            cart = self._require_active_cart(user_id)
            cart_id, old_version = cart.id, cart.version

            item = self._find_item(cart, product_id)
            if item is None:
                raise ItemNotInCartError()

            current = item.quantity
            delta = new_quantity - current

            if delta != 0:
                product = self.products.get_by_id(product_id)
                if product is None:
                    # produkt usuniety: zwiekszyc sie nie da, zmniejszyc mozna bez zwrotu stanu
                    if delta > 0:
                        raise NotFoundError(f"Product {product_id} not found")
                else:
                    if delta > product.inventory_available:
                        raise InsufficientStockError()
                    # delta < 0 zwraca sztuki do available
                    self._write_stock(product, available=product.inventory_available - delta)

            if new_quantity == 0:
                self.repo.remove_cart_item(cart_id, product_id)
            elif delta != 0:
                self.repo.add_or_update_cart_item(
                    cart_id, product_id, new_quantity, unit_price=item.unit_price_snapshot
                )

            self._finish(cart_id, old_version)

        logger.info(
            f"Cart {cart_id}: product {product_id} quantity {current} -> {new_quantity}"
        )
        return self._snapshot(cart_id)

    def remove_item(self, user_id: UUID, product_id: UUID) -> CartOut:
        with self._unit_of_work(user_id, "remove_item"):
            cart = self._require_active_cart(user_id)
            cart_id, old_version = cart.id, cart.version

            item = self._find_item(cart, product_id)
            if item is None:
                raise ItemNotInCartError()

            self._release(item.product_id, item.quantity)
            self.repo.remove_cart_item(cart_id, product_id)
            self._finish(cart_id, old_version)

        logger.info(f"Removed product {product_id} from cart {cart_id}")
        return self._snapshot(cart_id)

    def clear_cart(self, user_id: UUID) -> CartOut:
        with self._unit_of_work(user_id, "clear_cart"):
            cart = self._require_active_cart(user_id)
            cart_id, old_version = cart.id, cart.version

            self._release_all(cart)
            self.repo.clear_cart_items(cart_id)
            self._finish(cart_id, old_version)

        logger.info(f"Cleared cart {cart_id}")
        return self._snapshot(cart_id)

    def checkout_cart(self, user_id: UUID) -> CartOut:
        with self._unit_of_work(user_id, "checkout_cart"):
            cart = self._require_active_cart(user_id)
            cart_id, old_version = cart.id, cart.version

            if not cart.items:
                raise EmptyCartError()

            logger.info(f"Checking out cart {cart_id} ({len(cart.items)} items)")

            # available bylo zmniejszone przy dodawaniu, tu tylko total
            for item in list(cart.items):
                product = self._load_product(item.product_id)
                self._write_stock(product, total=product.inventory_total - item.quantity)

            self._finish(
                cart_id,
                old_version,
                status=CartStatus.CHECKED_OUT.value,
                expires_at=None,
            )

        logger.info(f"Cart {cart_id} checked out by user {user_id}")
        return self._snapshot(cart_id)

    def abandon_cart(self, user_id: UUID) -> CartOut:
        with self._unit_of_work(user_id, "abandon_cart"):
            cart = self._require_active_cart(user_id)
            cart_id, old_version = cart.id, cart.version

            self._release_all(cart)
            self.repo.soft_delete_cart(cart_id)
            self._finish(cart_id, old_version, expires_at=None)

        logger.info(f"Cart {cart_id} abandoned by user {user_id}")
        return self._snapshot(cart_id)

    def expire_stale_carts(self, now: datetime | None = None) -> int:
        """
        Porzuca aktywne koszyki po TTL i zwalnia ich rezerwacje.
        Kazdy koszyk w osobnej transakcji, konflikt na jednym nie blokuje reszty.
        """
        now = now or datetime.now(timezone.utc)
        targets = [(c.id, c.user_id) for c in self.repo.get_expired_active_carts(now)]
        logger.info(f"Found {len(targets)} carts to expire")

        expired = 0
        for cart_id, user_id in targets:
            try:
                with self._unit_of_work(user_id, "expire_cart"):
                    cart = self.repo.get_cart(cart_id)
                    # ktos mogl w miedzyczasie zrobic checkout
                    if cart is not None and cart.is_active:
                        old_version = cart.version
                        self._release_all(cart)
                        self.repo.soft_delete_cart(cart_id)
                        self._finish(cart_id, old_version, expires_at=None)
                        expired += 1
            except ConcurrencyConflictError as e:
                logger.warning(f"Skipping cart {cart_id}: {e.message}")

        return expired

    #helpers
    @contextmanager
    def _unit_of_work(self, user_id: UUID, operation: str):
        token = uuid.uuid4().hex
        if not self.lock_service.acquire_cart_lock(user_id, token, ttl=CART_LOCK_TTL_SECONDS):
            logger.warning(f"{operation}: cart of user {user_id} is locked by another request")
            raise ConcurrencyConflictError("Cart is being modified by another request")

        try:
            yield
            self.repo.commit()
        except CartError as e:
            self.repo.rollback()
            logger.warning(f"{operation} rejected for user {user_id}: {e.message}")
            raise
        except Exception as e:
            self.repo.rollback()
            logger.error(f"{operation} failed for user {user_id}: {e}")
            raise
        finally:
            self._unlock(user_id, token, operation)

    def _unlock(self, user_id: UUID, token: str, operation: str):
        # po commicie blad redisa nie moze wygladac jak blad operacji, lock i tak wygasnie (ttl)
        try:
            self.lock_service.release_cart_lock(user_id, token)
        except redis.RedisError as e:
            logger.warning(
                f"{operation}: could not release cart lock of user {user_id}, "
                f"it expires in {CART_LOCK_TTL_SECONDS}s: {e}"
            )

    def _new_cart(self, user_id: UUID) -> CartModel:
        cart = self.repo.create_cart(
            CartModel(
                user_id=user_id,
                status=CartStatus.ACTIVE.value,
                version=1,
                expires_at=self._expiry(),
            )
        )
        logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart

    def _ensure_active_cart(self, user_id: UUID) -> CartModel:
        cart = self.repo.get_active_cart_by_user(user_id)
        return cart or self._new_cart(user_id)

    def _require_active_cart(self, user_id: UUID) -> CartModel:
        cart = self.repo.get_active_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Active cart not found")
        return cart

    def _load_product(self, product_id: UUID) -> ProductModel:
        product = self.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    @staticmethod
    def _find_item(cart: CartModel, product_id: UUID) -> CartItemModel | None:
        return next((i for i in cart.items if i.product_id == product_id), None)

    def _write_stock(self, product: ProductModel, available: int | None = None, total: int | None = None):
        available = product.inventory_available if available is None else available
        total = product.inventory_total if total is None else total

        rowcount = self.products.update_inventory(
            product.id,
            old_version=product.version,
            inventory_available=available,
            inventory_total=total,
        )
        if rowcount == 0:
            raise ConcurrencyConflictError(
                f"Stock of product {product.id} was modified by another operation"
            )

    def _release(self, product_id: UUID, quantity: int):
        product = self.products.get_by_id(product_id)
        if product is None:
            logger.warning(f"Product {product_id} no longer exists, nothing to release")
            return
        self._write_stock(product, available=product.inventory_available + quantity)

    def _release_all(self, cart: CartModel):
        for item in list(cart.items):
            self._release(item.product_id, item.quantity)

    def _finish(self, cart_id: UUID, old_version: int, **changes):
        """Przelicza totals i podbija wersje koszyka (optimistic locking)."""
        cart = self.repo.get_cart(cart_id)
        totals = compute_totals(cart.items, cart.discount_amount)
        self.repo.update_cart_totals(
            cart_id,
            total_before_discount=totals.total_before_discount,
            discount_amount=totals.discount_amount,
            shipping_cost=totals.shipping_cost,
            final_total=totals.final_total,
        )

        new_data = {"expires_at": self._expiry(), **changes}
        rowcount = self.repo.update_cart_version(cart_id, old_version, new_data)
        if rowcount == 0:
            raise ConcurrencyConflictError(
                "Cart was modified by another operation"
            )

    def _snapshot(self, cart_id: UUID) -> CartOut:
        return to_cart_out(self.repo.get_cart(cart_id))

    @staticmethod
    def _expiry() -> datetime:
        return datetime.now(timezone.utc) + timedelta(seconds=CART_TTL_SECONDS)
