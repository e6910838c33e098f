# emporium/repos/product_repo.py
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from emporium.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, product_id: UUID) -> ProductModel | None:
        # zawsze swiezy odczyt z bazy, bez cache w sesji
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def update_inventory(
        self,
        product_id: UUID,
        old_version: int,
        inventory_available: int,
        inventory_total: int,
    ) -> int:
        """
        Optimistic locking na stanach:
        update products set ... version = v + 1 where id = :id and version = :v
        Zwraca rowcount; 0 znaczy ze ktos inny zmienil produkt w miedzyczasie.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.version == old_version,
            )
            .values(
                inventory_available=inventory_available,
                inventory_total=inventory_total,
                version=old_version + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount
