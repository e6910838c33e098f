# emporium/data/seed.py
from decimal import Decimal

from emporium.data.database import SessionLocal, init_db
from emporium.data.models.product import ProductModel
from emporium.repos.product_repo import ProductRepo
from emporium.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    {"title": "Mechanical Keyboard", "price": Decimal("199.99"), "category": "electronics", "stock": 25},
    {"title": "Wireless Mouse", "price": Decimal("49.50"), "category": "electronics", "stock": 40},
    {"title": "27\" Monitor", "price": Decimal("899.00"), "category": "electronics", "stock": 8},
    {"title": "Cotton T-Shirt", "price": Decimal("22.30"), "category": "men's clothing", "stock": 3},
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        # tylko na pustej bazie
        if db.query(ProductModel).first():
            logger.info("Products already seeded, skipping")
            return
        products = ProductRepo(db)
        for p in PRODUCTS:
            products.create(
                ProductModel(
                    title=p["title"],
                    price=p["price"],
                    category=p["category"],
                    inventory_total=p["stock"],
                    inventory_available=p["stock"],
                )
            )
        db.commit()
        logger.info(f"Seeded {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
