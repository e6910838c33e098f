#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from emporium.data.models.product import ProductModel
from emporium.data.models.cart import CartModel, CartStatus
from emporium.data.models.cart_item import CartItemModel

__all__ = ["ProductModel", "CartModel", "CartStatus", "CartItemModel"]
