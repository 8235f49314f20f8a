import logging
from collections import namedtuple

from sqlalchemy.orm import joinedload

from errors import AlreadyInCart, NotFound, SelfPurchaseForbidden
from models import db, CartItem, Product

logger = logging.getLogger(__name__)

# One visible cart entry: the stored row and the product it still points at
CartLine = namedtuple('CartLine', ['item', 'product'])

MAX_QUANTITY = 99


def _entry(user_id, product_id):
    return CartItem.query.filter_by(user_id=user_id, product_id=product_id).first()


def coerce_quantity(value):
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return min(max(quantity, 1), MAX_QUANTITY)


def add(user_id, product_id):
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound('Product not found.')
    if product.seller_id == user_id:
        raise SelfPurchaseForbidden()
    if _entry(user_id, product_id) is not None:
        raise AlreadyInCart()
    item = CartItem(user_id=user_id, product_id=product_id, quantity=1)
    db.session.add(item)
    db.session.commit()
    logger.info('User %s added product %s to cart', user_id, product_id)
    return item


def remove(user_id, product_id):
    item = _entry(user_id, product_id)
    if item is None:
        return False
    db.session.delete(item)
    db.session.commit()
    return True


def set_quantity(user_id, product_id, quantity):
    item = _entry(user_id, product_id)
    if item is None:
        return None
    item.quantity = coerce_quantity(quantity)
    db.session.commit()
    return item


def contains(user_id, product_id):
    return _entry(user_id, product_id) is not None


def view(user_id):
    """Visible cart lines in insertion order.

    Entries whose product was deleted stay in storage but are left out here.
    """
    items = CartItem.query.filter_by(user_id=user_id).order_by(CartItem.id).all()
    ids = [item.product_id for item in items]
    if not ids:
        return []
    products = {p.id: p for p in Product.query.options(joinedload(Product.seller))
                .filter(Product.id.in_(ids)).all()}
    return [CartLine(item, products[item.product_id]) for item in items if item.product_id in products]


def lines_total(lines):
    return sum(line.product.price * line.item.quantity for line in lines)


def total(user_id):
    return lines_total(view(user_id))


def clear(user_id):
    CartItem.query.filter_by(user_id=user_id).delete()
    db.session.commit()
