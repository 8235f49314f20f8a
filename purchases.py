"""Turning a cart into purchase records.

``purchase`` is best-effort: each line is recorded and its product marked
sold in its own commit, and the cart is cleared only after the last line. A
failure midway leaves the earlier lines bought and the rest still in the
cart. Availability is not re-checked, so two buyers can purchase the same
listing in the same window.
"""
import logging
from collections import namedtuple
from datetime import datetime

from sqlalchemy.orm import joinedload

import cart
import catalog
from errors import EmptyCart
from models import db, Product, Purchase

logger = logging.getLogger(__name__)

PurchaseLine = namedtuple('PurchaseLine', ['record', 'product'])


def purchase(user_id):
    lines = cart.view(user_id)
    if not lines:
        raise EmptyCart()

    records = []
    for line in lines:
        record = Purchase(user_id=user_id, product_id=line.product.id,
                          price=line.product.price, purchase_date=datetime.utcnow())
        db.session.add(record)
        catalog.mark_sold(line.product.id)
        db.session.commit()
        records.append(record)

    cart.clear(user_id)
    logger.info('User %s purchased %d item(s)', user_id, len(records))
    return records


def history(user_id):
    records = Purchase.query.filter_by(user_id=user_id).all()
    ids = {r.product_id for r in records}
    if not ids:
        return []
    products = {p.id: p for p in Product.query.options(joinedload(Product.seller))
                .filter(Product.id.in_(ids)).all()}
    lines = [PurchaseLine(r, products[r.product_id]) for r in records if r.product_id in products]
    lines.sort(key=lambda line: (line.record.purchase_date, line.record.id), reverse=True)
    return lines
