import logging
import math
from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

import media
from errors import Forbidden, NotFound, ValidationError
from models import db, Product, User, STATUSES

logger = logging.getLogger(__name__)

CATEGORIES = ['Electronics', 'Clothing', 'Furniture', 'Books', 'Sports',
              'Toys', 'Home & Garden', 'Automotive', 'Beauty', 'Other']
CONDITIONS = ['Excellent', 'Good', 'Fair', 'Poor']
DEFAULT_CONDITION = 'Good'

SORT_OPTIONS = {
    'newest': (Product.created_at.desc(), Product.id.desc()),
    'oldest': (Product.created_at.asc(), Product.id.asc()),
    'price_low': (Product.price.asc(), Product.id.desc()),
    'price_high': (Product.price.desc(), Product.id.desc()),
}
DEFAULT_SORT = 'newest'


@dataclass
class ValidationResult:
    data: dict = field(default_factory=dict)
    errors: list = field(default_factory=list)

    @property
    def ok(self):
        return not self.errors


def parse_tags(raw):
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        parts = raw
    else:
        parts = raw.split(',')
    tags = []
    for part in parts:
        tag = ' '.join(part.split())
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def validate_product_fields(form):
    """Check and normalise submitted listing fields.

    Returns a ``ValidationResult``; ``data`` holds the cleaned values that
    passed and ``errors`` one message per violation.
    """
    result = ValidationResult()
    title = (form.get('title') or '').strip()
    description = (form.get('description') or '').strip()
    category = (form.get('category') or '').strip()
    price_raw = str(form.get('price') or '').strip()
    condition = (form.get('condition') or '').strip() or DEFAULT_CONDITION

    if not title or not description or not category or not price_raw:
        result.errors.append('All fields are required.')
    if category and category not in CATEGORIES:
        result.errors.append('Unknown category.')
    if condition not in CONDITIONS:
        result.errors.append('Unknown condition.')

    price = None
    if price_raw:
        try:
            price = float(price_raw)
        except ValueError:
            price = None
        if price is None or not math.isfinite(price) or price < 0:
            result.errors.append('Invalid price. Must be a non-negative number.')
            price = None

    result.data = {
        'title': title,
        'description': description,
        'category': category,
        'price': price,
        'condition': condition,
        'tags': parse_tags(form.get('tags')),
    }
    return result


def list_products(search=None, category=None, sort=DEFAULT_SORT, limit=None, status='available'):
    if status not in STATUSES:
        raise ValueError(f'Unknown product status: {status!r}')
    if limit is None:
        limit = current_app.config.get('PRODUCT_LIST_LIMIT', 50)
    query = Product.query.filter(Product.status == status)
    if category and category != 'all':
        query = query.filter(Product.category == category)
    search = ' '.join((search or '').split())
    if search:
        # tags_text holds one tag per line and the term has no newlines,
        # so it can only match inside a single tag
        query = query.filter(or_(Product.title.icontains(search, autoescape=True),
                                 Product.description.icontains(search, autoescape=True),
                                 Product.tags_text.contains(search.lower(), autoescape=True)))
    order = SORT_OPTIONS.get(sort, SORT_OPTIONS[DEFAULT_SORT])
    return query.order_by(*order).limit(limit).all()


def get_product(product_id, count_view=True):
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound('Product not found.')
    if count_view:
        product.views = (product.views or 0) + 1
        db.session.commit()
    return product


def get_owned_product(product_id, seller_id):
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound('Product not found.')
    if product.seller_id != seller_id:
        raise Forbidden('You are not authorized to modify this product.')
    return product


def seller_listings(seller_id):
    return (Product.query.filter_by(seller_id=seller_id)
            .order_by(Product.created_at.desc(), Product.id.desc()).all())


def create_product(seller_id, form, image_refs=None):
    image_refs = list(image_refs or [])
    try:
        result = validate_product_fields(form)
        if not result.ok:
            raise ValidationError(result.errors)
        if db.session.get(User, seller_id) is None:
            raise NotFound('Seller not found.')
        product = Product(seller_id=seller_id,
                          images=image_refs or [current_app.config['PLACEHOLDER_IMAGE']],
                          status='available', views=0, **result.data)
        db.session.add(product)
        db.session.commit()
    except (ValidationError, NotFound, SQLAlchemyError):
        db.session.rollback()
        media.discard(image_refs)
        raise
    logger.info('Product %s listed by user %s', product.id, seller_id)
    return product


def update_product(product_id, seller_id, form, new_image_refs=None, keep_existing_images=True):
    new_image_refs = list(new_image_refs or [])
    try:
        product = get_owned_product(product_id, seller_id)
        result = validate_product_fields(form)
        if not result.ok:
            raise ValidationError(result.errors)

        old_images = list(product.images or [])
        if new_image_refs:
            images = new_image_refs
        elif keep_existing_images:
            images = old_images
        else:
            images = [current_app.config['PLACEHOLDER_IMAGE']]

        for name, value in result.data.items():
            setattr(product, name, value)
        product.images = images
        db.session.commit()
    except (ValidationError, NotFound, Forbidden, SQLAlchemyError):
        db.session.rollback()
        media.discard(new_image_refs)
        raise

    stale = [ref for ref in old_images if ref not in images]
    media.discard(stale)
    logger.info('Product %s updated by user %s', product_id, seller_id)
    return product


def delete_product(product_id, seller_id):
    product = get_owned_product(product_id, seller_id)
    images = list(product.images or [])
    db.session.delete(product)
    db.session.commit()
    media.discard(images)
    logger.info('Product %s deleted by user %s', product_id, seller_id)


def mark_sold(product_id):
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound('Product not found.')
    # Committed by the caller together with the purchase record
    if product.status != 'sold':
        product.status = 'sold'
    return product
