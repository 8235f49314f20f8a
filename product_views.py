from flask import Blueprint, render_template, request, redirect, url_for, flash

import cart
import catalog
import media
from errors import (AlreadyInCart, Forbidden, InvalidMedia, NotFound,
                    SelfPurchaseForbidden, ValidationError)
from identity import login_required

bp = Blueprint('products', __name__, url_prefix='/products')

FALSE_VALUES = {'0', 'false', 'off', 'no'}


def _notice(e):
    flash(e.message, e.category)


@bp.route('/')
@login_required
def index(identity):
    search = request.args.get('search', '').strip()
    category = request.args.get('category') or 'all'
    sort = request.args.get('sort') or catalog.DEFAULT_SORT
    if sort not in catalog.SORT_OPTIONS:
        sort = catalog.DEFAULT_SORT
    products = catalog.list_products(search=search, category=category, sort=sort)
    return render_template('products/index.html', products=products, categories=catalog.CATEGORIES,
                           current_category=category, current_search=search, current_sort=sort)


@bp.route('/new')
@login_required
def new(identity):
    return render_template('products/form.html', categories=catalog.CATEGORIES,
                           conditions=catalog.CONDITIONS, product=None)


@bp.route('/', methods=['POST'])
@login_required
def create(identity):
    try:
        refs = media.accept(request.files.getlist('images'))
        catalog.create_product(identity.id, request.form, refs)
    except (ValidationError, InvalidMedia, NotFound) as e:
        _notice(e)
        return redirect(url_for('products.new'))
    flash('Product listed successfully!', 'success')
    return redirect(url_for('products.my_listings'))


@bp.route('/my/listings')
@login_required
def my_listings(identity):
    products = catalog.seller_listings(identity.id)
    return render_template('products/my_listings.html', products=products)


@bp.route('/<id:pid>')
@login_required
def detail(pid, identity):
    try:
        product = catalog.get_product(pid)
    except NotFound as e:
        _notice(e)
        return redirect(url_for('products.index'))
    return render_template('products/detail.html', product=product,
                           is_in_cart=cart.contains(identity.id, pid),
                           is_owner=product.seller_id == identity.id)


@bp.route('/<id:pid>/edit', methods=['GET', 'POST'])
@login_required
def edit(pid, identity):
    if request.method == 'POST':
        # The edit form posts a hidden "false" ahead of the checkbox value
        flags = request.form.getlist('keepExistingImages')
        keep = not flags or any(f.strip().lower() not in FALSE_VALUES for f in flags)
        try:
            refs = media.accept(request.files.getlist('images'))
            catalog.update_product(pid, identity.id, request.form, refs, keep_existing_images=keep)
        except (ValidationError, InvalidMedia) as e:
            _notice(e)
            return redirect(url_for('products.edit', pid=pid))
        except (NotFound, Forbidden) as e:
            _notice(e)
            return redirect(url_for('products.my_listings'))
        flash('Product updated successfully!', 'success')
        return redirect(url_for('products.my_listings'))

    try:
        product = catalog.get_owned_product(pid, identity.id)
    except (NotFound, Forbidden) as e:
        _notice(e)
        return redirect(url_for('products.my_listings'))
    return render_template('products/form.html', categories=catalog.CATEGORIES,
                           conditions=catalog.CONDITIONS, product=product)


@bp.route('/<id:pid>/delete', methods=['POST'])
@login_required
def delete(pid, identity):
    try:
        catalog.delete_product(pid, identity.id)
    except (NotFound, Forbidden) as e:
        _notice(e)
        return redirect(url_for('products.my_listings'))
    flash('Product deleted successfully!', 'success')
    return redirect(url_for('products.my_listings'))


@bp.route('/<id:pid>/cart', methods=['POST'])
@login_required
def add_to_cart(pid, identity):
    try:
        cart.add(identity.id, pid)
    except NotFound as e:
        _notice(e)
        return redirect(url_for('products.index'))
    except (AlreadyInCart, SelfPurchaseForbidden) as e:
        _notice(e)
        return redirect(url_for('products.detail', pid=pid))
    flash('Product added to cart!', 'success')
    return redirect(url_for('products.detail', pid=pid))
