from flask import Blueprint, render_template, request, redirect, url_for, flash

import accounts
import cart
import catalog
import purchases
from errors import EmptyCart, NotFound
from identity import login_required, end

bp = Blueprint('users', __name__, url_prefix='/users')

# form field -> User column
PROFILE_FORM_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'phone': 'phone',
    'street': 'street',
    'city': 'city',
    'state': 'state',
    'zipCode': 'zip_code',
    'country': 'country',
}


@bp.route('/dashboard')
@login_required
def dashboard(identity):
    try:
        user = accounts.get_user(identity.id)
    except NotFound as e:
        end()
        flash(e.message, e.category)
        return redirect(url_for('auth.login'))
    return render_template('users/dashboard.html', user=user,
                           listing_count=len(catalog.seller_listings(identity.id)))


@bp.route('/profile', methods=['POST'])
@login_required
def update_profile(identity):
    fields = {column: request.form[name] for name, column in PROFILE_FORM_FIELDS.items() if name in request.form}
    try:
        accounts.update_profile(identity.id, fields)
    except NotFound as e:
        end()
        flash(e.message, e.category)
        return redirect(url_for('auth.login'))
    flash('Profile updated successfully!', 'success')
    return redirect(url_for('users.dashboard'))


@bp.route('/cart')
@login_required
def view_cart(identity):
    lines = cart.view(identity.id)
    return render_template('users/cart.html', lines=lines, total=cart.lines_total(lines))


@bp.route('/cart/<id:pid>', methods=['POST'])
@login_required
def update_cart(pid, identity):
    if cart.set_quantity(identity.id, pid, request.form.get('quantity')) is not None:
        flash('Cart updated.', 'success')
    return redirect(url_for('users.view_cart'))


@bp.route('/cart/<id:pid>/remove', methods=['POST'])
@login_required
def remove_from_cart(pid, identity):
    cart.remove(identity.id, pid)
    flash('Product removed from cart.', 'info')
    return redirect(url_for('users.view_cart'))


@bp.route('/purchase', methods=['POST'])
@login_required
def purchase(identity):
    try:
        purchases.purchase(identity.id)
    except EmptyCart as e:
        flash(e.message, e.category)
        return redirect(url_for('users.view_cart'))
    flash('Purchase completed successfully!', 'success')
    return redirect(url_for('users.purchase_history'))


@bp.route('/purchases')
@login_required
def purchase_history(identity):
    return render_template('users/purchases.html', lines=purchases.history(identity.id))
