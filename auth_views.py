from flask import Blueprint, render_template, request, redirect, url_for, flash

import accounts
import identity as ident
from errors import Conflict, InvalidCredential, NotFound, ValidationError

bp = Blueprint('auth', __name__, url_prefix='/auth')

LOGIN_FAILED = 'Invalid email or password.'


@bp.route('/login', methods=['GET', 'POST'])
@ident.guest_only
def login():
    if request.method == 'POST':
        identifier = request.form.get('email', '').strip()
        password = request.form.get('password', '')
        if not identifier or not password:
            flash('Please provide email and password.', 'danger')
            return redirect(url_for('auth.login'))
        try:
            identity = accounts.verify(identifier, password)
        except (NotFound, InvalidCredential):
            # Same notice whether the account is unknown or the password wrong
            flash(LOGIN_FAILED, 'danger')
            return redirect(url_for('auth.login'))
        ident.authenticate(identity)
        flash('Logged in successfully.', 'success')
        return redirect(url_for('products.index'))
    return render_template('auth/login.html')


@bp.route('/register', methods=['GET', 'POST'])
@ident.guest_only
def register():
    if request.method == 'POST':
        try:
            identity = accounts.register(request.form.get('username'),
                                         request.form.get('email'),
                                         request.form.get('password'),
                                         request.form.get('confirmPassword', ''))
        except (ValidationError, Conflict) as e:
            flash(e.message, e.category)
            return redirect(url_for('auth.register'))
        ident.authenticate(identity)
        flash('Registered and logged in.', 'success')
        return redirect(url_for('products.index'))
    return render_template('auth/register.html')


@bp.route('/logout', methods=['POST'])
def logout():
    ident.end()
    flash('Logged out.', 'info')
    return redirect(url_for('auth.login'))
