import logging
import os
from urllib.parse import urlparse

from flask import Flask, redirect, request, url_for, flash
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.routing import IntegerConverter

import auth_views
import identity
import product_views
import user_views
from errors import MarketplaceError
from logging_config import setup_logging
from models import db
from settings import Config

logger = logging.getLogger(__name__)

# Largest value a signed 64-bit INTEGER column holds
MAX_ID = 2 ** 63 - 1


class IdConverter(IntegerConverter):
    """Row ids in URLs; anything past MAX_ID is a 404 instead of a database overflow."""

    def __init__(self, map):
        super().__init__(map, max=MAX_ID)


def create_app(overrides=None):
    app = Flask(__name__, template_folder='templates', static_folder='static')
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    setup_logging(app)
    db.init_app(app)

    with app.app_context():
        db.create_all()
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    app.url_map.converters['id'] = IdConverter
    app.register_blueprint(auth_views.bp)
    app.register_blueprint(product_views.bp)
    app.register_blueprint(user_views.bp)
    app.context_processor(identity.inject_identity)
    register_error_handlers(app)

    @app.route('/')
    def home():
        if identity.current_identity() is None:
            return redirect(url_for('auth.login'))
        return redirect(url_for('products.index'))

    return app


def _back():
    # Only same-host referrers, and never the page that just failed
    referrer = request.referrer
    if referrer and referrer != request.url and urlparse(referrer).netloc == request.host:
        return redirect(referrer)
    return redirect(url_for('home'))


def register_error_handlers(app):
    @app.errorhandler(MarketplaceError)
    def marketplace_error(e):
        logger.warning('%s on %s %s: %s', type(e).__name__, request.method, request.path, e.message)
        flash(e.message, e.category)
        return _back()

    @app.errorhandler(SQLAlchemyError)
    def database_error(e):
        db.session.rollback()
        logger.exception('Database error on %s %s', request.method, request.path)
        flash('Something went wrong. Please try again.', 'danger')
        return _back()


if __name__ == '__main__':
    create_app().run(debug=True)
