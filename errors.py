"""Failures raised by the marketplace components.

Views catch these at the route boundary, flash ``message`` under ``category``
and redirect. Nothing here knows about HTTP.
"""


class MarketplaceError(Exception):
    category = 'danger'
    default_message = 'Something went wrong.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    default_message = 'Please correct the highlighted fields.'

    def __init__(self, errors, message=None):
        self.errors = list(errors)
        super().__init__(message or '; '.join(self.errors) or None)


class NotFound(MarketplaceError):
    default_message = 'Not found.'


class Forbidden(MarketplaceError):
    default_message = 'You are not allowed to do that.'


class SelfPurchaseForbidden(Forbidden):
    default_message = 'You cannot add your own product to cart.'


class Unauthorized(MarketplaceError):
    category = 'warning'
    default_message = 'Please login first.'


class Conflict(MarketplaceError):
    default_message = 'Already exists.'


class AlreadyInCart(Conflict):
    category = 'info'
    default_message = 'Product is already in your cart.'


class InvalidCredential(MarketplaceError):
    default_message = 'Invalid credentials.'


class InvalidMedia(MarketplaceError):
    default_message = 'Only image files (PNG, JPEG, JPG, GIF, WebP) up to 5MB are allowed.'


class EmptyCart(MarketplaceError):
    category = 'warning'
    default_message = 'Cart is empty.'
