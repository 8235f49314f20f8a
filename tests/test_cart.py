# tests/test_cart.py

"""Tests for the per-user cart."""

import pytest

import cart
import catalog
from errors import AlreadyInCart, Conflict, NotFound, SelfPurchaseForbidden
from models import CartItem


@pytest.fixture
def product(seller, make_product):
    return make_product(seller.id, price='40')


class TestAdd:
    def test_adds_entry_with_quantity_one(self, app, buyer, product):
        item = cart.add(buyer.id, product.id)
        assert item.quantity == 1
        assert [line.product.id for line in cart.view(buyer.id)] == [product.id]

    def test_second_add_reports_already_in_cart(self, app, buyer, product):
        cart.add(buyer.id, product.id)
        with pytest.raises(AlreadyInCart) as exc:
            cart.add(buyer.id, product.id)
        assert isinstance(exc.value, Conflict)
        assert CartItem.query.filter_by(user_id=buyer.id).count() == 1

    def test_seller_cannot_add_own_product(self, app, seller, product):
        with pytest.raises(SelfPurchaseForbidden):
            cart.add(seller.id, product.id)
        assert cart.view(seller.id) == []

    def test_unknown_product(self, app, buyer):
        with pytest.raises(NotFound):
            cart.add(buyer.id, 404)

    def test_carts_are_per_user(self, app, buyer, make_user, product):
        other = make_user()
        cart.add(buyer.id, product.id)
        cart.add(other.id, product.id)
        assert len(cart.view(buyer.id)) == 1
        assert len(cart.view(other.id)) == 1


class TestMutations:
    def test_remove(self, app, buyer, product):
        cart.add(buyer.id, product.id)
        assert cart.remove(buyer.id, product.id) is True
        assert cart.view(buyer.id) == []

    def test_remove_absent_is_noop(self, app, buyer, product):
        assert cart.remove(buyer.id, product.id) is False

    @pytest.mark.parametrize('raw,expected', [
        ('3', 3), (7, 7), ('abc', 1), ('', 1), (None, 1), ('0', 1), ('-4', 1),
        ('150', cart.MAX_QUANTITY), ('99999999999999999999', cart.MAX_QUANTITY),
    ])
    def test_set_quantity_coercion(self, app, buyer, product, raw, expected):
        cart.add(buyer.id, product.id)
        cart.set_quantity(buyer.id, product.id, raw)
        assert cart.view(buyer.id)[0].item.quantity == expected

    def test_set_quantity_absent_is_noop(self, app, buyer, product):
        assert cart.set_quantity(buyer.id, product.id, 5) is None
        assert CartItem.query.count() == 0

    def test_contains(self, app, buyer, product):
        assert not cart.contains(buyer.id, product.id)
        cart.add(buyer.id, product.id)
        assert cart.contains(buyer.id, product.id)

    def test_clear(self, app, buyer, seller, make_product, product):
        cart.add(buyer.id, product.id)
        cart.add(buyer.id, make_product(seller.id).id)
        cart.clear(buyer.id)
        assert CartItem.query.filter_by(user_id=buyer.id).count() == 0


class TestViewAndTotal:
    def test_view_keeps_insertion_order_and_seller(self, app, buyer, seller, make_product):
        first = make_product(seller.id, title='First')
        second = make_product(seller.id, title='Second')
        cart.add(buyer.id, second.id)
        cart.add(buyer.id, first.id)
        lines = cart.view(buyer.id)
        assert [line.product.title for line in lines] == ['Second', 'First']
        assert lines[0].product.seller.username == 'seller'

    def test_total_is_price_times_quantity(self, app, buyer, seller, make_product):
        a = make_product(seller.id, price='40')
        b = make_product(seller.id, price='12.5')
        cart.add(buyer.id, a.id)
        cart.add(buyer.id, b.id)
        cart.set_quantity(buyer.id, b.id, 2)
        assert cart.total(buyer.id) == pytest.approx(65.0)

    def test_deleted_product_hidden_but_kept_in_storage(self, app, buyer, seller, make_product):
        kept = make_product(seller.id, price='10')
        gone = make_product(seller.id, price='99')
        cart.add(buyer.id, kept.id)
        cart.add(buyer.id, gone.id)
        catalog.delete_product(gone.id, seller.id)

        assert [line.product.id for line in cart.view(buyer.id)] == [kept.id]
        assert cart.total(buyer.id) == 10.0
        assert CartItem.query.filter_by(user_id=buyer.id).count() == 2

    def test_empty(self, app, buyer):
        assert cart.view(buyer.id) == []
        assert cart.total(buyer.id) == 0
