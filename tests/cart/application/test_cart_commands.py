"""Application tests for cart commands processed through the domain."""

from protean import current_domain

from storefront.cart.cart import CartStatus, ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import AbandonCart, CreateCart, MergeGuestCart, SyncCart
from storefront.cart.store import CartStore
from storefront.catalogue.management import UpdateStock
from storefront.catalogue.product import Product


def _create_cart(**kwargs):
    return current_domain.process(CreateCart(**kwargs), asynchronous=False)


def _add(cart_id, product, quantity=1, variant_id=None):
    return current_domain.process(
        AddToCart(cart_id=cart_id, product_id=str(product.id), variant_id=variant_id, quantity=quantity),
        asynchronous=False,
    )


class TestCartItems:
    def test_add_persists_line(self, make_product):
        product = make_product(price=15.0)
        cart_id = _create_cart(user_id="user-001")

        state = _add(cart_id, product, quantity=2)

        assert state["error"] is None
        assert state["summary"]["subtotal"] == 30.0
        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert cart.items[0].quantity == 2
        assert cart.items[0].product_name == product.name

    def test_over_stock_comes_back_as_error(self, make_product):
        product = make_product(stock=10)
        cart_id = _create_cart(user_id="user-001")

        state = _add(cart_id, product, quantity=15)

        assert "Only 10 available in stock" in state["error"]
        assert state["items"] == []
        assert current_domain.repository_for(ShoppingCart).get(cart_id).items == []

    def test_repeated_adds_merge(self, make_product):
        product = make_product()
        cart_id = _create_cart(user_id="user-001")
        _add(cart_id, product, quantity=2)
        state = _add(cart_id, product, quantity=3)
        assert len(state["items"]) == 1
        assert state["items"][0]["quantity"] == 5

    def test_update_and_remove(self, make_product):
        first = make_product(name="Alpha")
        second = make_product(name="Beta")
        cart_id = _create_cart(user_id="user-001")
        _add(cart_id, first)
        state = _add(cart_id, second)
        item_id = state["items"][0]["item_id"]

        state = current_domain.process(
            UpdateCartQuantity(cart_id=cart_id, item_id=item_id, quantity=3), asynchronous=False
        )
        updated = next(i for i in state["items"] if i["item_id"] == item_id)
        assert updated["quantity"] == 3

        state = current_domain.process(
            UpdateCartQuantity(cart_id=cart_id, item_id=item_id, quantity=0), asynchronous=False
        )
        assert len(state["items"]) == 1

        remaining = state["items"][0]["item_id"]
        state = current_domain.process(RemoveFromCart(cart_id=cart_id, item_id=remaining), asynchronous=False)
        assert state["items"] == []

    def test_clear(self, make_product):
        cart_id = _create_cart(user_id="user-001")
        _add(cart_id, make_product())
        state = current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
        assert state["items"] == []
        assert state["summary"]["item_count"] == 0

    def test_save_and_load_round_trip(self, make_product):
        product = make_product()
        cart_id = _create_cart(session_id="sess-001")
        _add(cart_id, product, quantity=2)

        store = CartStore.load(cart_id)
        assert store.item_count() == 2
        assert store.error is None
        assert store.is_loading is False


class TestCartManagement:
    def test_merge_guest_cart(self, make_product):
        product = make_product(stock=10)
        user_cart = _create_cart(user_id="user-001")
        guest_cart = _create_cart(session_id="sess-001")
        _add(user_cart, product, quantity=2)
        _add(guest_cart, product, quantity=3)

        state = current_domain.process(
            MergeGuestCart(cart_id=user_cart, guest_cart_id=guest_cart), asynchronous=False
        )

        assert state["items"][0]["quantity"] == 5
        guest = current_domain.repository_for(ShoppingCart).get(guest_cart)
        assert guest.status == CartStatus.MERGED.value

    def test_sync_picks_up_new_price_and_stock(self, make_product):
        product = make_product(price=20.0, stock=10)
        cart_id = _create_cart(user_id="user-001")
        _add(cart_id, product, quantity=2)

        repo = current_domain.repository_for(Product)
        stored = repo.get(product.id)
        stored.price = 25.0
        repo.add(stored)
        current_domain.process(UpdateStock(product_id=str(product.id), stock=3), asynchronous=False)

        state = current_domain.process(SyncCart(cart_id=cart_id), asynchronous=False)

        line = state["items"][0]
        assert line["unit_price"] == 25.0
        assert line["stock_ceiling"] == 3
        assert state["is_loading"] is False

    def test_abandon(self):
        cart_id = _create_cart(session_id="sess-001")
        current_domain.process(AbandonCart(cart_id=cart_id), asynchronous=False)
        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert cart.status == CartStatus.ABANDONED.value
