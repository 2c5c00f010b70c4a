"""The client session driven against the API through the test client."""

import pytest

from client import ApiError, CatalogClient, CatalogSession, SessionState, intersect_by_id


@pytest.fixture
def alerts():
    return []


@pytest.fixture
def api(client):
    return CatalogClient(http=client)


@pytest.fixture
def session(api, alerts):
    return CatalogSession(api, alert=alerts.append)


@pytest.fixture
def logged_in(session):
    assert session.submit_signup("a@x.com", "pw1")
    assert session.submit_login("a@x.com", "pw1")
    return session


def _fill(session, **fields):
    session.form.update(fields)


class TestCatalogClient:
    def test_errors_carry_status_and_message(self, api):
        with pytest.raises(ApiError) as excinfo:
            api.login("nobody@x.com", "pw")
        assert excinfo.value.status_code == 400
        assert excinfo.value.message == "Cannot find user"

    def test_requests_without_login_are_rejected(self, api):
        with pytest.raises(ApiError) as excinfo:
            api.list_products()
        assert excinfo.value.status_code == 401

    def test_filter_products_intersects(self, api):
        api.signup("a@x.com", "pw1")
        api.login("a@x.com", "pw1")
        cheap_good = api.create_product({"name": "A", "price": 5, "company": "X", "rating": 4.5})
        api.create_product({"name": "B", "price": 5, "company": "X", "rating": 1})
        api.create_product({"name": "C", "price": 500, "company": "X", "rating": 4.9})
        assert api.filter_products(100, 4) == [cheap_good]

    def test_close_releases_own_connection_only(self, client):
        owned = CatalogClient("http://localhost:5000")
        owned.close()
        assert owned.http.is_closed

        shared = CatalogClient(http=client)
        shared.close()
        assert not client.is_closed


def test_intersect_keeps_left_order():
    left = [{"id": "3"}, {"id": "1"}, {"id": "2"}]
    right = [{"id": "2"}, {"id": "3"}]
    assert intersect_by_id(left, right) == [{"id": "3"}, {"id": "2"}]


class TestLoggedOut:
    def test_starts_logged_out_in_login_mode(self, session):
        assert session.state is SessionState.LOGGED_OUT
        assert session.auth_mode == "login"

    def test_toggle_between_login_and_signup(self, session):
        assert session.toggle_auth_mode() == "signup"
        assert session.toggle_auth_mode() == "login"

    def test_signup_alerts(self, session, alerts):
        assert session.submit_signup("a@x.com", "pw1")
        assert not session.submit_signup("a@x.com", "pw1")
        assert alerts[0] == "Signup successful"
        assert alerts[1].startswith("Signup failed: 400")

    def test_failed_login_stays_logged_out(self, session, alerts):
        session.submit_signup("a@x.com", "pw1")
        assert not session.submit_login("a@x.com", "wrong")
        assert session.state is SessionState.LOGGED_OUT
        assert alerts[-1] == "Login failed: 401: Not Allowed"

    def test_catalog_actions_need_login(self, session):
        with pytest.raises(RuntimeError):
            session.show_all()


class TestLoggedIn:
    def test_login_loads_catalog_and_price_ceiling(self, api, session):
        api.signup("seed@x.com", "pw")
        api.login("seed@x.com", "pw")
        api.create_product({"name": "A", "price": 40, "company": "X"})
        api.create_product({"name": "B", "price": 250, "company": "X"})

        session.submit_signup("a@x.com", "pw1")
        session.submit_login("a@x.com", "pw1")
        assert session.logged_in
        assert [p["name"] for p in session.products] == ["A", "B"]
        assert session.max_price == 250
        assert session.price_filter == 250

    def test_empty_catalog_keeps_default_ceiling(self, logged_in):
        assert logged_in.products == []
        assert logged_in.max_price == 1000

    def test_add_products_get_sequential_ids(self, logged_in):
        _fill(logged_in, name="Widget", price="10", company="Acme", rating="4")
        assert logged_in.submit_product()
        _fill(logged_in, name="Gadget", price="20", company="Acme")
        assert logged_in.submit_product()
        assert [p["productId"] for p in logged_in.products] == ["P001", "P002"]
        assert logged_in.products[1]["rating"] == 0
        assert logged_in.form["name"] == ""

    def test_edit_and_cancel(self, logged_in):
        _fill(logged_in, name="Widget", price="10", company="Acme", rating="4")
        logged_in.submit_product()
        product = logged_in.products[0]

        logged_in.start_edit(product)
        assert logged_in.editing is product
        assert logged_in.form["name"] == "Widget"
        logged_in.cancel_edit()
        assert logged_in.editing is None
        assert logged_in.form["name"] == ""

        logged_in.start_edit(product)
        logged_in.form["price"] = "15"
        assert logged_in.submit_product()
        assert logged_in.editing is None
        assert logged_in.products[0]["price"] == 15
        assert logged_in.products[0]["id"] == product["id"]

    def test_invalid_form_alerts(self, logged_in, alerts):
        _fill(logged_in, name="Widget", price="10", company="Acme", rating="9")
        assert not logged_in.submit_product()
        assert alerts[-1].startswith("Failed to add product: 400")

    def test_delete(self, logged_in):
        _fill(logged_in, name="Widget", price="10", company="Acme")
        logged_in.submit_product()
        assert logged_in.delete(logged_in.products[0]["id"])
        assert logged_in.products == []

    def test_views(self, logged_in):
        for name, price, rating, featured in [
            ("A", 5, 4.5, True),
            ("B", 8, 2, False),
            ("C", 90, 4.8, False),
        ]:
            _fill(logged_in, name=name, price=price, company="X", rating=rating, featured=featured)
            logged_in.submit_product()

        assert [p["name"] for p in logged_in.show_featured()] == ["A"]

        logged_in.price_filter = 50
        logged_in.rating_filter = 4
        assert [p["name"] for p in logged_in.apply_filters()] == ["A"]

        assert len(logged_in.show_all()) == 3
