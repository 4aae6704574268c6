# Overview: Pytest coverage for the beer order HTTP API.

"""
Beer order API tests.

Exercises the /api/v1/beer-orders routes through the Flask test client:
status codes, Location header, camelCase bodies and problem responses.
"""

from brewhouse.models import BeerOrder

from conftest import MISSING_BEER_ID

BASE = "/api/v1/beer-orders"


def post_order(client, customer_ref, *items):
    return client.post(BASE, json={
        "customerRef": customer_ref,
        "items": [{"beerId": b, "quantity": q} for b, q in items],
    })


class TestPlaceOrderApi:

    def test_created_with_location(self, client, db_session, beer_a, beer_b):
        resp = post_order(client, "cust-1", (beer_a.id, 3), (beer_b.id, 2))

        assert resp.status_code == 201
        body = resp.get_json()
        assert resp.headers["Location"].endswith(f"{BASE}/{body['id']}")
        assert body["customerRef"] == "cust-1"
        assert body["status"] == "NEW"
        assert body["version"] == 1
        assert body["paymentAmount"] is None
        assert body["createdDate"].endswith("Z")
        assert {(l["beerId"], l["orderQuantity"]) for l in body["lines"]} == {(beer_a.id, 3), (beer_b.id, 2)}

    def test_zero_quantity_is_400(self, client, db_session, beer_a):
        resp = post_order(client, "cust", (beer_a.id, 0))

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["status"] == 400
        assert f"beerId {beer_a.id}" in body["detail"]
        assert "items[0].quantity" in body["errors"]
        assert body["path"] == BASE

    def test_blank_customer_ref_is_400(self, client, db_session, beer_a):
        resp = post_order(client, "", (beer_a.id, 1))
        assert resp.status_code == 400
        assert "customerRef" in resp.get_json()["errors"]

    def test_missing_body_is_400(self, client, db_session):
        resp = client.post(BASE, data="not json", content_type="text/plain")
        assert resp.status_code == 400

    def test_duplicate_beer_is_400(self, client, db_session, beer_a):
        resp = post_order(client, "cust", (beer_a.id, 1), (beer_a.id, 1))
        assert resp.status_code == 400

    def test_unknown_beer_is_404(self, client, db_session, beer_a):
        resp = post_order(client, "cust", (MISSING_BEER_ID, 1))

        assert resp.status_code == 404
        body = resp.get_json()
        assert body["missingBeerIds"] == [MISSING_BEER_ID]
        assert str(MISSING_BEER_ID) in body["detail"]
        assert db_session.query(BeerOrder).count() == 0


class TestGetOrderApi:

    def test_get_round_trip(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 2)).get_json()

        resp = client.get(f"{BASE}/{created['id']}")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["id"] == created["id"]
        assert body["lines"] == created["lines"]
        assert body["lines"][0]["beerName"] == "Mango Bobs"

    def test_unknown_order_is_404(self, client, db_session):
        resp = client.get(f"{BASE}/424242")
        assert resp.status_code == 404
        assert resp.get_json()["title"] == "Not found"


class TestUpdateOrderApi:

    def test_patch_then_stale_patch(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 2)).get_json()
        url = f"{BASE}/{created['id']}"

        first = client.patch(url, json={"version": 1, "paymentAmount": "25.90"})
        assert first.status_code == 200
        assert first.get_json()["paymentAmount"] == "25.90"
        assert first.get_json()["version"] == 2

        second = client.patch(url, json={"version": 1, "customerRef": "late"})
        assert second.status_code == 409
        body = second.get_json()
        assert body["title"] == "Optimistic lock conflict"
        assert body["currentVersion"] == 2

    def test_patch_unknown_field_is_400(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 2)).get_json()
        resp = client.patch(f"{BASE}/{created['id']}", json={"version": 1, "status": "DELIVERED"})
        assert resp.status_code == 400


class TestOrderLinesApi:

    def test_remove_line(self, client, db_session, beer_a, beer_b):
        created = post_order(client, "cust-1", (beer_a.id, 1), (beer_b.id, 1)).get_json()

        resp = client.delete(f"{BASE}/{created['id']}/lines/{beer_a.id}?version=1")

        assert resp.status_code == 200
        assert [l["beerId"] for l in resp.get_json()["lines"]] == [beer_b.id]

    def test_remove_line_requires_version(self, client, db_session, beer_a, beer_b):
        created = post_order(client, "cust-1", (beer_a.id, 1), (beer_b.id, 1)).get_json()
        resp = client.delete(f"{BASE}/{created['id']}/lines/{beer_a.id}")
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == {"version": "is required"}

    def test_remove_last_line_is_400(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 1)).get_json()
        resp = client.delete(f"{BASE}/{created['id']}/lines/{beer_a.id}?version=1")
        assert resp.status_code == 400

    def test_remove_unknown_line_is_404(self, client, db_session, beer_a, beer_b):
        created = post_order(client, "cust-1", (beer_a.id, 1)).get_json()
        resp = client.delete(f"{BASE}/{created['id']}/lines/{beer_b.id}?version=1")
        assert resp.status_code == 404


class TestDeleteOrderApi:

    def test_delete_then_get_404(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 1)).get_json()

        resp = client.delete(f"{BASE}/{created['id']}")
        assert resp.status_code == 204

        assert client.get(f"{BASE}/{created['id']}").status_code == 404

    def test_delete_stale_version_is_409(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 1)).get_json()
        client.patch(f"{BASE}/{created['id']}", json={"version": 1, "customerRef": "moved"})

        resp = client.delete(f"{BASE}/{created['id']}?version=1")
        assert resp.status_code == 409


class TestVersionParameter:
    """A supplied but malformed version is rejected, never ignored."""

    def test_delete_with_malformed_version_is_400(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 1)).get_json()
        client.patch(f"{BASE}/{created['id']}", json={"version": 1, "customerRef": "moved"})

        resp = client.delete(f"{BASE}/{created['id']}?version=abc")

        assert resp.status_code == 400
        assert resp.get_json()["errors"] == {"version": "must be a positive integer"}
        assert db_session.query(BeerOrder).count() == 1

    def test_delete_with_zero_version_is_400(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 1)).get_json()
        resp = client.delete(f"{BASE}/{created['id']}?version=0")
        assert resp.status_code == 400
        assert db_session.query(BeerOrder).count() == 1

    def test_remove_line_with_malformed_version_is_400(self, client, db_session, beer_a, beer_b):
        created = post_order(client, "cust-1", (beer_a.id, 1), (beer_b.id, 1)).get_json()

        resp = client.delete(f"{BASE}/{created['id']}/lines/{beer_a.id}?version=abc")

        assert resp.status_code == 400
        assert resp.get_json()["errors"] == {"version": "must be a positive integer"}
        assert len(client.get(f"{BASE}/{created['id']}").get_json()["lines"]) == 2


class TestOutOfRangeValues:
    """Values too large for the database are client errors, not 500s."""

    HUGE = 2 ** 70

    def test_get_huge_order_id_is_404(self, client, db_session):
        assert client.get(f"{BASE}/{self.HUGE}").status_code == 404

    def test_patch_and_delete_huge_order_id_are_404(self, client, db_session):
        assert client.patch(f"{BASE}/{self.HUGE}", json={"version": 1, "customerRef": "x"}).status_code == 404
        assert client.delete(f"{BASE}/{self.HUGE}").status_code == 404

    def test_remove_huge_beer_id_is_404(self, client, db_session, beer_a, beer_b):
        created = post_order(client, "cust-1", (beer_a.id, 1), (beer_b.id, 1)).get_json()
        resp = client.delete(f"{BASE}/{created['id']}/lines/{self.HUGE}?version=1")
        assert resp.status_code == 404

    def test_huge_beer_id_is_400(self, client, db_session):
        resp = post_order(client, "c", (self.HUGE, 1))

        assert resp.status_code == 400
        assert resp.get_json()["errors"] == {"items[0].beerId": "is out of range"}
        assert db_session.query(BeerOrder).count() == 0

    def test_huge_quantity_is_400(self, client, db_session, beer_a):
        resp = post_order(client, "c", (beer_a.id, self.HUGE))
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == {"items[0].quantity": "is out of range"}

    def test_huge_payment_amount_is_400(self, client, db_session, beer_a):
        created = post_order(client, "cust-1", (beer_a.id, 1)).get_json()

        resp = client.patch(f"{BASE}/{created['id']}", json={"version": 1, "paymentAmount": "1e30"})

        assert resp.status_code == 400
        assert "paymentAmount" in resp.get_json()["errors"]
        assert client.get(f"{BASE}/{created['id']}").get_json()["paymentAmount"] is None
