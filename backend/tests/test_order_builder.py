# Overview: Pytest coverage for building unsaved order aggregates.

import pytest

from brewhouse.models import BeerOrderLineStatus, BeerOrderStatus
from brewhouse.services.order_builder import OrderAssemblyError, build_line, build_order
from brewhouse.services.order_commands import OrderItem, PlaceOrderCommand


class TestBuildOrder:

    def test_builds_new_order_with_new_lines(self, db_session, beer_a, beer_b):
        command = PlaceOrderCommand(
            customer_ref="cust-1",
            items=[OrderItem(beer_a.id, 3), OrderItem(beer_b.id, 2)],
        )

        order = build_order(command, {beer_a.id: beer_a, beer_b.id: beer_b})

        assert order.id is None
        assert order.customer_ref == "cust-1"
        assert order.status is BeerOrderStatus.NEW
        assert order.payment_amount is None
        assert [(l.beer_id, l.order_quantity) for l in order.lines] == [(beer_a.id, 3), (beer_b.id, 2)]
        assert all(l.status is BeerOrderLineStatus.NEW for l in order.lines)
        assert all(l.order is order for l in order.lines)
        assert all(l.beer_order_id is None for l in order.lines)

    def test_unresolved_beer_is_an_assembly_error(self, db_session, beer_a):
        """The builder never silently drops an item."""
        command = PlaceOrderCommand(customer_ref="cust", items=[OrderItem(beer_a.id, 1), OrderItem(12345, 1)])

        with pytest.raises(OrderAssemblyError):
            build_order(command, {beer_a.id: beer_a})

    def test_build_line_links_beer(self, db_session, beer_a):
        line = build_line(OrderItem(beer_a.id, 4), {beer_a.id: beer_a})
        assert line.beer is beer_a
        assert line.order_quantity == 4
