"""Application tests for stock reservation against the configured store."""

import pytest
from ordering.catalog.reader import CatalogReader
from ordering.errors import CompensationFailure, InvalidLineItem, OutOfStock, ProductNotFound, StockContention
from ordering.inventory.reservation import StockReservation


class _AlwaysLosesRace:
    def compare_and_set_stock(self, *args, **kwargs):
        return False


class _ContendedReservation(StockReservation):
    @property
    def _products(self):
        return _AlwaysLosesRace()


class _InterleavingCatalog(CatalogReader):
    """Runs ``competing`` right after the first product read, before the caller writes."""

    def __init__(self, competing):
        self.competing = competing
        self.fired = False

    def get(self, product_id, include_inactive=False):
        product = super().get(product_id, include_inactive=include_inactive)
        if not self.fired:
            self.fired = True
            self.competing()
        return product


class TestReserve:
    def test_decrements_stock_and_increments_sold(self, make_product, stock_of):
        product = make_product(stock=5)

        reserved = StockReservation().reserve(product.id, 3)

        assert stock_of(product.id) == (2, 3)
        assert reserved.quantity == 3
        assert reserved.unit_price == product.price
        assert reserved.name == product.name

    def test_can_take_the_last_unit(self, make_product, stock_of):
        product = make_product(stock=1)
        StockReservation().reserve(product.id, 1)
        assert stock_of(product.id) == (0, 1)

    def test_out_of_stock_takes_nothing(self, make_product, stock_of):
        product = make_product(stock=2)

        with pytest.raises(OutOfStock) as exc:
            StockReservation().reserve(product.id, 3)

        assert exc.value.requested == 3
        assert exc.value.available == 2
        assert stock_of(product.id) == (2, 0)

    def test_unknown_product(self):
        with pytest.raises(ProductNotFound) as exc:
            StockReservation().reserve("prod-404", 1)
        assert exc.value.product_id == "prod-404"

    @pytest.mark.parametrize("quantity", [0, -2, 1.5, True])
    def test_rejects_bad_quantity(self, make_product, stock_of, quantity):
        product = make_product(stock=5)
        with pytest.raises(InvalidLineItem):
            StockReservation().reserve(product.id, quantity)
        assert stock_of(product.id) == (5, 0)

    def test_inactive_product_cannot_be_reserved(self, make_product, stock_of):
        from ordering.catalog.product import Product
        from protean import current_domain

        product = make_product(stock=5)
        current_domain.repository_for(Product).set_active(product.id, False)

        with pytest.raises(ProductNotFound):
            StockReservation().reserve(product.id, 1)
        assert stock_of(product.id) == (5, 0)

    def test_lost_race_rereads_and_reports_out_of_stock(self, make_product, stock_of):
        product = make_product(stock=5)

        def competitor():
            StockReservation().reserve(product.id, 3)

        reservation = StockReservation(catalog=_InterleavingCatalog(competitor))
        with pytest.raises(OutOfStock):
            reservation.reserve(product.id, 3)

        assert stock_of(product.id) == (2, 3)

    def test_lost_race_retries_when_stock_remains(self, make_product, stock_of):
        product = make_product(stock=5)

        def competitor():
            StockReservation().reserve(product.id, 1)

        reservation = StockReservation(catalog=_InterleavingCatalog(competitor))
        reservation.reserve(product.id, 3)

        assert stock_of(product.id) == (1, 4)

    def test_exhausted_retries_raise_contention(self, make_product, stock_of):
        product = make_product(stock=5)

        with pytest.raises(StockContention) as exc:
            _ContendedReservation(max_attempts=3).reserve(product.id, 1)

        assert exc.value.attempts == 3
        assert stock_of(product.id) == (5, 0)


class TestRelease:
    def test_restores_stock_and_sold(self, make_product, stock_of):
        product = make_product(stock=5)
        reservation = StockReservation()
        reserved = reservation.reserve(product.id, 3)

        reservation.release(reserved)

        assert stock_of(product.id) == (5, 0)
        assert reserved.released is True

    def test_second_release_is_a_no_op(self, make_product, stock_of):
        product = make_product(stock=5)
        reservation = StockReservation()
        reserved = reservation.reserve(product.id, 2)

        reservation.release(reserved)
        reservation.release(reserved)

        assert stock_of(product.id) == (5, 0)

    def test_releases_stock_of_deactivated_product(self, make_product, stock_of):
        from ordering.catalog.product import Product
        from protean import current_domain

        product = make_product(stock=5)
        reservation = StockReservation()
        reserved = reservation.reserve(product.id, 2)
        current_domain.repository_for(Product).set_active(product.id, False)

        reservation.release(reserved)

        assert stock_of(product.id) == (5, 0)

    def test_missing_product_is_a_compensation_failure(self, make_product):
        product = make_product(stock=5)
        reservation = StockReservation()
        reserved = reservation.reserve(product.id, 2)
        reserved.product_id = "prod-gone"

        with pytest.raises(CompensationFailure) as exc:
            reservation.release(reserved)
        assert exc.value.quantity == 2
        assert reserved.released is False

    def test_sold_counter_below_quantity_is_a_compensation_failure(self, make_product, stock_of):
        from ordering.catalog.product import Product
        from protean import current_domain

        product = make_product(stock=5)
        reservation = StockReservation()
        reserved = reservation.reserve(product.id, 3)
        current_domain.repository_for(Product).compare_and_set_stock(
            product.id, expected_stock=2, expected_sold=3, stock=2, sold=1
        )

        with pytest.raises(CompensationFailure) as exc:
            reservation.release(reserved)

        assert "sold counter is 1" in exc.value.reason
        assert stock_of(product.id) == (2, 1)
        assert reserved.released is False

    def test_exhausted_retries_are_a_compensation_failure(self, make_product):
        product = make_product(stock=5)
        reserved = StockReservation().reserve(product.id, 2)

        with pytest.raises(CompensationFailure):
            _ContendedReservation(max_attempts=2).release(reserved)


class TestRestock:
    def test_adds_stock(self, make_product, stock_of):
        product = make_product(stock=1)
        assert StockReservation().restock(product.id, 9) == 10
        assert stock_of(product.id) == (10, 0)

    def test_keeps_sold_counter(self, make_product, stock_of):
        product = make_product(stock=5)
        reservation = StockReservation()
        reservation.reserve(product.id, 5)

        reservation.restock(product.id, 3)

        assert stock_of(product.id) == (3, 5)

    def test_rejects_bad_quantity(self, make_product):
        product = make_product(stock=1)
        with pytest.raises(InvalidLineItem):
            StockReservation().restock(product.id, 0)
