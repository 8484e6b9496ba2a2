"""ProductStore tests."""

import io
import json
import threading

import pytest

from retail_aggregator.errors import SnapshotError
from retail_aggregator.store.memory import ProductStore

from helpers import make_product


class TestUpsert:

    def test_new_products_get_both_timestamps(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([make_product("Fender", "Jazzmaster")])

        [product] = store.find_all()
        assert product.created_at is not None
        assert product.created_at == product.updated_at

    def test_created_at_is_preserved(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([make_product("Fender", "Jazzmaster", price=1999.0)])
        first = store.find_all()[0]

        store.upsert([make_product("Fender", "Jazzmaster", price=1899.0)])
        second = store.find_all()[0]

        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at
        assert second.price == 1899.0

    def test_identical_batch_twice_keeps_content(self, clock):
        store = ProductStore(clock=clock)
        batch = [make_product("Fender", "Jazzmaster", price=1899.0), make_product("Gretsch", "G2622LH", price=499.0)]

        store.upsert(batch)
        before = {p.key: (p.price, p.created_at) for p in store.find_all()}
        store.upsert(batch)
        after = {p.key: (p.price, p.created_at) for p in store.find_all()}

        assert before == after
        assert len(store) == 2

    def test_duplicate_keys_in_batch_last_wins(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([
            make_product("Fender", "Jazzmaster", price=1999.0),
            make_product("Fender", "Jazzmaster", price=1899.0),
        ])

        products = store.find_all()
        assert len(products) == 1
        assert products[0].price == 1899.0

    def test_same_model_at_different_retailers_is_kept_apart(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([
            make_product("Fender", "Jazzmaster", retailer="Musik Produktiv"),
            make_product("Fender", "Jazzmaster", retailer="Thomann"),
        ])
        assert len(store) == 2

    def test_caller_products_are_not_modified(self, clock):
        store = ProductStore(clock=clock)
        product = make_product("Fender", "Jazzmaster")
        store.upsert([product])

        assert product.created_at is None
        assert store.get(product.key).created_at is not None

    def test_failing_item_leaves_store_unchanged(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([make_product("Gretsch", "G2622LH", price=499.0)])
        before = store.find_all()

        with pytest.raises(TypeError):
            store.upsert([
                make_product("Fender", "Jazzmaster", price=1899.0),
                make_product(None, "Telecaster"),
            ])

        assert store.find_all() == before
        assert store.get(make_product("Fender", "Jazzmaster").key) is None

    def test_batch_shares_one_timestamp(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([make_product("A", "1"), make_product("B", "2")])

        stamps = {p.updated_at for p in store.find_all()}
        assert len(stamps) == 1


class TestFindAll:

    def test_sorted_by_price(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([
            make_product("A", "1", price=300.0),
            make_product("B", "2", price=100.0),
            make_product("C", "3", price=200.0),
        ])
        assert [p.price for p in store.find_all()] == [100.0, 200.0, 300.0]

    def test_ties_are_stable_between_calls(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([make_product(str(i), "same price", price=10.0) for i in range(20)])

        assert store.find_all() == store.find_all()

    def test_empty(self):
        assert ProductStore().find_all() == []


class TestSnapshot:

    def test_round_trip(self, clock):
        store = ProductStore(clock=clock)
        store.upsert([
            make_product("Fender", "Jazzmaster", price=1899.0, category="E-Gitarren", is_available=True,
                         availability_info="sofort lieferbar", product_url="https://example.test/jm"),
            make_product("Gretsch", "G2622LH", price=499.0),
        ])
        sink = io.StringIO()
        store.dump(sink)

        restored = ProductStore()
        restored.restore(io.StringIO(sink.getvalue()))

        assert set(restored.find_all()) == set(store.find_all())

    def test_dump_is_keyed_json(self, clock):
        store = ProductStore(clock=clock)
        product = make_product("Fender", "Jazzmaster")
        store.upsert([product])
        sink = io.StringIO()
        store.dump(sink)

        data = json.loads(sink.getvalue())
        assert list(data) == [product.key]
        assert data[product.key]["manufacturer"] == "Fender"
        assert data[product.key]["created_at"] == "2024-03-01T12:00:00+00:00"

    def test_restore_replaces_instead_of_merging(self, clock):
        source = ProductStore(clock=clock)
        source.upsert([make_product("Gretsch", "G2622LH")])
        sink = io.StringIO()
        source.dump(sink)

        store = ProductStore(clock=clock)
        store.upsert([make_product("Fender", "Jazzmaster")])
        store.restore(io.StringIO(sink.getvalue()))

        assert [p.manufacturer for p in store.find_all()] == ["Gretsch"]

    @pytest.mark.parametrize("payload", [
        "{not json",
        "[]",
        '{"k": {"retailer": "Test"}}',
        '{"k": {"retailer": "T", "manufacturer": "M", "model": "X", "price": 1, "created_at": 5}}',
    ])
    def test_malformed_restore_leaves_store_unchanged(self, clock, payload):
        store = ProductStore(clock=clock)
        store.upsert([make_product("Fender", "Jazzmaster")])
        before = store.find_all()

        with pytest.raises(SnapshotError):
            store.restore(io.StringIO(payload))

        assert store.find_all() == before

    def test_dump_to_path_and_restore_from_path(self, clock, tmp_path):
        store = ProductStore(clock=clock)
        store.upsert([make_product("Fender", "Jazzmaster")])
        path = tmp_path / "snapshots" / "products.json"

        store.dump_to_path(path)
        restored = ProductStore()
        restored.restore_from_path(path)

        assert restored.find_all() == store.find_all()
        assert [p.name for p in path.parent.iterdir()] == ["products.json"]

    def test_failed_dump_keeps_previous_snapshot(self, clock, tmp_path):
        class BrokenSerializer:
            def dump(self, products, sink):
                sink.write("{partial")
                raise SnapshotError("boom")

            def load(self, source):
                return {}

        path = tmp_path / "products.json"
        path.write_text("{}", encoding="utf-8")
        store = ProductStore(serializer=BrokenSerializer(), clock=clock)

        with pytest.raises(SnapshotError):
            store.dump_to_path(path)

        assert path.read_text(encoding="utf-8") == "{}"
        assert [p.name for p in tmp_path.iterdir()] == ["products.json"]


class TestConcurrency:

    def test_readers_never_see_partial_batches(self):
        store = ProductStore()
        batches = [[make_product(str(i), str(n), price=float(n)) for i in range(50)] for n in range(20)]
        sizes = []
        errors = []

        def writer():
            for batch in batches:
                store.upsert(batch)

        def reader():
            try:
                for _ in range(200):
                    sizes.append(len(store.find_all()))
            except Exception as exc:  # pragma: no cover - reported below
                errors.append(exc)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert all(size % 50 == 0 for size in sizes)
        assert len(store) == 50 * 20
