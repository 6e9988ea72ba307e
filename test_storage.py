from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from uuid import uuid4

import pytest

from models import Item, Receipt, ValidatedReceipt
from storage import ReceiptStore


def make_receipt(points=31):
    validated = ValidatedReceipt(retailer="Target", purchase_timestamp=datetime(2022, 1, 2, 13, 13),
                                 items=(Item("Pepsi - 12-oz", 125),), total_cents=125)
    return Receipt.from_validated(uuid4(), validated, points)


def test_append_and_find():
    store = ReceiptStore()
    receipt = make_receipt()
    receipt_id = store.append(receipt)
    assert receipt_id == receipt.id
    assert store.find_by_id(receipt_id) is receipt
    assert store.find_by_id(str(receipt_id)) is receipt
    assert len(store) == 1


def test_find_unknown_id():
    store = ReceiptStore()
    store.append(make_receipt())
    assert store.find_by_id(uuid4()) is None
    assert store.find_by_id(str(uuid4())) is None


@pytest.mark.parametrize("receipt_id", ["test", "", "1234", "not-a-uuid-at-all"])
def test_find_malformed_id_is_not_found(receipt_id):
    assert ReceiptStore().find_by_id(receipt_id) is None


def test_duplicate_id_rejected():
    store = ReceiptStore()
    receipt = make_receipt()
    store.append(receipt)
    with pytest.raises(ValueError):
        store.append(receipt)
    assert len(store) == 1


def test_stored_receipt_is_immutable():
    receipt = make_receipt()
    with pytest.raises(AttributeError):
        receipt.points = 100


def test_concurrent_appends():
    store = ReceiptStore()
    receipts = [make_receipt(points=i) for i in range(2000)]
    with ThreadPoolExecutor(max_workers=50) as pool:
        ids = list(pool.map(store.append, receipts))
    assert len(set(ids)) == len(store) == 2000
    assert all(store.find_by_id(r.id).points == r.points for r in receipts)
