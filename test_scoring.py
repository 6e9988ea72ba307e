from datetime import datetime

import pytest

from models import Item, ValidatedReceipt
from scoring import (calculate_points, ceil_div, score_date_time, score_item, score_items, score_retailer,
                     score_total)
from validation import validate_and_normalize


def make_receipt(retailer="Target", timestamp=datetime(2022, 1, 2, 13, 13), items=(), total_cents=125):
    return ValidatedReceipt(retailer=retailer, purchase_timestamp=timestamp, items=tuple(items),
                            total_cents=total_cents)


def test_score_retailer_counts_only_letters_and_digits():
    assert score_retailer("Target") == 6
    assert score_retailer("M&M Corner Market") == 14
    assert score_retailer("7-Eleven_Store") == 12
    assert score_retailer("  - & ") == 0


@pytest.mark.parametrize("total_cents,points", [
    (10000, 75),
    (900, 75),
    (0, 75),
    (3535, 0),
    (125, 25),
    (1050, 25),
    (1001, 0),
])
def test_score_total(total_cents, points):
    assert score_total(total_cents) == points


@pytest.mark.parametrize("count,points", [(0, 0), (1, 0), (2, 5), (3, 5), (4, 10)])
def test_item_pair_bonus(count, points):
    items = [Item("ab", 100)] * count  # description length 2 earns no item bonus
    assert score_items(items) == points


@pytest.mark.parametrize("price_cents,points", [
    (1000, 2),
    (1001, 3),
    (999, 2),
    (500, 1),
    (501, 2),
    (649, 2),
    (1225, 3),
    (1200, 3),
    (0, 0),
    (1, 1),
])
def test_item_description_bonus_uses_true_ceiling(price_cents, points):
    assert score_item(Item("abc", price_cents)) == points


def test_item_description_bonus_uses_trimmed_length():
    assert score_item(Item("   Klarbrunn 12-PK 12 FL OZ  ", 1200)) == 3
    assert score_item(Item("Mountain Dew 12PK", 649)) == 0
    assert score_item(Item("  ab ", 5000)) == 0


def test_ceil_div():
    assert ceil_div(1000, 500) == 2
    assert ceil_div(1001, 500) == 3
    assert ceil_div(0, 500) == 0


def test_odd_day_and_hour_window_both_apply():
    assert score_date_time(datetime(2022, 1, 1, 14, 33)) == 16


@pytest.mark.parametrize("hour,minute,points", [
    (13, 59, 0),
    (14, 0, 10),
    (15, 59, 10),
    (16, 0, 0),
])
def test_hour_window_boundaries(hour, minute, points):
    assert score_date_time(datetime(2022, 1, 2, hour, minute)) == points


def test_calculate_points_end_to_end():
    validated = validate_and_normalize({
        "retailer": "Target",
        "purchaseDate": "2022-01-01",
        "purchaseTime": "13:01",
        "items": [
            {"shortDescription": "Mountain Dew 12PK", "price": "6.49"},
            {"shortDescription": "Emils Cheese Pizza", "price": "12.25"},
            {"shortDescription": "Knorr Creamy Chicken", "price": "1.26"},
            {"shortDescription": "Doritos Nacho Cheese", "price": "3.35"},
            {"shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ", "price": "12.00"}
        ],
        "total": "35.35"
    })
    # retailer 6, pairs 10, Emils Cheese Pizza 3, Klarbrunn 3, odd day 6
    assert calculate_points(validated) == 28


def test_calculate_points_is_deterministic():
    receipt = make_receipt(items=[Item("abc", 1001), Item("Gatorade", 225)], total_cents=10000)
    assert calculate_points(receipt) == calculate_points(receipt) == 6 + 75 + 5 + 3
