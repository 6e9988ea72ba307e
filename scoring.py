import logging
from typing import Sequence

from models import Item, ValidatedReceipt

logger = logging.getLogger(__name__)

POINTS_RETAILER_NAME_ALPHANUM_CHARACTER = 1
POINTS_TOTAL_HAS_NO_CENTS = 50
POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS = 25
POINTS_ITEMS_COUNT = 5
POINTS_ODD_PURCHASE_DAY = 6
POINTS_VALID_PURCHASE_HOUR = 10
# ceil(price * 0.2) == ceil(cents / 500), kept in integers
ITEM_DESCRIPTION_CENTS_PER_POINT = 500
REWARD_ITEM_DESCRIPTION_LENGTH_FACTOR = 3
REWARD_HOUR_START = 14
REWARD_HOUR_END = 16
ASCII_ALPHANUMERICS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789")


def score_retailer(retailer_name: str) -> int:
    """ One point per ASCII letter or digit; spaces, hyphens and ampersands earn nothing """
    return sum(POINTS_RETAILER_NAME_ALPHANUM_CHARACTER for c in retailer_name if c in ASCII_ALPHANUMERICS)


def score_total(total_cents: int) -> int:
    points = 0
    if total_cents % 100 == 0:
        points += POINTS_TOTAL_HAS_NO_CENTS
    if total_cents % 25 == 0:
        points += POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS
    return points


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def score_item(item: Item) -> int:
    if len(item.short_description.strip()) % REWARD_ITEM_DESCRIPTION_LENGTH_FACTOR != 0:
        return 0
    return ceil_div(item.price_cents, ITEM_DESCRIPTION_CENTS_PER_POINT)


def score_items(items: Sequence[Item]) -> int:
    """ Five points per pair of items plus the description-length bonus of each item """
    points = (len(items) // 2) * POINTS_ITEMS_COUNT
    return points + sum(score_item(item) for item in items)


def score_date_time(purchase_timestamp) -> int:
    points = 0
    if purchase_timestamp.day % 2 != 0:
        points += POINTS_ODD_PURCHASE_DAY
    if REWARD_HOUR_START <= purchase_timestamp.hour < REWARD_HOUR_END:
        points += POINTS_VALID_PURCHASE_HOUR
    return points


def calculate_points(receipt: ValidatedReceipt) -> int:
    """ Calculates points earned from each component of a validated receipt """
    retailer_points = score_retailer(receipt.retailer)
    total_points = score_total(receipt.total_cents)
    item_points = score_items(receipt.items)
    date_time_points = score_date_time(receipt.purchase_timestamp)
    logger.debug("points breakdown: retailer=%d total=%d items=%d date_time=%d",
                 retailer_points, total_points, item_points, date_time_points)
    return retailer_points + total_points + item_points + date_time_points
