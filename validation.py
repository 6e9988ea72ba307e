import re
from datetime import datetime
from typing import List, Optional

from models import CENTS_PER_DOLLAR, Item, ValidatedReceipt

REQUIRED_RECEIPT_ATTRIBUTES = ["retailer", "purchaseDate", "purchaseTime", "items", "total"]
REQUIRED_ITEM_ATTRIBUTES = ["shortDescription", "price"]
RECEIPT_DATE_TIME_FORMAT = '%Y-%m-%d %H:%M'

# All patterns are applied with fullmatch; ASCII keeps \w, \s and \d to their latin meaning
RETAILER_PATTERN = re.compile(r"[\w\s&-]+", re.ASCII)
DESCRIPTION_PATTERN = re.compile(r"[\w\s-]+", re.ASCII)
MONEY_PATTERN = re.compile(r"(\d+)\.(\d{2})", re.ASCII)
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
TIME_PATTERN = re.compile(r"\d{2}:\d{2}", re.ASCII)


class MalformedReceipt(ValueError):
    """ The request body does not have the shape of a receipt """


class ReceiptValidationError(ValueError):
    """
    Base class of the field-level validation failures.

    Each subclass names the field that failed through `kind`; the offending
    raw value is kept on `value` and echoed in the message.
    """
    kind = "InvalidReceipt"
    message = "Error: invalid receipt"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"{self.message} ({value})")


class InvalidRetailer(ReceiptValidationError):
    kind = "InvalidRetailer"
    message = "Error: invalid receipt retailer name"


class InvalidPurchaseDateTime(ReceiptValidationError):
    kind = "InvalidPurchaseDateTime"
    message = "Error: invalid receipt purchase date or time"


class InvalidItemDescription(ReceiptValidationError):
    kind = "InvalidItemDescription"
    message = "Error: invalid item description"


class InvalidPrice(ReceiptValidationError):
    kind = "InvalidPrice"
    message = "Error: invalid item price"


class InvalidTotal(ReceiptValidationError):
    kind = "InvalidTotal"
    message = "Error: invalid receipt total"


def check_payload_structure(receipt):
    """ Validates structure of the json input """
    if not isinstance(receipt, dict):
        raise MalformedReceipt("Error: invalid receipt format")
    for attribute in REQUIRED_RECEIPT_ATTRIBUTES:
        if attribute not in receipt:  # check if attribute is missing
            raise MalformedReceipt(f"Error: missing {attribute} in receipt")
        if attribute != "items" and not isinstance(receipt[attribute], str):  # check attribute type
            raise MalformedReceipt(f"Error: invalid {attribute} format")

    if not isinstance(receipt["items"], list):
        raise MalformedReceipt("Error: invalid receipt items list format")
    if len(receipt["items"]) < 1:
        raise MalformedReceipt("Error: receipt items list is empty")
    for item in receipt["items"]:
        if not isinstance(item, dict):
            raise MalformedReceipt("Error: invalid receipt item format")
        for attribute in REQUIRED_ITEM_ATTRIBUTES:
            if not isinstance(item.get(attribute), str):
                raise MalformedReceipt("Error: invalid receipt item format")


def parse_cents(amount: str) -> Optional[int]:
    """
    Converts a money string of the form '12.50' to integer cents.

    Returns None when the whole string is not digits, a point and exactly two
    digits, so '12.5', '12.500', '-1.00' and '.22' are all refused.
    """
    match = MONEY_PATTERN.fullmatch(amount)
    if match is None:
        return None
    dollars, cents = match.groups()
    try:
        return int(dollars) * CENTS_PER_DOLLAR + int(cents)
    except ValueError:  # digit strings past the int conversion limit
        return None


def validate_retailer(retailer: str) -> str:
    if not RETAILER_PATTERN.fullmatch(retailer):
        raise InvalidRetailer(retailer)
    return retailer


def validate_purchase_date_time(date: str, time: str) -> datetime:
    """ Combines purchase date and time into one timestamp, seconds always zero """
    if not DATE_PATTERN.fullmatch(date) or not TIME_PATTERN.fullmatch(time):
        raise InvalidPurchaseDateTime(f"{date} {time}")
    try:
        return datetime.strptime(f"{date} {time}", RECEIPT_DATE_TIME_FORMAT)
    except ValueError:
        raise InvalidPurchaseDateTime(f"{date} {time}")


def validate_item(item: dict) -> Item:
    """ Validates both the item description and item price formats """
    description = item["shortDescription"]
    if not DESCRIPTION_PATTERN.fullmatch(description) or not description.strip():
        raise InvalidItemDescription(description)
    price_cents = parse_cents(item["price"])
    if price_cents is None:
        raise InvalidPrice(item["price"])
    return Item(short_description=description, price_cents=price_cents)


def validate_total(total: str) -> int:
    total_cents = parse_cents(total)
    if total_cents is None:
        raise InvalidTotal(total)
    return total_cents


def validate_and_normalize(receipt) -> ValidatedReceipt:
    """
    Turns a deserialized receipt payload into a ValidatedReceipt.

    Fields are checked in order (retailer, purchase date and time, items,
    total) and the first failure is raised; nothing partial is returned.

    Raises:
        MalformedReceipt: the payload is missing fields or has the wrong types
        ReceiptValidationError: a field value is invalid
    """
    check_payload_structure(receipt)
    retailer = validate_retailer(receipt["retailer"])
    purchase_timestamp = validate_purchase_date_time(receipt["purchaseDate"], receipt["purchaseTime"])
    items: List[Item] = [validate_item(item) for item in receipt["items"]]
    total_cents = validate_total(receipt["total"])
    return ValidatedReceipt(
        retailer=retailer,
        purchase_timestamp=purchase_timestamp,
        items=tuple(items),
        total_cents=total_cents,
    )
