import threading
from typing import Dict, Optional, Union
from uuid import UUID

from models import Receipt


class ReceiptStore:
    """
    In-memory receipt storage for the lifetime of the process.

    Flask serves requests on several threads, so every access goes through
    a single lock.
    """

    def __init__(self):
        self._receipts: Dict[UUID, Receipt] = {}
        self._lock = threading.Lock()

    def append(self, receipt: Receipt) -> UUID:
        with self._lock:
            if receipt.id in self._receipts:
                raise ValueError(f"Error: receipt id already stored ({receipt.id})")
            self._receipts[receipt.id] = receipt
        return receipt.id

    def find_by_id(self, receipt_id: Union[str, UUID]) -> Optional[Receipt]:
        """ Returns the stored receipt, or None when the id is unknown or is not a UUID """
        if not isinstance(receipt_id, UUID):
            try:
                receipt_id = UUID(receipt_id)
            except ValueError:
                return None
        with self._lock:
            return self._receipts.get(receipt_id)

    def __len__(self):
        with self._lock:
            return len(self._receipts)
