import logging
import os
from uuid import uuid4

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, request

from models import Receipt
from scoring import calculate_points
from storage import ReceiptStore
from validation import ReceiptValidationError, validate_and_normalize

load_dotenv()

HOST = os.getenv("RECEIPTS_HOST", "0.0.0.0")
PORT = int(os.getenv("RECEIPTS_PORT", "5000"))
LOG_LEVEL = os.getenv("RECEIPTS_LOG_LEVEL", "INFO").upper()
STORE_EXTENSION = "receipt_store"

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

receipts_bp = Blueprint("receipts", __name__)


def get_store() -> ReceiptStore:
    return current_app.extensions[STORE_EXTENSION]


@receipts_bp.route('/receipts/process', methods=['POST'])
def process_receipt():
    """
    Router for receipt processing requests. The input JSON is validated and
    normalized, points are calculated once, and the receipt is stored under a
    newly generated id which is returned to the user.

    Returns:
        400 Error if input JSON is invalid
        200 OK and generated receipt id if input JSON is valid
    """
    payload = request.get_json(silent=True)
    if payload is None:
        logger.warning("Rejected receipt: request body is not JSON")
        return jsonify({"error": "Error: invalid request body"}), 400
    try:
        validated = validate_and_normalize(payload)
    except ReceiptValidationError as e:
        logger.warning("Rejected receipt (%s): %s", e.kind, e)
        return jsonify({"error": str(e)}), 400
    except ValueError as e:
        logger.warning("Rejected receipt: %s", e)
        return jsonify({"error": str(e)}), 400

    receipt = Receipt.from_validated(uuid4(), validated, calculate_points(validated))
    receipt_id = get_store().append(receipt)
    logger.info("Processed receipt %s from %r for %d points", receipt_id, receipt.retailer, receipt.points)
    return jsonify({"id": str(receipt_id)})


@receipts_bp.route('/receipts/<receipt_id>/points', methods=['GET'])
def get_points(receipt_id):
    """
    Router for receipt points lookups. The receipt id is used to look up
    the receipt in the application's memory; ids that are not UUIDs are
    simply not found.

    Returns:
        404 Error if the receipt id is not found
        200 OK and the points computed when the receipt was processed
    """
    receipt = get_store().find_by_id(receipt_id)
    if receipt is None:
        logger.info("No receipt found for id %s", receipt_id)
        return jsonify({"error": f"ERROR: receipt id not found ({receipt_id})"}), 404
    return jsonify({"points": receipt.points})


@receipts_bp.route('/health', methods=['GET'])
def health_check():
    return jsonify({"status": "healthy", "receipts": len(get_store())})


def create_app(store=None) -> Flask:
    """ Builds the Flask application around a receipt store, a fresh one by default """
    app = Flask(__name__)
    app.extensions[STORE_EXTENSION] = store if store is not None else ReceiptStore()
    app.register_blueprint(receipts_bp)
    return app


flask_app = create_app()


if __name__ == '__main__':
    flask_app.run(host=HOST, port=PORT, threaded=True)
    # threaded=True lets Flask handle requests concurrently; ReceiptStore locks its own state
