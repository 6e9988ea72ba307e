import copy
import json
import uuid
import pytest
from concurrent.futures import ThreadPoolExecutor
from app import create_app
from storage import ReceiptStore

valid_receipts = {
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-01",
        "purchaseTime": "13:01",
        "items": [
            {
                "shortDescription": "Mountain Dew 12PK",
                "price": "6.49"
            }, {
                "shortDescription": "Emils Cheese Pizza",
                "price": "12.25"
            }, {
                "shortDescription": "Knorr Creamy Chicken",
                "price": "1.26"
            }, {
                "shortDescription": "Doritos Nacho Cheese",
                "price": "3.35"
            }, {
                "shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ",
                "price": "12.00"
            }
        ],
        "total": "35.35"
    }): 28,
    json.dumps({
        "retailer": "M&M Corner Market",
        "purchaseDate": "2022-03-20",
        "purchaseTime": "14:33",
        "items": [
            {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }
        ],
        "total": "9.00"
    }): 109,
    json.dumps({
        "retailer": "Walgreens",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "08:13",
        "total": "2.65",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
            {"shortDescription": "Dasani", "price": "1.40"}
        ]
    }): 15,
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "13:13",
        "total": "1.25",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"}
        ]
    }): 31
}

required_receipt_attributes = ["retailer", "purchaseDate", "purchaseTime", "items", "total"]


@pytest.fixture
def store():
    return ReceiptStore()


@pytest.fixture
def app(store):
    app = create_app(store)
    app.config['DEBUG'] = True
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def simple_receipt_skeleton():
    return {
        "retailer": "Target",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "13:13",
        "total": "1.25",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"}
        ]
    }


def post_receipt(client, receipt):
    return client.post('/receipts/process', content_type='application/json', data=json.dumps(receipt))


def test_process_valid_receipts(client):
    for test_json, expected_points in valid_receipts.items():
        expected = {"points": expected_points}
        process_response = client.post('/receipts/process', content_type='application/json', data=test_json)
        assert process_response.status_code == 200
        receipt_id = json.loads(process_response.data)["id"]
        uuid.UUID(receipt_id)
        get_response = client.get(f'/receipts/{receipt_id}/points')
        assert get_response.status_code == 200
        assert expected == json.loads(get_response.data)


def test_process_receipts_unique_ids(client, simple_receipt_skeleton):
    receipt_ids = []
    for i in range(10):
        process_response = post_receipt(client, simple_receipt_skeleton)
        receipt_ids.append(json.loads(process_response.data)["id"])
    assert len(set(receipt_ids)) == len(receipt_ids)


def test_process_receipts_invalid_retailer_name(client, simple_receipt_skeleton):
    invalid_names = ["", "Retailer@123", "Shop*Name", "Store#1", "Target!"]
    for name in invalid_names:
        expected = {"error": f"Error: invalid receipt retailer name ({name})"}
        simple_receipt_skeleton["retailer"] = name
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected


def test_process_receipts_whitespace_retailer_name_is_accepted(client, simple_receipt_skeleton):
    simple_receipt_skeleton["retailer"] = "   "
    process_response = post_receipt(client, simple_receipt_skeleton)
    assert process_response.status_code == 200
    receipt_id = json.loads(process_response.data)["id"]
    get_response = client.get(f'/receipts/{receipt_id}/points')
    assert json.loads(get_response.data) == {"points": 25}


def test_process_receipts_invalid_purchase_date(client, simple_receipt_skeleton):
    invalid_dates = ["test", "0000-01-01", "2023-15-15", "2023-10-99", "2022-13-01",
                     "2022-1-01", "dummydummydummy", "", '9999-99-99', "2023-02-29"]
    for date in invalid_dates:
        expected = {"error": f"Error: invalid receipt purchase date or time ({date} 13:13)"}
        simple_receipt_skeleton["purchaseDate"] = date
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_purchase_time(client, simple_receipt_skeleton):
    invalid_times = ["test", "13:99", "99:13", "25:00", "24:00", "dummydummydummy", "", '13-13', "1:13", "13:13:00"]
    for time in invalid_times:
        expected = {"error": f"Error: invalid receipt purchase date or time (2022-01-02 {time})"}
        simple_receipt_skeleton["purchaseTime"] = time
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_attribute_formats_except_items(client, simple_receipt_skeleton):
    invalid_elements = [None, [], 25, 3.88, {}]
    for attribute in required_receipt_attributes:
        if attribute != "items":
            original = simple_receipt_skeleton[attribute]
            expected = {"error": f"Error: invalid {attribute} format"}
            for elem in invalid_elements:
                simple_receipt_skeleton[attribute] = elem
                process_response = post_receipt(client, simple_receipt_skeleton)
                assert process_response.status_code == 400
                assert json.loads(process_response.data) == expected
            simple_receipt_skeleton[attribute] = original


def test_process_receipts_missing_attributes(client, simple_receipt_skeleton):
    for attribute in required_receipt_attributes:
        receipt = copy.deepcopy(simple_receipt_skeleton)
        del receipt[attribute]
        process_response = post_receipt(client, receipt)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == {"error": f"Error: missing {attribute} in receipt"}


def test_process_receipts_invalid_items_format(client, simple_receipt_skeleton):
    invalid_elements = [None, 25, 3.88, {}, ""]
    expected = {"error": "Error: invalid receipt items list format"}
    for elem in invalid_elements:
        simple_receipt_skeleton["items"] = elem
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_items_list_length(client, simple_receipt_skeleton):
    expected = {"error": "Error: receipt items list is empty"}
    simple_receipt_skeleton["items"] = []
    process_response = post_receipt(client, simple_receipt_skeleton)
    assert process_response.status_code == 400
    assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_item_formats(client, simple_receipt_skeleton):
    expected = {"error": "Error: invalid receipt item format"}
    for elem in [None, 25, 3.88, [], ""]:
        receipt = copy.deepcopy(simple_receipt_skeleton)
        receipt["items"][0] = elem
        process_response = post_receipt(client, receipt)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected
    for elem in [None, 25, 3.88, [], {}]:
        for attribute in ["shortDescription", "price"]:
            receipt = copy.deepcopy(simple_receipt_skeleton)
            receipt["items"][0][attribute] = elem
            process_response = post_receipt(client, receipt)
            assert process_response.status_code == 400
            assert json.loads(process_response.data) == expected
    receipt = copy.deepcopy(simple_receipt_skeleton)
    del receipt["items"][0]["price"]
    process_response = post_receipt(client, receipt)
    assert process_response.status_code == 400
    assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_item_descriptions(client, simple_receipt_skeleton):
    invalid_descriptions = ["", "   ", "???", "&&&&", "<<<<>>>>", "\\\\", "Pepsi & Co"]
    for description in invalid_descriptions:
        expected = {"error": f"Error: invalid item description ({description})"}
        simple_receipt_skeleton["items"][0]["shortDescription"] = description
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_item_price(client, simple_receipt_skeleton):
    invalid_prices = ["test", "0", "333", "", "5.310", ".22", "1.5", "-1.00", "1.00 "]
    for price in invalid_prices:
        expected = {"error": f"Error: invalid item price ({price})"}
        simple_receipt_skeleton["items"][0]["price"] = price
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_total(client, simple_receipt_skeleton):
    invalid_totals = ["test", "0", "333", "", "5.310", ".22", "35.3", "35.350", "-1.25", "1.25\n"]
    for total in invalid_totals:
        expected = {"error": f"Error: invalid receipt total ({total})"}
        simple_receipt_skeleton["total"] = total
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected


def test_process_receipts_reports_first_invalid_field(client, simple_receipt_skeleton):
    simple_receipt_skeleton["retailer"] = "Target!"
    simple_receipt_skeleton["total"] = "1.2"
    process_response = post_receipt(client, simple_receipt_skeleton)
    assert json.loads(process_response.data) == {"error": "Error: invalid receipt retailer name (Target!)"}


def test_process_receipts_invalid_request_body(client, store):
    for body in ["not json", "{", "null"]:
        process_response = client.post('/receipts/process', content_type='application/json', data=body)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == {"error": "Error: invalid request body"}
    process_response = client.post('/receipts/process', content_type='text/plain', data="hello")
    assert process_response.status_code == 400
    process_response = client.post('/receipts/process', content_type='application/json', data="[]")
    assert process_response.status_code == 400
    assert json.loads(process_response.data) == {"error": "Error: invalid receipt format"}
    assert len(store) == 0


def test_rejected_receipts_are_not_stored(client, store, simple_receipt_skeleton):
    simple_receipt_skeleton["total"] = "oops"
    post_receipt(client, simple_receipt_skeleton)
    assert len(store) == 0


def test_get_points_nonexistent_id(client):
    res = client.get('/receipts/test/points')
    assert res.status_code == 404
    expected = {'error': 'ERROR: receipt id not found (test)'}
    assert json.loads(res.data) == expected


def test_get_points_unknown_uuid(client):
    receipt_id = str(uuid.uuid4())
    res = client.get(f'/receipts/{receipt_id}/points')
    assert res.status_code == 404
    assert json.loads(res.data) == {'error': f'ERROR: receipt id not found ({receipt_id})'}


def test_get_points_idempotency(client, simple_receipt_skeleton):
    process_response = post_receipt(client, simple_receipt_skeleton)
    receipt_id = json.loads(process_response.data)["id"]
    for i in range(5):
        get_response = client.get(f'/receipts/{receipt_id}/points')
        assert get_response.status_code == 200
        assert json.loads(get_response.data)["points"] == 31


def test_health_check(client, simple_receipt_skeleton):
    assert json.loads(client.get('/health').data) == {"status": "healthy", "receipts": 0}
    post_receipt(client, simple_receipt_skeleton)
    assert json.loads(client.get('/health').data) == {"status": "healthy", "receipts": 1}


def test_process_receipts_concurrency(client, store, simple_receipt_skeleton):
    params = [simple_receipt_skeleton] * 3000

    def test_post(json_param):
        return client.post('/receipts/process', content_type='application/json', json=json_param).get_json()["id"]

    with ThreadPoolExecutor(max_workers=50) as pool:
        receipt_ids = list(pool.map(test_post, params))
    assert len(set(receipt_ids)) == 3000
    assert len(store) == 3000


def test_get_points_concurrency(client, simple_receipt_skeleton):
    process_response = post_receipt(client, simple_receipt_skeleton)
    receipt_id = json.loads(process_response.data)["id"]
    params = [receipt_id] * 3000

    def test_get(id_param):
        return client.get(f'/receipts/{id_param}/points').get_json()["points"]

    with ThreadPoolExecutor(max_workers=50) as pool:
        assert set(pool.map(test_get, params)) == {31}
