import json

from tests.conftest import VALID_SIGNATURE, register


def _fill_cart_and_order(client, headers, kitchen):
    client.post("/cart", headers=headers, json={"foodItemId": kitchen["roll_id"], "quantity": 2})
    client.post("/cart", headers=headers, json={"foodItemId": kitchen["chai_id"], "quantity": 1})

    summary = client.get("/cart/summary", headers=headers).json()
    items = client.get("/cart", headers=headers).json()
    res = client.post("/orders", headers=headers, json={
        "restaurantId": kitchen["restaurant_id"],
        "items": [
            {"foodItemId": i["foodItemId"], "quantity": i["quantity"], "price": i["foodItem"]["price"]}
            for i in items
        ],
        "totalAmount": summary["total"],
        "deliveryFee": summary["deliveryFee"],
        "deliveryAddress": "221B MG Road, Bengaluru",
    })
    assert res.status_code == 200
    return res.json()


def test_order_to_payment(client, kitchen, processor):
    headers = register(client)
    order = _fill_cart_and_order(client, headers, kitchen)
    assert (order["totalAmount"], order["deliveryFee"]) == (330, 0)

    res = client.post("/create-payment-intent", headers=headers,
                      json={"orderId": order["id"], "amount": order["totalAmount"]})
    assert res.status_code == 200
    assert res.json() == {"clientSecret": "pi_1_secret_abc"}
    assert processor.created[0]["amount"] == 33000

    processor.set_status("pi_1", "succeeded")
    res = client.post("/confirm-payment", headers=headers, json={"paymentIntentId": "pi_1"})
    assert res.status_code == 200
    assert res.json()["success"] is True

    paid = client.get(f"/orders/{order['id']}", headers=headers).json()
    assert paid["status"] == "confirmed"
    assert paid["paymentStatus"] == "paid"
    assert paid["stripePaymentIntentId"] == "pi_1"
    assert client.get("/cart", headers=headers).json() == []


def test_unfinished_payment_is_reported(client, kitchen):
    headers = register(client)
    order = _fill_cart_and_order(client, headers, kitchen)
    client.post("/create-payment-intent", headers=headers, json={"orderId": order["id"], "amount": 330})

    res = client.post("/confirm-payment", headers=headers, json={"paymentIntentId": "pi_1"})
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Payment not completed"}


def test_intent_amount_must_match(client, kitchen, processor):
    headers = register(client)
    order = _fill_cart_and_order(client, headers, kitchen)

    res = client.post("/create-payment-intent", headers=headers, json={"orderId": order["id"], "amount": 10})
    assert res.status_code == 400
    assert processor.created == []


def test_processor_outage_is_a_server_error(client, kitchen, processor):
    headers = register(client)
    order = _fill_cart_and_order(client, headers, kitchen)
    processor.fail_with = "connection reset"

    res = client.post("/create-payment-intent", headers=headers, json={"orderId": order["id"], "amount": 330})
    assert res.status_code == 500
    assert res.json() == {"message": "Error creating payment intent: connection reset"}

    res = client.post("/confirm-payment", headers=headers, json={"paymentIntentId": "pi_1"})
    assert res.status_code == 500


def test_cannot_confirm_another_users_payment(client, kitchen, processor):
    owner = register(client)
    other = register(client, email="other@fastfeast.com", username="other")
    order = _fill_cart_and_order(client, owner, kitchen)
    client.post("/create-payment-intent", headers=owner, json={"orderId": order["id"], "amount": 330})
    processor.set_status("pi_1", "succeeded")

    res = client.post("/confirm-payment", headers=other, json={"paymentIntentId": "pi_1"})
    assert res.status_code == 404
    assert client.get(f"/orders/{order['id']}", headers=owner).json()["paymentStatus"] == "pending"


def test_webhook_records_failed_payment(client, kitchen):
    headers = register(client)
    order = _fill_cart_and_order(client, headers, kitchen)
    client.post("/create-payment-intent", headers=headers, json={"orderId": order["id"], "amount": 330})
    body = json.dumps({"type": "payment_intent.payment_failed", "data": {"object": {"id": "pi_1"}}})

    res = client.post("/stripe-webhook", content=body, headers={"stripe-signature": "forged"})
    assert res.status_code == 400

    res = client.post("/stripe-webhook", content=body, headers={"stripe-signature": VALID_SIGNATURE})
    assert res.status_code == 200
    assert res.json() == {"received": True}
    assert client.get(f"/orders/{order['id']}", headers=headers).json()["paymentStatus"] == "failed"


def test_payment_succeeds_after_a_decline(client, kitchen, processor):
    headers = register(client)
    order = _fill_cart_and_order(client, headers, kitchen)
    client.post("/create-payment-intent", headers=headers, json={"orderId": order["id"], "amount": 330})
    declined = json.dumps({"type": "payment_intent.payment_failed", "data": {"object": {"id": "pi_1"}}})
    client.post("/stripe-webhook", content=declined, headers={"stripe-signature": VALID_SIGNATURE})

    processor.set_status("pi_1", "succeeded")
    res = client.post("/confirm-payment", headers=headers, json={"paymentIntentId": "pi_1"})

    assert res.status_code == 200
    assert res.json()["success"] is True
    paid = client.get(f"/orders/{order['id']}", headers=headers).json()
    assert (paid["status"], paid["paymentStatus"]) == ("confirmed", "paid")


def test_webhook_confirms_payment(client, kitchen, processor):
    headers = register(client)
    order = _fill_cart_and_order(client, headers, kitchen)
    client.post("/create-payment-intent", headers=headers, json={"orderId": order["id"], "amount": 330})
    processor.set_status("pi_1", "succeeded")
    body = json.dumps({"type": "payment_intent.succeeded", "data": {"object": {"id": "pi_1"}}})

    res = client.post("/stripe-webhook", content=body, headers={"stripe-signature": VALID_SIGNATURE})

    assert res.status_code == 200
    assert client.get(f"/orders/{order['id']}", headers=headers).json()["paymentStatus"] == "paid"
