import pytest

from fastfeast.errors import InvalidTransitionError, NotFoundError, ProcessorError, ValidationError
from fastfeast.order_service.repository import OrderRepository
from fastfeast.payment_service.coordinator import PaymentCoordinator
from fastfeast.payment_service.processor import WebhookEvent
from fastfeast.user_service.repository import UserRepository


@pytest.fixture
def order(db, kitchen, user):
    order = OrderRepository(db).create(
        user_id=user.id,
        restaurant_id=kitchen["restaurant_id"],
        line_items=[
            {"food_item_id": kitchen["roll_id"], "quantity": 2, "price": 120},
            {"food_item_id": kitchen["chai_id"], "quantity": 1, "price": 90},
        ],
        total_amount=330,
        delivery_address="12 Park Street",
        delivery_fee=0,
        estimated_delivery_time="30-45 mins",
    )
    db.commit()
    return order


@pytest.fixture
def coordinator(db, processor):
    return PaymentCoordinator(db, processor)


def test_create_intent_links_order_and_customer(db, coordinator, processor, order, user):
    secret = coordinator.create_intent(order.id, 330, user.id)

    assert secret == "pi_1_secret_abc"
    assert processor.created == [{
        "amount": 33000,
        "metadata": {"orderId": str(order.id), "userId": str(user.id)},
        "customer": "cus_1",
    }]
    db.expire_all()
    order = OrderRepository(db).get_by_id(order.id)
    assert order.stripe_payment_intent_id == "pi_1"
    assert order.payment_status == "pending"
    assert UserRepository(db).get_by_id(user.id).stripe_customer_id == "cus_1"


def test_existing_customer_is_reused(coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)
    coordinator.create_intent(order.id, 330, user.id)
    assert len(processor.customers) == 1
    assert [c["customer"] for c in processor.created] == ["cus_1", "cus_1"]


def test_amount_must_match_catalog_price(db, coordinator, processor, order, user):
    with pytest.raises(ValidationError):
        coordinator.create_intent(order.id, 1, user.id)
    assert processor.created == []
    db.expire_all()
    assert OrderRepository(db).get_by_id(order.id).stripe_payment_intent_id is None


def test_processor_failure_leaves_nothing_behind(db, coordinator, processor, order, user):
    processor.fail_with = "card network down"

    with pytest.raises(ProcessorError) as exc:
        coordinator.create_intent(order.id, 330, user.id)

    assert exc.value.message == "Error creating payment intent: card network down"
    db.expire_all()
    assert OrderRepository(db).get_by_id(order.id).stripe_payment_intent_id is None
    assert UserRepository(db).get_by_id(user.id).stripe_customer_id is None


def test_cannot_pay_for_someone_elses_order(coordinator, order):
    with pytest.raises(NotFoundError):
        coordinator.create_intent(order.id, 330, order.user_id + 1)


def test_confirm_marks_order_paid_and_confirmed(db, coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)
    processor.set_status("pi_1", "succeeded")

    result = coordinator.confirm_intent("pi_1", user_id=user.id)

    assert result.success and result.newly_paid
    db.expire_all()
    order = OrderRepository(db).get_by_id(order.id)
    assert (order.status, order.payment_status) == ("confirmed", "paid")


def test_confirm_twice_reports_already_confirmed(coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)
    processor.set_status("pi_1", "succeeded")
    coordinator.confirm_intent("pi_1")

    again = coordinator.confirm_intent("pi_1")
    assert again.success
    assert not again.newly_paid
    assert again.message == "Payment already confirmed"


def test_paid_order_cannot_open_a_new_intent(coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)
    processor.set_status("pi_1", "succeeded")
    coordinator.confirm_intent("pi_1")

    with pytest.raises(InvalidTransitionError):
        coordinator.create_intent(order.id, 330, user.id)


def test_unfinished_intent_changes_nothing(db, coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)

    result = coordinator.confirm_intent("pi_1")

    assert not result.success
    assert result.message == "Payment not completed"
    db.expire_all()
    assert OrderRepository(db).get_by_id(order.id).payment_status == "pending"


def test_intent_without_order_is_not_found(coordinator, processor):
    processor.add_intent("pi_orphan")
    processor.add_intent("pi_ghost", metadata={"orderId": "9999"})

    with pytest.raises(NotFoundError):
        coordinator.confirm_intent("pi_orphan")
    with pytest.raises(NotFoundError):
        coordinator.confirm_intent("pi_ghost")


def test_unknown_intent_is_a_processor_error(coordinator):
    with pytest.raises(ProcessorError) as exc:
        coordinator.confirm_intent("pi_nope")
    assert exc.value.message.startswith("Error confirming payment:")


def test_webhooks_settle_payments(db, coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)

    result = coordinator.handle_webhook(WebhookEvent("payment_intent.payment_failed", "pi_1"))
    assert not result.success
    db.expire_all()
    assert OrderRepository(db).get_by_id(order.id).payment_status == "failed"

    assert coordinator.handle_webhook(WebhookEvent("charge.refunded", "ch_1")) is None


def test_declined_then_successful_attempt_is_paid(db, coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)
    coordinator.handle_webhook(WebhookEvent("payment_intent.payment_failed", "pi_1"))

    processor.set_status("pi_1", "succeeded")
    result = coordinator.confirm_intent("pi_1", user_id=user.id)

    assert result.success and result.newly_paid
    db.expire_all()
    order = OrderRepository(db).get_by_id(order.id)
    assert (order.status, order.payment_status) == ("confirmed", "paid")


def test_failed_order_can_open_a_new_intent(db, coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)
    coordinator.fail_intent("pi_1")

    assert coordinator.create_intent(order.id, 330, user.id) == "pi_2_secret_abc"
    db.expire_all()
    order = OrderRepository(db).get_by_id(order.id)
    assert (order.payment_status, order.stripe_payment_intent_id) == ("pending", "pi_2")


def test_late_failure_does_not_unpay_an_order(db, coordinator, processor, order, user):
    coordinator.create_intent(order.id, 330, user.id)
    processor.set_status("pi_1", "succeeded")
    coordinator.confirm_intent("pi_1")

    coordinator.fail_intent("pi_1")

    db.expire_all()
    assert OrderRepository(db).get_by_id(order.id).payment_status == "paid"


def test_customer_survives_a_failed_intent(db, coordinator, processor, order, user):
    processor.intent_failure = "card network down"
    with pytest.raises(ProcessorError):
        coordinator.create_intent(order.id, 330, user.id)

    db.expire_all()
    assert UserRepository(db).get_by_id(user.id).stripe_customer_id == "cus_1"
    assert OrderRepository(db).get_by_id(order.id).stripe_payment_intent_id is None

    processor.intent_failure = None
    coordinator.create_intent(order.id, 330, user.id)
    assert len(processor.customers) == 1
    assert processor.created[0]["customer"] == "cus_1"
