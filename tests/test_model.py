from basketry.model import (
    Address,
    Basket,
    BasketItem,
    CourseRef,
    ErrorCode,
    FieldError,
    MutationResponse,
    Order,
    PaymentOutcome,
    PaymentState,
)


def _make_item(course_id: str, price: int, **overrides) -> BasketItem:
    return BasketItem(id=f"item_{course_id}", course=CourseRef(id=course_id), price=price, total_price=price, **overrides)


class TestBasket:
    def test_derived_helpers(self):
        basket = Basket(
            id="b1",
            items=(_make_item("101", 4500), _make_item("102", 2500, is_taster=True)),
            sub_total=7000,
            discount_total=200,
            promo_code_discount_value=500,
            credit_total=300,
            total=6000,
            charge_total=4000,
            pay_later=2000,
        )

        assert basket.item_count == 2
        assert basket.total_savings == 1000
        assert basket.has_discounts and basket.has_credits and basket.has_pay_later
        assert [i.course.id for i in basket.taster_items] == ["102"]
        assert [i.course.id for i in basket.course_items] == ["101"]
        assert basket.item_for_course("102").is_taster
        assert basket.item_for_course("999") is None

    def test_item_discount(self):
        item = _make_item("101", 4500, discount_value=200, promo_code_discount_value=300)

        assert item.total_discount == 500
        assert item.has_discount
        assert not _make_item("102", 100).has_discount


class TestCheckoutRecords:
    def test_address_display(self):
        address = Address(line1="1 High St", city="Leeds", post_code="LS1 1AA")

        assert address.short_display == "1 High St, Leeds LS1 1AA"
        assert address.country_code == "GB"

    def test_order_pay_later(self):
        assert Order(id="o", user_id="u", pay_later=100).requires_additional_payment
        assert not Order(id="o", user_id="u").requires_additional_payment

    def test_mutation_response_errors(self):
        ok = MutationResponse(basket=Basket(id="b"))
        rejected = MutationResponse(basket=None, errors=(FieldError("promoCode", "Expired"),))

        assert ok.success and ok.message is None and ok.error_code is None
        assert not rejected.success
        assert rejected.message == "Expired"
        assert rejected.error_code == "promoCode"


class TestPaymentOutcome:
    def test_success_states(self):
        order = Order(id="o", user_id="u")

        assert PaymentOutcome.completed(order).success
        assert PaymentOutcome.action_required(order, "secret", "requires_action").success
        assert not PaymentOutcome.failed(ErrorCode.TIMEOUT, "timed out").success

    def test_cancelled(self):
        outcome = PaymentOutcome.cancelled()

        assert outcome.is_user_cancellation
        assert not outcome.success
        assert outcome.error_code == ErrorCode.USER_CANCELLED

    def test_state_flags(self):
        assert PaymentState.PLACING.holds_basket
        assert PaymentState.ACTION_REQUIRED.holds_basket
        assert not PaymentState.FAILED.holds_basket
        assert PaymentState.CANCELLED.is_terminal
        assert not PaymentState.IDLE.is_terminal
