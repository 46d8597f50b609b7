import pytest

from marketplace.extensions import mail
from marketplace.models import AvailabilityBlock, Booking, BookingStatus, PaymentStatus, ApiLog
from marketplace.services import booking_service
from marketplace.services.errors import (
    DateRangeConflict, ItemUnavailable, ItemNotFound, PaymentStateError, InvalidBookingDetails, InvalidDateRange,
)

JANE = {'name': 'Jane Doe', 'email': 'jane@carsrus.mu', 'phone': '+230 5555 1234'}


def _book(item, start, end, **kwargs):
    return booking_service.create_booking(item, JANE, start, end, 'Port Louis', **kwargs)


def test_create_booking_computes_total(app, car):
    booking = _book(car, '2024-01-01', '2024-01-04')
    assert booking.id is not None
    assert booking.total_amount == 150.0
    assert booking.payment_status == PaymentStatus.pending
    assert booking.status == BookingStatus.pending
    assert booking.dropoff_location == 'Port Louis'
    assert booking.item_type == 'car'
    assert booking.availability_block is None


def test_create_booking_logs_event(app, car):
    _book(car, '2024-01-01', '2024-01-04')
    log = ApiLog.query.filter_by(event_type='Booking Created').one()
    assert log.status == 'SUCCESS'


def test_create_booking_rejects_bad_dates(app, car):
    with pytest.raises(InvalidDateRange):
        _book(car, '2024-01-04', '2024-01-04')
    assert Booking.query.count() == 0


def test_create_booking_requires_customer_details(app, car):
    with pytest.raises(InvalidBookingDetails):
        booking_service.create_booking(car, {'name': ' ', 'email': 'a@b.mu'}, '2024-01-01', '2024-01-02', 'Port Louis')
    with pytest.raises(InvalidBookingDetails):
        booking_service.create_booking(car, JANE, '2024-01-01', '2024-01-02', '')


def test_unavailable_item(app, owner, make_car):
    car = make_car(owner, available=False)
    with pytest.raises(ItemUnavailable):
        _book(car, '2024-01-01', '2024-01-02')


def test_paid_booking_blocks_overlapping_dates(app, car):
    first = _book(car, '2024-01-01', '2024-01-05')
    booking_service.complete_payment(first, 'card')

    with pytest.raises(DateRangeConflict):
        _book(car, '2024-01-03', '2024-01-07')
    assert ApiLog.query.filter_by(event_type='Booking Created', status='CONFLICT').count() == 1


def test_adjacent_ranges_do_not_conflict(app, car):
    first = _book(car, '2024-01-01', '2024-01-05')
    booking_service.complete_payment(first, 'card')

    second = _book(car, '2024-01-05', '2024-01-07')
    booking_service.complete_payment(second, 'card')
    assert AvailabilityBlock.query.count() == 2


def test_blocks_are_per_item(app, owner, car, make_car):
    other = make_car(owner, name='Suzuki Jimny')
    booking_service.complete_payment(_book(car, '2024-01-01', '2024-01-05'), 'card')
    assert _book(other, '2024-01-01', '2024-01-05').id is not None


def test_second_pending_booking_cannot_be_paid(app, car):
    first = _book(car, '2024-01-01', '2024-01-05')
    second = _book(car, '2024-01-03', '2024-01-07')
    booking_service.complete_payment(first, 'card')

    with pytest.raises(DateRangeConflict):
        booking_service.complete_payment(second, 'card')
    assert second.payment_status == PaymentStatus.pending
    assert AvailabilityBlock.query.filter_by(booking_id=second.id).first() is None


def test_payment_success_writes_block(app, car):
    booking = _book(car, '2024-01-01', '2024-01-05')
    booking_service.complete_payment(booking, 'paypal', reference='paypal_abc')

    assert booking.payment_status == PaymentStatus.paid
    assert booking.status == BookingStatus.confirmed
    assert booking.payment_method == 'paypal'
    block = booking.availability_block
    assert (block.start_date, block.end_date) == (booking.start_date, booking.end_date)
    assert (block.item_type, block.item_id) == ('car', car.id)


def test_payment_failure_leaves_booking_pending(app, car):
    booking = _book(car, '2024-01-01', '2024-01-05')
    booking_service.complete_payment(booking, 'card', succeeded=False)

    assert booking.payment_status == PaymentStatus.pending
    assert AvailabilityBlock.query.count() == 0
    assert ApiLog.query.filter_by(event_type='Payment', status='FAILED').count() == 1

    # the customer may retry
    booking_service.complete_payment(booking, 'card')
    assert booking.is_paid


def test_paid_is_terminal(app, car):
    booking = _book(car, '2024-01-01', '2024-01-05')
    booking_service.complete_payment(booking, 'card')

    with pytest.raises(PaymentStateError):
        booking_service.complete_payment(booking, 'card')
    with pytest.raises(PaymentStateError):
        booking_service.complete_payment(booking, 'card', succeeded=False)
    assert booking.is_paid
    assert AvailabilityBlock.query.count() == 1


def test_confirmation_email_sent_on_payment(app, car):
    booking = _book(car, '2024-01-01', '2024-01-05')
    with mail.record_messages() as outbox:
        booking_service.complete_payment(booking, 'card')
    assert len(outbox) == 1
    assert outbox[0].recipients == ['jane@carsrus.mu']
    assert f'#{booking.id}' in outbox[0].subject


def test_confirmation_email_can_be_disabled(app, car):
    app.config['BOOKING_CONFIRMATION_EMAILS'] = False
    booking = _book(car, '2024-01-01', '2024-01-05')
    with mail.record_messages() as outbox:
        booking_service.complete_payment(booking, 'card')
    assert outbox == []


def test_cancel_frees_dates(app, car):
    booking = _book(car, '2024-01-01', '2024-01-05')
    booking_service.complete_payment(booking, 'card')
    booking_service.cancel_booking(booking)

    assert booking.status == BookingStatus.cancelled
    assert booking.payment_status == PaymentStatus.paid
    assert AvailabilityBlock.query.count() == 0
    assert _book(car, '2024-01-02', '2024-01-04').id is not None


def test_cancelled_booking_cannot_be_paid(app, car):
    booking = _book(car, '2024-01-01', '2024-01-05')
    booking_service.cancel_booking(booking)
    with pytest.raises(PaymentStateError):
        booking_service.complete_payment(booking, 'card')


def test_reschedule_recomputes_total(app, car):
    booking = _book(car, '2024-01-01', '2024-01-03')
    booking_service.reschedule_booking(booking, '2024-02-01', '2024-02-06')
    assert booking.total_amount == 250.0
    assert booking.start_date.isoformat() == '2024-02-01'


def test_reschedule_checks_conflicts(app, car):
    paid = _book(car, '2024-02-01', '2024-02-05')
    booking_service.complete_payment(paid, 'card')
    booking = _book(car, '2024-01-01', '2024-01-03')
    with pytest.raises(DateRangeConflict):
        booking_service.reschedule_booking(booking, '2024-02-04', '2024-02-06')
    assert booking.start_date.isoformat() == '2024-01-01'


def test_paid_booking_cannot_be_rescheduled(app, car):
    booking = _book(car, '2024-01-01', '2024-01-03')
    booking_service.complete_payment(booking, 'card')
    with pytest.raises(PaymentStateError):
        booking_service.reschedule_booking(booking, '2024-02-01', '2024-02-03')


def test_invoice(app, car):
    booking = _book(car, '2024-01-01', '2024-01-04')
    invoice = booking_service.invoice_for(booking)
    assert invoice['invoice_number'] == f'INV-{booking.id:06d}'
    assert invoice['days'] == 3
    assert invoice['daily_rate'] == 50.0
    assert invoice['tax'] == 15.0
    assert invoice['subtotal'] == 135.0
    assert invoice['total'] == 150.0
    assert invoice['item_name'] == 'Toyota Yaris'
    assert invoice['payment_status'] == 'pending'


def test_tours_are_booked_at_their_price(app, tour):
    booking = _book(tour, '2024-03-10', '2024-03-11')
    assert booking.item_type == 'tour'
    assert booking.total_amount == 120.0


def test_payment_locks_item_before_checking_dates(app, car, monkeypatch):
    booking = _book(car, '2024-01-01', '2024-01-05')
    calls = []
    real_lock, real_conflict = booking_service.lock_item, booking_service.find_conflict

    def lock_item(*args):
        calls.append('lock')
        return real_lock(*args)

    def find_conflict(*args, **kwargs):
        calls.append('check')
        return real_conflict(*args, **kwargs)

    monkeypatch.setattr(booking_service, 'lock_item', lock_item)
    monkeypatch.setattr(booking_service, 'find_conflict', find_conflict)
    booking_service.complete_payment(booking, 'card')
    assert calls == ['lock', 'check']


def test_lock_item_returns_the_item(app, car):
    locked = booking_service.lock_item('car', car.id)
    assert locked is car
    with pytest.raises(ItemNotFound):
        booking_service.lock_item('car', 999)


def test_check_payable(app, car):
    first = _book(car, '2024-01-01', '2024-01-05')
    second = _book(car, '2024-01-03', '2024-01-07')
    booking_service.check_payable(second)

    booking_service.complete_payment(first, 'card')
    with pytest.raises(PaymentStateError):
        booking_service.check_payable(first)
    with pytest.raises(DateRangeConflict):
        booking_service.check_payable(second)
    # state checks alone still pass; the overlap is re-checked when paying
    booking_service.check_payable(second, check_dates=False)

    booking_service.cancel_booking(second)
    with pytest.raises(PaymentStateError):
        booking_service.check_payable(second, check_dates=False)
