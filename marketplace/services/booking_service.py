import smtplib

from flask import current_app
from flask_mail import Message

from marketplace.extensions import db, mail
from marketplace.models.booking import Booking, AvailabilityBlock, PaymentStatus, BookingStatus
from marketplace.models.catalog import ITEM_MODELS
from marketplace.services import pricing
from marketplace.services.errors import (
    DateRangeConflict, ItemUnavailable, ItemNotFound, PaymentStateError, InvalidBookingDetails,
)
from marketplace.services.log_service import log_event, session_management

def find_conflict(item_type, item_id, start_date, end_date, exclude_booking_id=None):
    """First AvailabilityBlock on the item overlapping [start_date, end_date), or None."""
    query = AvailabilityBlock.query.filter(
        AvailabilityBlock.item_type == item_type,
        AvailabilityBlock.item_id == item_id,
        AvailabilityBlock.start_date < end_date,
        AvailabilityBlock.end_date > start_date
    )
    if exclude_booking_id is not None:
        query = query.filter(AvailabilityBlock.booking_id != exclude_booking_id)
    return query.first()

def _as_date(value):
    return pricing.to_datetime(value).date()

def quote(item, start_date, end_date):
    return pricing.compute(_as_date(start_date), _as_date(end_date), item.rate)

def create_booking(item, customer, start_date, end_date, pickup_location, dropoff_location=None,
                   user=None, special_requests=None, ip_address=None):
    """
    Validates the request and inserts a pending booking.

    `customer` is a dict with name, email and (optional) phone. The total is always
    computed here from the item's rate; the caller never supplies it.
    """
    start, end = _as_date(start_date), _as_date(end_date)
    rental = pricing.compute(start, end, item.rate)

    customer = customer or {}
    name = (customer.get('name') or '').strip()
    email = (customer.get('email') or '').strip()
    pickup = (pickup_location or '').strip()
    if not name or not email or not pickup:
        raise InvalidBookingDetails()

    if not item.available:
        raise ItemUnavailable()
    if find_conflict(item.kind, item.id, start, end):
        log_event("Booking Created", "CONFLICT",
                  {"item_type": item.kind, "item_id": item.id, "start_date": start, "end_date": end},
                  user_id=getattr(user, 'id', None), ip_address=ip_address)
        raise DateRangeConflict()

    booking = Booking(
        item_type=item.kind,
        item_id=item.id,
        user_id=getattr(user, 'id', None),
        customer_name=name,
        customer_email=email,
        customer_phone=(customer.get('phone') or '').strip() or None,
        start_date=start,
        end_date=end,
        pickup_location=pickup,
        dropoff_location=(dropoff_location or '').strip() or pickup,
        special_requests=special_requests,
        total_amount=rental.total,
        payment_status=PaymentStatus.pending,
        status=BookingStatus.pending
    )
    with session_management():
        db.session.add(booking)

    log_event("Booking Created", "SUCCESS",
              {"booking_id": booking.id, "item_type": item.kind, "item_id": item.id,
               "days": rental.days, "total_amount": rental.total},
              user_id=booking.user_id, ip_address=ip_address)
    return booking

def check_payable(booking, check_dates=True):
    """Raises unless the booking can be charged now. Runs before any money moves."""
    if booking.is_paid:
        raise PaymentStateError()
    if booking.status == BookingStatus.cancelled:
        raise PaymentStateError('This booking has been cancelled.')
    if check_dates and find_conflict(booking.item_type, booking.item_id, booking.start_date, booking.end_date,
                                     exclude_booking_id=booking.id):
        raise DateRangeConflict()

def lock_item(item_type, item_id):
    """SELECT ... FOR UPDATE on the booked item, so payments for one item run one at a time."""
    model = ITEM_MODELS.get(item_type)
    item = model.query.filter_by(id=item_id).with_for_update().first() if model else None
    if item is None:
        raise ItemNotFound()
    return item

def complete_payment(booking, method, succeeded=True, reference=None, ip_address=None):
    """
    Payment state machine: pending -> paid on success, pending stays pending on failure.
    Marking the booking paid and writing its AvailabilityBlock share one commit.
    """
    check_payable(booking, check_dates=False)

    if not succeeded:
        log_event("Payment", "FAILED",
                  {"booking_id": booking.id, "method": method},
                  user_id=booking.user_id, ip_address=ip_address)
        return booking

    with session_management():
        # the item row lock is held until commit; the overlap check runs under it
        lock_item(booking.item_type, booking.item_id)
        if find_conflict(booking.item_type, booking.item_id, booking.start_date, booking.end_date,
                         exclude_booking_id=booking.id):
            raise DateRangeConflict()
        booking.payment_status = PaymentStatus.paid
        booking.payment_method = method
        booking.status = BookingStatus.confirmed
        db.session.add(AvailabilityBlock(
            item_type=booking.item_type,
            item_id=booking.item_id,
            booking_id=booking.id,
            start_date=booking.start_date,
            end_date=booking.end_date
        ))

    log_event("Payment", "SUCCESS",
              {"booking_id": booking.id, "method": method, "reference": reference,
               "total_amount": booking.total_amount},
              user_id=booking.user_id, ip_address=ip_address)
    send_confirmation_email(booking)
    return booking

def cancel_booking(booking, ip_address=None):
    """Cancels the booking and frees its dates. The payment status is left as it is."""
    if booking.status == BookingStatus.cancelled:
        return booking
    with session_management():
        booking.status = BookingStatus.cancelled
        # delete-orphan cascade removes the block row
        booking.availability_block = None
    log_event("Booking Cancelled", "SUCCESS", {"booking_id": booking.id},
              user_id=booking.user_id, ip_address=ip_address)
    return booking

def reschedule_booking(booking, start_date, end_date, ip_address=None):
    """Moves an unpaid booking to new dates and recomputes its total."""
    if booking.is_paid:
        raise PaymentStateError('Paid bookings cannot be rescheduled.')
    if booking.status == BookingStatus.cancelled:
        raise PaymentStateError('This booking has been cancelled.')
    item = booking.item
    start, end = _as_date(start_date), _as_date(end_date)
    rental = pricing.compute(start, end, item.rate)
    if find_conflict(booking.item_type, booking.item_id, start, end, exclude_booking_id=booking.id):
        raise DateRangeConflict()
    with session_management():
        booking.start_date = start
        booking.end_date = end
        booking.total_amount = rental.total
    log_event("Booking Rescheduled", "SUCCESS",
              {"booking_id": booking.id, "start_date": start, "end_date": end, "total_amount": rental.total},
              user_id=booking.user_id, ip_address=ip_address)
    return booking

def send_confirmation_email(booking):
    if not current_app.config.get('BOOKING_CONFIRMATION_EMAILS', True):
        return False
    item = booking.item
    item_name = item.name if item else booking.item_type
    msg = Message(
        subject=f"Booking Confirmation #{booking.id}",
        recipients=[booking.customer_email],
        body=(
            f"Dear {booking.customer_name},\n\n"
            f"Your booking for {item_name} has been confirmed.\n"
            f"Dates: {booking.start_date.isoformat()} -> {booking.end_date.isoformat()}\n"
            f"Pickup: {booking.pickup_location}\n"
            f"Drop-off: {booking.dropoff_location}\n"
            f"Total: ${booking.total_amount:.2f}\n\n"
            "Thank you for choosing us!"
        )
    )
    try:
        mail.send(msg)
    except (smtplib.SMTPException, OSError) as e:
        current_app.logger.error("Confirmation e-mail for booking %s failed: %s", booking.id, e)
        log_event("Confirmation E-mail", "FAILED", {"booking_id": booking.id, "error": str(e)},
                  user_id=booking.user_id)
        return False
    return True

# share of the total shown as tax on invoices; the total itself already includes it
INVOICE_TAX_RATE = 0.10

def invoice_for(booking):
    item = booking.item
    days = pricing.rental_days(booking.start_date, booking.end_date)
    tax = booking.total_amount * INVOICE_TAX_RATE
    return {
        'invoice_number': f"INV-{booking.id:06d}",
        'booking_id': booking.id,
        'customer_name': booking.customer_name,
        'customer_email': booking.customer_email,
        'item_name': item.name if item else None,
        'pickup_date': booking.start_date.isoformat(),
        'return_date': booking.end_date.isoformat(),
        'pickup_location': booking.pickup_location,
        'days': days,
        'daily_rate': round(booking.total_amount / days, 2),
        'subtotal': round(booking.total_amount - tax, 2),
        'tax': round(tax, 2),
        'total': booking.total_amount,
        'payment_status': booking.payment_status.value,
    }
