from flask import Blueprint, render_template, request, flash, redirect, url_for, jsonify, session, abort
from flask_login import login_required, current_user
from marketplace.models.booking import Booking
from marketplace.forms.forms import BookingForm
from marketplace.services import catalog, booking_service, payments
from marketplace.services.access_scope import resolve, resolve_for_user
from marketplace.services.errors import MarketplaceError, ItemNotFound
from marketplace.utils import arg_float, payload
from marketplace.extensions import db

main = Blueprint('main', __name__)

CATALOG_KINDS = 'any(cars, tours, attractions)'

# --- HELPERS ---
def _session_user():
    return current_user if current_user.is_authenticated else None

def _remember_guest_booking(booking):
    # guests can only reopen bookings created in their own browser session
    ids = session.get('guest_bookings', [])
    ids.append(booking.id)
    session['guest_bookings'] = ids[-20:]

def _int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ItemNotFound()

def get_booking_or_404(booking_id):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        abort(404)
    if booking.user_id is None:
        if booking.id in session.get('guest_bookings', []) or resolve_for_user(_session_user()).unrestricted:
            return booking
        abort(404)
    if not resolve_for_user(_session_user()).allows(booking):
        abort(404)
    return booking

# --- CATALOG ---
@main.route('/')
def index():
    return redirect(url_for('main.list_catalog', kind='cars'))

@main.route(f'/<{CATALOG_KINDS}:kind>')
def list_catalog(kind):
    items = catalog.list_items(kind)
    items = catalog.filter_items(
        items,
        search=request.args.get('q'),
        min_price=arg_float('min_price'),
        max_price=arg_float('max_price')
    )
    items = catalog.sort_items(items, request.args.get('sort', 'price'))
    return jsonify({'kind': kind, 'count': len(items), 'items': [i.to_dict() for i in items]})

@main.route(f'/<{CATALOG_KINDS}:kind>/<int:item_id>')
def item_details(kind, item_id):
    item = catalog.get_item(kind, item_id)
    return jsonify(item.to_dict())

@main.route('/quote', methods=['POST'])
def quote():
    data = payload()
    item = catalog.get_item(data.get('item_type', ''), _int(data.get('item_id')))
    rental = booking_service.quote(item, data.get('start_date'), data.get('end_date'))
    return jsonify({'days': rental.days, 'total': rental.total, 'daily_rate': item.rate})

# --- BOOKING ---
@main.route(f'/<{CATALOG_KINDS}:kind>/<int:item_id>/book', methods=['GET', 'POST'])
def book_item(kind, item_id):
    item = catalog.get_item(kind, item_id)
    form = BookingForm()
    if request.method == 'GET' and current_user.is_authenticated:
        form.customer_email.data = current_user.email
        form.customer_name.data = current_user.display_name

    if form.validate_on_submit():
        try:
            booking = booking_service.create_booking(
                item,
                {'name': form.customer_name.data, 'email': form.customer_email.data, 'phone': form.customer_phone.data},
                form.start_date.data,
                form.end_date.data,
                form.pickup_location.data,
                form.dropoff_location.data,
                user=_session_user(),
                special_requests=form.special_requests.data,
                ip_address=request.remote_addr
            )
        except MarketplaceError as e:
            flash(e.message, 'danger')
        else:
            if booking.user_id is None:
                _remember_guest_booking(booking)
            flash('Booking created! Redirecting to payment...', 'success')
            return redirect(url_for('main.booking_details', booking_id=booking.id))

    return render_template('book_item.html', form=form, item=item, kind=kind)

@main.route('/bookings', methods=['POST'])
def create_booking():
    data = payload()
    item = catalog.get_item(data.get('item_type', ''), _int(data.get('item_id')))
    booking = booking_service.create_booking(
        item,
        {'name': data.get('customer_name'), 'email': data.get('customer_email'), 'phone': data.get('customer_phone')},
        data.get('start_date'),
        data.get('end_date'),
        data.get('pickup_location'),
        data.get('dropoff_location'),
        user=_session_user(),
        special_requests=data.get('special_requests'),
        ip_address=request.remote_addr
    )
    if booking.user_id is None:
        _remember_guest_booking(booking)
    return jsonify({'success': True, 'message': 'Booking created!', 'booking': booking.to_dict()}), 201

@main.route('/bookings/<int:booking_id>')
def booking_details(booking_id):
    booking = get_booking_or_404(booking_id)
    return jsonify(booking.to_dict())

@main.route('/bookings/<int:booking_id>/pay', methods=['POST'])
def pay_booking(booking_id):
    booking = get_booking_or_404(booking_id)
    data = payload()
    method = data.get('method', 'card')
    # paid, cancelled and already-blocked bookings are rejected before the gateway is called
    booking_service.check_payable(booking)
    result = payments.charge(method, booking.total_amount, card=data.get('card'))
    booking_service.complete_payment(booking, method, succeeded=result.success,
                                     reference=result.reference, ip_address=request.remote_addr)
    if not result.success:
        return jsonify({'success': False, 'message': f"Payment failed: {result.message} Please try again.",
                        'booking': booking.to_dict()}), 402
    return jsonify({'success': True, 'message': 'Payment successful! Your booking has been confirmed.',
                    'reference': result.reference, 'booking': booking.to_dict()})

@main.route('/bookings/<int:booking_id>/cancel', methods=['POST'])
def cancel_booking(booking_id):
    booking = get_booking_or_404(booking_id)
    booking_service.cancel_booking(booking, ip_address=request.remote_addr)
    return jsonify({'success': True, 'message': 'Booking cancelled.', 'booking': booking.to_dict()})

@main.route('/bookings/<int:booking_id>/reschedule', methods=['POST'])
def reschedule_booking(booking_id):
    booking = get_booking_or_404(booking_id)
    data = payload()
    booking_service.reschedule_booking(booking, data.get('start_date'), data.get('end_date'),
                                       ip_address=request.remote_addr)
    return jsonify({'success': True, 'message': 'Booking updated.', 'booking': booking.to_dict()})

@main.route('/bookings/<int:booking_id>/invoice')
def booking_invoice(booking_id):
    booking = get_booking_or_404(booking_id)
    return jsonify(booking_service.invoice_for(booking))

# --- CUSTOMER DASHBOARD ---
@main.route('/dashboard')
@login_required
def dashboard():
    # own bookings only, even for superusers
    scope = resolve(current_user.id, False)
    bookings = scope.apply(Booking.query, Booking).order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    return jsonify({
        'user': {'id': current_user.id, 'email': current_user.email, 'name': current_user.display_name},
        'bookings': [b.to_dict() for b in bookings]
    })
