from flask import Blueprint, render_template, redirect, url_for, request, flash, jsonify, abort, send_file, current_app
from flask_login import login_required, current_user
from marketplace.models.catalog import CATALOG_TABLES
from marketplace.models.booking import Booking, PaymentStatus
from marketplace.forms.forms import CarForm, TourForm, AttractionForm
from marketplace.services import export_service, booking_service, catalog
from marketplace.services.access_scope import resolve_for_user
from marketplace.services.log_service import log_event, session_management
from marketplace.utils import split_list
from marketplace.extensions import db
from functools import wraps
from io import BytesIO

admin = Blueprint('admin', __name__)

ITEM_FORMS = {'cars': CarForm, 'tours': TourForm, 'attractions': AttractionForm}
# plain columns copied from the form; list columns are handled separately
ITEM_FIELDS = {
    'cars': ('name', 'brand', 'seats', 'transmission', 'price_per_day', 'mileage',
             'large_bags', 'small_bags', 'location', 'description', 'available'),
    'tours': ('name', 'region', 'hours', 'price', 'details', 'available'),
    'attractions': ('name', 'region', 'hours', 'price', 'details', 'available'),
}
CATALOG_KINDS = 'any(cars, tours, attractions)'

# --- Owner/agent access decorator ---
def admin_required(f):
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        profile = current_user.profile
        if not current_user.is_superuser and not (profile and profile.role == 'agent'):
            flash('The admin area is only available to agents.', 'warning')
            return redirect(url_for('main.dashboard'))
        return f(*args, **kwargs)
    return decorated_function

def current_scope():
    return resolve_for_user(current_user)

def get_scoped_or_404(model, row_id):
    """Rows outside the caller's scope are reported as missing."""
    row = current_scope().apply(model.query, model).filter(model.id == row_id).first()
    if row is None:
        abort(404)
    return row

def _apply_form(kind, item, form):
    for name in ITEM_FIELDS[kind]:
        setattr(item, name, form[name].data)
    if 'features' in form:
        item.features = split_list(form.features.data)
    item.image_urls = split_list(form.image_urls.data)

# --- Dashboard / analytics ---
@admin.route('/dashboard')
@admin_required
def dashboard():
    scope = current_scope()
    datasets = export_service.fetch_all(scope)
    summary = export_service.summarize(datasets)
    counts = summary['counts']
    return jsonify({
        'scope': scope.label,
        'is_superuser': scope.unrestricted,
        'summary': summary,
        'chart_data': [{'name': kind.capitalize(), 'count': count} for kind, count in counts.items()],
        'pie_data': [{'name': kind.capitalize(), 'value': counts[kind]} for kind in CATALOG_TABLES],
    })

# --- Listing management ---
@admin.route(f'/<{CATALOG_KINDS}:kind>')
@admin_required
def list_items(kind):
    model = CATALOG_TABLES[kind]
    items = current_scope().apply(model.query, model).order_by(model.name).all()
    return jsonify({'kind': kind, 'count': len(items), 'items': [i.to_dict() for i in items]})

@admin.route(f'/<{CATALOG_KINDS}:kind>/new', methods=['GET', 'POST'])
@admin_required
def add_item(kind):
    form = ITEM_FORMS[kind]()
    if form.validate_on_submit():
        item = CATALOG_TABLES[kind](user_id=current_user.id)
        _apply_form(kind, item, form)
        with session_management():
            db.session.add(item)
        log_event("Listing Added", "SUCCESS", {"kind": kind, "item_id": item.id, "name": item.name},
                  user_id=current_user.id, ip_address=request.remote_addr)
        flash(f'{item.name} added successfully!', 'success')
        return redirect(url_for('admin.list_items', kind=kind))
    return render_template('admin_edit_item.html', form=form, kind=kind, item=None,
                           title=f"Add {kind[:-1].capitalize()}")

@admin.route(f'/<{CATALOG_KINDS}:kind>/<int:item_id>/edit', methods=['GET', 'POST'])
@admin_required
def edit_item(kind, item_id):
    model = CATALOG_TABLES[kind]
    item = get_scoped_or_404(model, item_id)
    form = ITEM_FORMS[kind](obj=item)
    if request.method == 'GET':
        if 'features' in form:
            form.features.data = ', '.join(item.features or [])
        form.image_urls.data = ', '.join(item.image_urls or [])

    if form.validate_on_submit():
        with session_management():
            _apply_form(kind, item, form)
        log_event("Listing Updated", "SUCCESS", {"kind": kind, "item_id": item.id},
                  user_id=current_user.id, ip_address=request.remote_addr)
        flash(f'{item.name} updated successfully!', 'success')
        return redirect(url_for('admin.list_items', kind=kind))
    return render_template('admin_edit_item.html', form=form, kind=kind, item=item,
                           title=f"Editing: {item.name}")

@admin.route(f'/<{CATALOG_KINDS}:kind>/<int:item_id>/delete', methods=['POST'])
@admin_required
def delete_item(kind, item_id):
    item = get_scoped_or_404(CATALOG_TABLES[kind], item_id)
    name = item.name
    if catalog.remove_item(item):
        log_event("Listing Deleted", "SUCCESS", {"kind": kind, "item_id": item_id, "name": name},
                  user_id=current_user.id, ip_address=request.remote_addr)
        flash(f'"{name}" deleted successfully!', 'success')
    else:
        log_event("Listing Deleted", "HIDDEN", {"kind": kind, "item_id": item_id, "name": name},
                  user_id=current_user.id, ip_address=request.remote_addr)
        flash(f'"{name}" still has active bookings, so it was hidden instead of deleted.', 'warning')
    return redirect(url_for('admin.list_items', kind=kind))

# --- Bookings ---
@admin.route('/bookings')
@admin_required
def bookings_list():
    query = current_scope().apply(Booking.query, Booking)
    status = request.args.get('payment_status')
    if status:
        try:
            query = query.filter(Booking.payment_status == PaymentStatus(status))
        except ValueError:
            abort(400)
    bookings = query.order_by(Booking.start_date.desc(), Booking.id.desc()).all()
    return jsonify({'count': len(bookings), 'bookings': [b.to_dict() for b in bookings]})

@admin.route('/bookings/<int:booking_id>/mark-paid', methods=['POST'])
@admin_required
def mark_as_paid(booking_id):
    booking = get_scoped_or_404(Booking, booking_id)
    booking_service.complete_payment(booking, 'manual', ip_address=request.remote_addr)
    return jsonify({'success': True, 'message': f'Booking #{booking.id} marked as paid.', 'booking': booking.to_dict()})

# --- Exports ---
@admin.route('/export/<any(cars, tours, attractions, bookings):kind>.<any(csv, xlsx):fmt>')
@admin_required
def export_data(kind, fmt):
    rows = export_service.fetch_rows(kind, current_scope())
    if fmt == 'csv':
        content = export_service.rows_to_csv(rows)
    else:
        content = export_service.rows_to_excel(rows, sheet_name=kind)
    log_event("Export", "SUCCESS", {"kind": kind, "format": fmt, "rows": len(rows)},
              user_id=current_user.id, ip_address=request.remote_addr)
    return send_file(BytesIO(content), mimetype=export_service.EXPORT_FORMATS[fmt],
                     as_attachment=True, download_name=export_service.export_filename(kind, fmt))

@admin.route('/report.pdf')
@admin_required
def download_report():
    scope = current_scope()
    datasets = export_service.fetch_all(scope)
    content = export_service.build_pdf_report(
        datasets,
        current_app.config['COMPANY_NAME'],
        current_app.config['COMPANY_ADDRESS'],
        scope_label=scope.label,
        rows_per_table=current_app.config.get('REPORT_ROWS_PER_TABLE', 10)
    )
    log_event("PDF Report", "SUCCESS", {"scope": scope.label}, user_id=current_user.id, ip_address=request.remote_addr)
    return send_file(BytesIO(content), mimetype='application/pdf',
                     as_attachment=True, download_name=export_service.report_filename())
