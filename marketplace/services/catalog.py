from marketplace.models.catalog import ITEM_MODELS, CATALOG_TABLES
from marketplace.models.booking import Booking, BookingStatus, AvailabilityBlock
from marketplace.services.errors import ItemNotFound
from marketplace.extensions import db
from marketplace.services.log_service import session_management

def model_for(kind):
    """Accepts the singular kind ('car') or the table name ('cars')."""
    model = ITEM_MODELS.get(kind) or CATALOG_TABLES.get(kind)
    if model is None:
        raise ItemNotFound(f"Unknown catalog: {kind}")
    return model

def list_items(kind, only_available=True):
    model = model_for(kind)
    query = model.query
    if only_available:
        query = query.filter_by(available=True)
    return query.order_by(model.id).all()

def get_item(kind, item_id):
    item = db.session.get(model_for(kind), item_id)
    if item is None:
        raise ItemNotFound()
    return item

def filter_items(items, search=None, min_price=None, max_price=None):
    search_lower = (search or '').strip().lower()
    result = []
    for item in items:
        rate = item.rate or 0
        if min_price is not None and rate < min_price:
            continue
        if max_price is not None and rate > max_price:
            continue
        if search_lower:
            name = (item.name or '').lower()
            description = (item.description or '').lower()
            if search_lower not in name and search_lower not in description:
                continue
        result.append(item)
    return result

def sort_items(items, sort_by='price'):
    if sort_by == 'price':
        return sorted(items, key=lambda i: i.rate or 0)
    if sort_by == 'name':
        return sorted(items, key=lambda i: (i.name or '').lower())
    return list(items)

def remove_item(item):
    """
    Deletes a listing and its leftover availability blocks.
    A listing that still has bookings which are not cancelled is only hidden
    (available=False). Returns True when the row was deleted.
    """
    active = Booking.query.filter(
        Booking.item_type == item.kind,
        Booking.item_id == item.id,
        Booking.status != BookingStatus.cancelled
    ).count()
    with session_management():
        if active:
            item.available = False
        else:
            AvailabilityBlock.query.filter_by(item_type=item.kind, item_id=item.id).delete()
            db.session.delete(item)
    return not active
