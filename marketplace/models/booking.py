from marketplace.extensions import db
from marketplace.models.catalog import ITEM_MODELS
import datetime
import enum

class PaymentStatus(enum.Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"

class BookingStatus(enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"

class Booking(db.Model):
    __tablename__ = 'bookings'
    id = db.Column(db.Integer, primary_key=True)
    item_type = db.Column(db.String(20), nullable=False)
    item_id = db.Column(db.Integer, nullable=False, index=True)
    # nullable for guest checkouts
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True, index=True)
    customer_name = db.Column(db.String(150), nullable=False)
    customer_email = db.Column(db.String(150), nullable=False)
    customer_phone = db.Column(db.String(32))
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    pickup_location = db.Column(db.String(200), nullable=False)
    dropoff_location = db.Column(db.String(200))
    special_requests = db.Column(db.Text)
    total_amount = db.Column(db.Float, nullable=False)
    payment_status = db.Column(db.Enum(PaymentStatus), default=PaymentStatus.pending, nullable=False, index=True)
    payment_method = db.Column(db.String(20))
    status = db.Column(db.Enum(BookingStatus), default=BookingStatus.pending, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)
    availability_block = db.relationship('AvailabilityBlock', backref='booking', uselist=False, cascade='all, delete-orphan')

    __table_args__ = (db.CheckConstraint('start_date < end_date', name='ck_booking_date_order'),)

    @property
    def item(self):
        model = ITEM_MODELS.get(self.item_type)
        return db.session.get(model, self.item_id) if model else None

    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.paid

    def to_dict(self):
        item = self.item
        return {
            'id': self.id,
            'item_type': self.item_type,
            'item_id': self.item_id,
            'item_name': item.name if item else None,
            'user_id': self.user_id,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'pickup_location': self.pickup_location,
            'dropoff_location': self.dropoff_location,
            'special_requests': self.special_requests,
            'total_amount': self.total_amount,
            'payment_status': self.payment_status.value,
            'payment_method': self.payment_method,
            'status': self.status.value,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"Booking({self.item_type} {self.item_id}, {self.start_date} -> {self.end_date}, {self.payment_status.value})"

class AvailabilityBlock(db.Model):
    """Half-open [start_date, end_date) range during which an item cannot be booked again."""
    __tablename__ = 'availability_blocks'
    id = db.Column(db.Integer, primary_key=True)
    item_type = db.Column(db.String(20), nullable=False)
    item_id = db.Column(db.Integer, nullable=False)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), unique=True, nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)

    __table_args__ = (db.Index('ix_availability_item', 'item_type', 'item_id'),)

    def __repr__(self):
        return f"AvailabilityBlock({self.item_type} {self.item_id}, {self.start_date} -> {self.end_date})"
