from marketplace.extensions import db
from sqlalchemy.orm import declared_attr
import datetime

class RentalItemMixin:
    """Columns shared by every bookable catalog table (cars, tours, attractions)."""
    # bookings reference items by (kind, id) only, so ids must never be handed out twice
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    # ordered list of photo URLs; the first one is the cover image
    image_urls = db.Column(db.JSON, default=list)
    available = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    @declared_attr
    def user_id(cls):
        return db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)

    @property
    def cover_image(self):
        return self.image_urls[0] if self.image_urls else None

    def to_dict(self):
        data = {c.name: getattr(self, c.name) for c in self.__table__.columns}
        for key in ('created_at', 'updated_at'):
            if data.get(key) is not None:
                data[key] = data[key].isoformat()
        data['kind'] = self.kind
        data['rate'] = self.rate
        return data

class Car(RentalItemMixin, db.Model):
    __tablename__ = 'cars'
    kind = 'car'
    brand = db.Column(db.String(100))
    seats = db.Column(db.Integer)
    transmission = db.Column(db.String(30))
    price_per_day = db.Column(db.Float, nullable=False)
    mileage = db.Column(db.String(50))
    large_bags = db.Column(db.Integer, default=0)
    small_bags = db.Column(db.Integer, default=0)
    location = db.Column(db.String(150))
    description = db.Column(db.Text)
    features = db.Column(db.JSON, default=list)

    @property
    def rate(self):
        return self.price_per_day

    def __repr__(self):
        return f"Car('{self.name}', '{self.price_per_day}')"

class Tour(RentalItemMixin, db.Model):
    __tablename__ = 'tours'
    kind = 'tour'
    region = db.Column(db.String(100))
    hours = db.Column(db.Integer)
    price = db.Column(db.Float, nullable=False)
    details = db.Column(db.Text)

    @property
    def rate(self):
        return self.price

    @property
    def description(self):
        return self.details

    def __repr__(self):
        return f"Tour('{self.name}', '{self.region}')"

class Attraction(RentalItemMixin, db.Model):
    __tablename__ = 'attractions'
    kind = 'attraction'
    region = db.Column(db.String(100))
    hours = db.Column(db.Integer)
    price = db.Column(db.Float, nullable=False)
    details = db.Column(db.Text)

    @property
    def rate(self):
        return self.price

    @property
    def description(self):
        return self.details

    def __repr__(self):
        return f"Attraction('{self.name}', '{self.region}')"

# kind -> model, and the plural table names used in urls and export filenames
ITEM_MODELS = {'car': Car, 'tour': Tour, 'attraction': Attraction}
CATALOG_TABLES = {'cars': Car, 'tours': Tour, 'attractions': Attraction}
