from marketplace.extensions import db, login_manager, bcrypt
from flask_login import UserMixin
import datetime

@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))

# --- Models ---
class User(db.Model, UserMixin):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(150), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    last_seen = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    profile = db.relationship('Profile', backref='user', uselist=False, lazy=True)
    bookings = db.relationship('Booking', backref='customer', lazy='dynamic')

    def __repr__(self):
        return f"User('{self.email}')"

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def is_superuser(self):
        return bool(self.profile and self.profile.superuser)

    @property
    def display_name(self):
        if self.profile and self.profile.first_name:
            return f"{self.profile.first_name} {self.profile.last_name or ''}".strip()
        return self.email

class Profile(db.Model):
    """Per-user profile row. `superuser` grants unfiltered reads across all owners."""
    __tablename__ = 'profiles'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=False)
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    phone = db.Column(db.String(32))
    role = db.Column(db.String(20), default='customer')
    superuser = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def __repr__(self):
        return f"Profile(User: {self.user_id}, Role: {self.role}, Superuser: {self.superuser})"

class ApiLog(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, default=datetime.datetime.utcnow, index=True)
    event_type = db.Column(db.String(100), index=True)
    status = db.Column(db.String(50), index=True)
    details = db.Column(db.Text)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    ip_address = db.Column(db.String(45))
