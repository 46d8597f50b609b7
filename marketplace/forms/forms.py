from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, IntegerField, BooleanField, SubmitField, FloatField, TextAreaField, SelectField, DateField
from wtforms.validators import DataRequired, Email, EqualTo, Length, Optional, NumberRange, ValidationError

# Login form
class LoginForm(FlaskForm):
    email = StringField('E-mail', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=[DataRequired()])
    remember = BooleanField('Remember me')
    submit = SubmitField('Log In')

# Sign-up form
class RegistrationForm(FlaskForm):
    first_name = StringField('First Name', validators=[DataRequired(message="This field is required.")])
    last_name = StringField('Last Name', validators=[Optional()])
    email = StringField('E-mail', validators=[DataRequired(message="This field is required."), Email(message="Please enter a valid e-mail.")])
    phone = StringField('Phone', validators=[Optional(), Length(min=7, max=32)])
    role = SelectField('I am a', choices=[('customer', 'Customer'), ('agent', 'Agent / Owner')], default='customer')
    password = PasswordField('Password', validators=[DataRequired(), Length(min=8, message="The password must have at least 8 characters.")])
    password2 = PasswordField('Confirm Password', validators=[DataRequired(), EqualTo('password', message='Passwords must match.')])
    submit = SubmitField('Sign Up')

# Car listing form (admin)
class CarForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired()])
    brand = StringField('Brand', validators=[DataRequired()])
    seats = IntegerField('Seats', validators=[Optional(), NumberRange(min=1)])
    transmission = SelectField('Transmission', choices=[('automatic', 'Automatic'), ('manual', 'Manual')])
    price_per_day = FloatField('Price per Day ($)', validators=[DataRequired(), NumberRange(min=0.01)])
    mileage = StringField('Mileage', validators=[Optional()])
    large_bags = IntegerField('Large Bags', validators=[Optional(), NumberRange(min=0)], default=0)
    small_bags = IntegerField('Small Bags', validators=[Optional(), NumberRange(min=0)], default=0)
    location = StringField('Location', validators=[Optional()])
    description = TextAreaField('Description')
    # comma separated
    features = StringField('Features (comma separated)')
    image_urls = TextAreaField('Image URLs (comma separated)')
    available = BooleanField('Available for booking', default=True)
    submit = SubmitField('Save Car')

# Tour / attraction form (admin); both tables share the same fields
class TourForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired()])
    region = StringField('Region', validators=[DataRequired()])
    hours = IntegerField('Duration (hours)', validators=[Optional(), NumberRange(min=1)])
    price = FloatField('Price ($)', validators=[DataRequired(), NumberRange(min=0.01)])
    details = TextAreaField('Details')
    image_urls = TextAreaField('Image URLs (comma separated)')
    available = BooleanField('Available for booking', default=True)
    submit = SubmitField('Save')

class AttractionForm(TourForm):
    pass

# Booking form
class BookingForm(FlaskForm):
    customer_name = StringField('Full Name', validators=[DataRequired()])
    customer_email = StringField('E-mail', validators=[DataRequired(), Email()])
    customer_phone = StringField('Phone', validators=[Optional()])
    start_date = DateField('Pickup Date', format='%Y-%m-%d', validators=[DataRequired()])
    end_date = DateField('Drop-off Date', format='%Y-%m-%d', validators=[DataRequired()])
    pickup_location = StringField('Pickup Location', validators=[DataRequired()])
    dropoff_location = StringField('Drop-off Location', validators=[Optional()])
    special_requests = TextAreaField('Special Requests', validators=[Optional()])
    submit = SubmitField('Book Now')

    def validate_end_date(self, field):
        if self.start_date.data and field.data and field.data <= self.start_date.data:
            raise ValidationError('The drop-off date must be after the pickup date.')
