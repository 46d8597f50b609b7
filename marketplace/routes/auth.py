# marketplace/routes/auth.py

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_user, logout_user, current_user
import datetime
from marketplace.models.user import User, Profile
from marketplace.forms.forms import LoginForm, RegistrationForm
from marketplace.services.log_service import log_event, session_management
from marketplace.extensions import db

auth = Blueprint('auth', __name__)

# --- Routes ---
@auth.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('main.dashboard'))

    form = LoginForm()
    if form.validate_on_submit():
        user = User.query.filter_by(email=form.email.data.strip().lower()).first()
        if user and user.is_active and user.check_password(form.password.data):
            login_user(user, remember=form.remember.data)
            user.last_seen = datetime.datetime.utcnow()
            db.session.commit()
            log_event("Login", "SUCCESS", {"email": user.email}, user_id=user.id, ip_address=request.remote_addr)
            next_page = request.args.get('next')
            if next_page and next_page.startswith('/') and not next_page.startswith('//'):
                return redirect(next_page)
            return redirect(url_for('main.dashboard'))
        log_event("Login", "FAILED", {"email": form.email.data}, ip_address=request.remote_addr)
        flash('Login failed. Check your e-mail and password.', 'danger')
    return render_template('login.html', form=form)

@auth.route('/register', methods=['GET', 'POST'])
def register():
    if current_user.is_authenticated:
        return redirect(url_for('main.dashboard'))

    form = RegistrationForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        if User.query.filter_by(email=email).first():
            flash('This e-mail is already registered.', 'danger')
            return render_template('register.html', form=form)

        with session_management():
            user = User(email=email)
            user.set_password(form.password.data)
            db.session.add(user)
            db.session.flush()
            # new accounts are never superusers; that flag is set by hand
            db.session.add(Profile(
                user_id=user.id,
                first_name=form.first_name.data,
                last_name=form.last_name.data,
                phone=form.phone.data,
                role=form.role.data,
                superuser=False
            ))

        log_event("Registration", "SUCCESS", {"email": email, "role": form.role.data},
                  user_id=user.id, ip_address=request.remote_addr)
        flash('Account created! Please log in to continue.', 'success')
        return redirect(url_for('auth.login'))
    return render_template('register.html', form=form)

@auth.route('/logout')
def logout():
    logout_user()
    return redirect(url_for('auth.login'))
