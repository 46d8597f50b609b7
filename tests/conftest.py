import pytest
from flask import g

from config import TestingConfig
from marketplace import create_app
from marketplace.extensions import db as _db
from marketplace.models import User, Profile, Car, Tour, Attraction


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    ctx = app.app_context()
    ctx.push()
    _db.create_all()
    yield app
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(db):
    def _make_user(email, password='password123', role='agent', superuser=False, with_profile=True):
        user = User(email=email)
        user.set_password(password)
        db.session.add(user)
        db.session.flush()
        if with_profile:
            db.session.add(Profile(user_id=user.id, first_name=email.split('@')[0].capitalize(),
                                   role=role, superuser=superuser))
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user('owner@carsrus.mu')


@pytest.fixture
def other_owner(make_user):
    return make_user('rival@carsrus.mu')


@pytest.fixture
def superuser(make_user):
    return make_user('admin@carsrus.mu', superuser=True)


@pytest.fixture
def customer(make_user):
    return make_user('jane@carsrus.mu', role='customer')


@pytest.fixture
def make_car(db):
    def _make_car(owner, name='Toyota Yaris', price_per_day=50.0, **kwargs):
        car = Car(name=name, brand=kwargs.pop('brand', 'Toyota'), price_per_day=price_per_day,
                  user_id=owner.id, **kwargs)
        db.session.add(car)
        db.session.commit()
        return car
    return _make_car


@pytest.fixture
def car(owner, make_car):
    return make_car(owner)


@pytest.fixture
def tour(db, owner):
    tour = Tour(name='South West Discovery', region='South', hours=8, price=120.0, user_id=owner.id)
    db.session.add(tour)
    db.session.commit()
    return tour


@pytest.fixture
def attraction(db, other_owner):
    attraction = Attraction(name='Le Morne Hike', region='South West', hours=4, price=45.0, user_id=other_owner.id)
    db.session.add(attraction)
    db.session.commit()
    return attraction


@pytest.fixture
def login(client):
    def _login(user, test_client=None):
        test_client = test_client or client
        with test_client.session_transaction() as sess:
            sess['_user_id'] = str(user.id)
            sess['_fresh'] = True
        # requests reuse the pushed app context, so forget the user cached on g
        g.pop('_login_user', None)
        return test_client
    return _login
