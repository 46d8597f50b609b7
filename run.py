import click
from marketplace import create_app, db
from marketplace.models import User, Profile, Car, Tour, Attraction, Booking, AvailabilityBlock, ApiLog

app = create_app()

@app.shell_context_processor
def make_shell_context():
    return {
        'db': db,
        'User': User,
        'Profile': Profile,
        'Car': Car,
        'Tour': Tour,
        'Attraction': Attraction,
        'Booking': Booking,
        'AvailabilityBlock': AvailabilityBlock,
        'ApiLog': ApiLog
    }

@app.cli.command('seed_db')
@click.option('--admin-email', default='admin@carsrus.mu', help='E-mail of the superuser account.')
@click.option('--admin-password', default='change-me-now', help='Password of the superuser account.')
def seed_db_command(admin_email, admin_password):
    """Adds a superuser and some sample listings."""
    db.create_all()

    admin = User.query.filter_by(email=admin_email).first()
    if not admin:
        admin = User(email=admin_email)
        admin.set_password(admin_password)
        db.session.add(admin)
        db.session.flush()
        db.session.add(Profile(user_id=admin.id, first_name='Platform', last_name='Admin', role='agent', superuser=True))

    db.session.query(Car).filter_by(user_id=admin.id).delete()
    db.session.query(Tour).filter_by(user_id=admin.id).delete()
    db.session.query(Attraction).filter_by(user_id=admin.id).delete()

    car1 = Car(name='Toyota Yaris', brand='Toyota', seats=5, transmission='automatic', price_per_day=35.0,
               large_bags=1, small_bags=2, location='Port Louis', description='Compact and economical city car.',
               features=['A/C', 'Bluetooth'], user_id=admin.id)
    car2 = Car(name='Suzuki Jimny', brand='Suzuki', seats=4, transmission='manual', price_per_day=50.0,
               large_bags=1, small_bags=1, location='Grand Baie', description='Small 4x4 for the island roads.',
               features=['4x4', 'A/C'], user_id=admin.id)
    car3 = Car(name='Hyundai Tucson', brand='Hyundai', seats=5, transmission='automatic', price_per_day=75.0,
               large_bags=3, small_bags=2, location='Mahebourg', description='Family SUV with plenty of luggage space.',
               features=['GPS', 'A/C', 'Bluetooth'], user_id=admin.id)
    db.session.add_all([car1, car2, car3])

    tour1 = Tour(name='South West Discovery', region='South', hours=8, price=120.0,
                 details='Chamarel, Black River Gorges and Grand Bassin.', user_id=admin.id)
    tour2 = Tour(name='North Island Hopping', region='North', hours=6, price=95.0,
                 details='Catamaran trip to Gabriel Island.', user_id=admin.id)
    db.session.add_all([tour1, tour2])

    attraction1 = Attraction(name='Le Morne Brabant Hike', region='South West', hours=4, price=45.0,
                             details='Guided hike to the summit of Le Morne.', user_id=admin.id)
    attraction2 = Attraction(name='Pamplemousses Botanical Garden', region='North', hours=2, price=15.0,
                             details='Giant water lilies and century-old palms.', user_id=admin.id)
    db.session.add_all([attraction1, attraction2])

    db.session.commit()
    print('Database seeded with a superuser, cars, tours and attractions!')
