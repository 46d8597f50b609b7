import os
from dotenv import load_dotenv

# Loads environment variables from the .env file
load_dotenv()

# Project base path
basedir = os.path.abspath(os.path.dirname(__file__))

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-before-deploying'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(basedir, 'marketplace.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- MAIL ---
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = True
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'bookings@carsrus.mu')
    BOOKING_CONFIRMATION_EMAILS = os.environ.get('BOOKING_CONFIRMATION_EMAILS', 'true').lower() == 'true'

    # --- REPORTS ---
    COMPANY_NAME = os.environ.get('COMPANY_NAME', 'CarsRus Ltd')
    COMPANY_ADDRESS = os.environ.get('COMPANY_ADDRESS', 'Royal Road, St Pierre, Mauritius')
    REPORT_ROWS_PER_TABLE = 10

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    MAIL_SUPPRESS_SEND = True
    BCRYPT_LOG_ROUNDS = 4
