from marketplace.models.user import User, Profile, ApiLog
from marketplace.models.catalog import Car, Tour, Attraction, ITEM_MODELS, CATALOG_TABLES
from marketplace.models.booking import Booking, AvailabilityBlock, PaymentStatus, BookingStatus
