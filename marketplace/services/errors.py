class MarketplaceError(Exception):
    """Base class for errors shown back to the user. `status_code` is the HTTP status used by the JSON handler."""
    status_code = 400
    default_message = 'Something went wrong.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

class InvalidDateRange(MarketplaceError):
    default_message = 'Please select valid pickup and drop-off dates.'

class InvalidRate(MarketplaceError):
    default_message = 'The item has no valid rate.'

class DateRangeConflict(MarketplaceError):
    status_code = 409
    default_message = 'The item is already booked for some of the selected dates.'

class ItemUnavailable(MarketplaceError):
    status_code = 409
    default_message = 'This item is not available for booking.'

class ItemNotFound(MarketplaceError):
    status_code = 404
    default_message = 'Item not found.'

class PaymentStateError(MarketplaceError):
    status_code = 409
    default_message = 'This booking has already been paid.'

class PaymentDeclined(MarketplaceError):
    status_code = 402
    default_message = 'There was an error processing your payment. Please try again.'

class BackendUnavailable(MarketplaceError):
    status_code = 503
    default_message = 'The service is temporarily unavailable. Please try again.'

class InvalidBookingDetails(MarketplaceError):
    default_message = 'Please fill in your name, e-mail and pickup location.'
