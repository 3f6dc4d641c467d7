from routes.admin import admin_bp
from routes.booking import booking_bp
from routes.equipment import equipment_bp
from routes.health import health_bp
from routes.notifications import notification_bp
from routes.profile import profile_bp
from routes.rentals import rental_bp
from routes.tutorials import tutorial_bp
from routes.venues import venue_bp

ALL_BLUEPRINTS = (
    health_bp,
    profile_bp,
    admin_bp,
    venue_bp,
    booking_bp,
    equipment_bp,
    rental_bp,
    tutorial_bp,
    notification_bp,
)
