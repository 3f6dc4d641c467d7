from .db import db
from .user import User
from .session import Session
from .audit_log import AuditLog
from .venue import Venue, VenueAvailability
from .booking import Booking
from .equipment import Equipment
from .rental import Rental
from .tutorial import Tutorial, TutorialLesson, UserTutorialProgress
from .notification import Notification
