from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional


class BookingStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    ALL = (PENDING, CONFIRMED, CANCELLED, COMPLETED)
    # statuses that hold a slot / units of stock
    ACTIVE = (PENDING, CONFIRMED)

    TRANSITIONS = {
        PENDING: {CONFIRMED, CANCELLED},
        CONFIRMED: {COMPLETED, CANCELLED},
        CANCELLED: set(),
        COMPLETED: set(),
    }

    @classmethod
    def sources(cls, status):
        """Statuses a record may move to `status` from."""
        return tuple(s for s in cls.ALL if status in cls.TRANSITIONS[s])


class PaymentStatus:
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"

    ALL = (PENDING, PAID, REFUNDED, FAILED)


class Difficulty:
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    ALL = (BEGINNER, INTERMEDIATE, ADVANCED, EXPERT)


class TutorialProgress:
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    ALL = (NOT_STARTED, IN_PROGRESS, COMPLETED)


class UserRole:
    USER = "user"
    VENUE_OWNER = "venue_owner"
    EQUIPMENT_OWNER = "equipment_owner"
    ADMIN = "admin"

    ALL = (USER, VENUE_OWNER, EQUIPMENT_OWNER, ADMIN)


@dataclass
class Profile:
    id: int
    email: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = UserRole.USER
    created_at: Optional[datetime] = None


@dataclass
class Venue:
    owner_id: int
    name: str
    location: str
    address: str
    sport_type: str
    hourly_price: Decimal
    description: Optional[str] = None
    amenities: dict = field(default_factory=dict)
    images: list = field(default_factory=list)
    half_day_price: Optional[Decimal] = None
    full_day_price: Optional[Decimal] = None
    capacity: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class VenueAvailability:
    venue_id: int
    day_of_week: int  # 0 = Monday
    start_time: time
    end_time: time
    is_available: bool = True
    id: Optional[int] = None


@dataclass
class VenueBooking:
    venue_id: int
    user_id: int
    booking_date: date
    start_time: time
    end_time: time
    total_price: Decimal
    status: str = BookingStatus.PENDING
    payment_status: str = PaymentStatus.PENDING
    payment_id: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # embedded venue summary (name, location, sport_type, images) on listings
    venue_details: Optional[dict] = None


@dataclass
class Equipment:
    owner_id: int
    name: str
    category: str
    brand: str
    daily_price: Decimal
    weekly_price: Decimal
    total_quantity: int
    available_quantity: int
    description: Optional[str] = None
    images: list = field(default_factory=list)
    monthly_price: Optional[Decimal] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class EquipmentRental:
    equipment_id: int
    user_id: int
    start_date: date
    end_date: date
    quantity: int
    total_price: Decimal
    status: str = BookingStatus.PENDING
    payment_status: str = PaymentStatus.PENDING
    payment_id: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    equipment_details: Optional[dict] = None


@dataclass
class Tutorial:
    title: str
    sport_category: str
    difficulty: str
    description: Optional[str] = None
    instructor_id: Optional[int] = None
    video_url: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[int] = None  # minutes
    is_premium: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class TutorialLesson:
    tutorial_id: int
    title: str
    sequence_order: int
    description: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[int] = None
    id: Optional[int] = None


@dataclass
class UserTutorialProgress:
    user_id: int
    tutorial_id: int
    total_lessons: int
    current_lesson_id: Optional[int] = None
    progress: str = TutorialProgress.NOT_STARTED
    completed_lessons: int = 0
    last_accessed: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    certificate_issued: bool = False
    id: Optional[int] = None


@dataclass
class Notification:
    user_id: int
    title: str
    message: str
    is_read: bool = False
    type: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
