"""SQLAlchemy 2.0 database models."""
from sqlalchemy import (
    Column, String, Integer, Date, DateTime, ForeignKey, JSON, Enum as SQLEnum, Boolean, Float, Text,
    UniqueConstraint, func, select,
)
from sqlalchemy.orm import column_property, relationship, declarative_base
from datetime import datetime
import enum
import uuid


Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class UserRole(str, enum.Enum):
    """Platform role."""
    USER = "USER"
    ADMIN = "ADMIN"


class UserType(str, enum.Enum):
    """Account type; only companies publish events."""
    PERSON = "PERSON"
    COMPANY = "COMPANY"


class User(Base):
    """User account. `password` holds the credential hash issued by the auth service."""
    __tablename__ = "users"
    
    id = Column(String, primary_key=True, default=_uuid)
    email = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)
    user_type = Column(SQLEnum(UserType), default=UserType.PERSON, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    events = relationship("Event", back_populates="user", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan")


class Profile(Base):
    """Profile data for a user; contact fields are shown only to their owner."""
    __tablename__ = "profiles"
    
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), unique=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    phone = Column(String, nullable=True)
    city = Column(String, nullable=True)
    gender = Column(String(10), nullable=True)
    birth_date = Column(Date, nullable=True)
    
    # Relationships
    user = relationship("User", back_populates="profile")


class Location(Base):
    """Venue with its department/province/district hierarchy."""
    __tablename__ = "locations"
    
    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=True)
    department = Column(String, nullable=False)
    province = Column(String, nullable=False)
    district = Column(String, nullable=False, default="")
    address = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Event(Base):
    """Event model."""
    __tablename__ = "events"
    
    id = Column(String, primary_key=True, default=_uuid)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    category = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=True)
    banner_url = Column(String, nullable=True)
    website_url = Column(String, nullable=True)
    ticket_urls = Column(JSON, default=list)  # [{name, url}]
    is_active = Column(Boolean, default=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_banner = Column(Boolean, default=False, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    location_id = Column(String, ForeignKey("locations.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    user = relationship("User", back_populates="events")
    location = relationship("Location")
    dates = relationship(
        "EventDate", back_populates="event", cascade="all, delete-orphan",
        order_by=lambda: [EventDate.date, EventDate.start_time]
    )
    favorites = relationship("Favorite", back_populates="event", cascade="all, delete-orphan")
    comments = relationship("EventComment", back_populates="event", cascade="all, delete-orphan")


class EventDate(Base):
    """One scheduled occurrence of an event. Times are zero-padded HH:MM strings."""
    __tablename__ = "event_dates"
    
    id = Column(String, primary_key=True, default=_uuid)
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    price = Column(Float, nullable=True)  # None or 0 means free
    capacity = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    event = relationship("Event", back_populates="dates")


class Favorite(Base):
    """A user's bookmark of an event, optionally scoped to one date."""
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", "event_date_id", name="uq_favorite_user_event_date"),
    )
    
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    event_date_id = Column(String, ForeignKey("event_dates.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    user = relationship("User", back_populates="favorites")
    event = relationship("Event", back_populates="favorites")
    event_date = relationship("EventDate")


class EventComment(Base):
    """Comment on an event; replies point at their parent."""
    __tablename__ = "event_comments"
    
    id = Column(String, primary_key=True, default=_uuid)
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    parent_id = Column(String, ForeignKey("event_comments.id"), nullable=True, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    event = relationship("Event", back_populates="comments")
    user = relationship("User")
    replies = relationship(
        "EventComment", cascade="all, delete-orphan", order_by="EventComment.created_at"
    )
    likes = relationship("EventCommentLike", back_populates="comment", cascade="all, delete-orphan")


class EventCommentLike(Base):
    """Like on a comment."""
    __tablename__ = "event_comment_likes"
    __table_args__ = (
        UniqueConstraint("user_id", "comment_id", name="uq_comment_like"),
    )
    
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    comment_id = Column(String, ForeignKey("event_comments.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    comment = relationship("EventComment", back_populates="likes")


class Follow(Base):
    """Directed follow edge between users."""
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follow"),
    )
    
    id = Column(String, primary_key=True, default=_uuid)
    follower_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    following_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Category(Base):
    """Browsable category with display order."""
    __tablename__ = "categories"
    
    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, unique=True, nullable=False)
    icon = Column(String, nullable=True)
    order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class Complaint(Base):
    """Libro de Reclamaciones entry."""
    __tablename__ = "complaints"
    
    id = Column(String, primary_key=True, default=_uuid)
    
    # Consumer
    consumer_name = Column(String, nullable=False)
    consumer_doc_type = Column(String, nullable=False)
    consumer_doc_number = Column(String, nullable=False)
    consumer_address = Column(String, nullable=True)
    consumer_department = Column(String, nullable=True)
    consumer_province = Column(String, nullable=True)
    consumer_district = Column(String, nullable=True)
    consumer_phone = Column(String, nullable=True)
    consumer_email = Column(String, nullable=True)
    is_minor = Column(Boolean, default=False, nullable=False)
    
    # Representative (only for minors)
    rep_name = Column(String, nullable=True)
    rep_doc_type = Column(String, nullable=True)
    rep_doc_number = Column(String, nullable=True)
    rep_address = Column(String, nullable=True)
    rep_department = Column(String, nullable=True)
    rep_province = Column(String, nullable=True)
    rep_district = Column(String, nullable=True)
    rep_phone = Column(String, nullable=True)
    rep_email = Column(String, nullable=True)
    
    # Good contracted
    good_type = Column(String, nullable=False)  # PRODUCTO / SERVICIO
    claim_amount = Column(Float, nullable=False, default=0)
    good_description = Column(Text, nullable=False)
    
    # Claim
    claim_type = Column(String, nullable=False)  # RECLAMO / QUEJA
    claim_detail = Column(Text, nullable=False)
    order_request = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# Counts shown on event responses, loaded with the event row
Event.favorites_count = column_property(
    select(func.count(Favorite.id))
    .where(Favorite.event_id == Event.id)
    .correlate_except(Favorite)
    .scalar_subquery()
)
Event.comments_count = column_property(
    select(func.count(EventComment.id))
    .where(EventComment.event_id == Event.id)
    .correlate_except(EventComment)
    .scalar_subquery()
)
