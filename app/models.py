import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .database import Base

# Structured columns are JSONB on PostgreSQL and plain JSON text elsewhere
JSONColumn = JSON().with_variant(JSONB(), "postgresql")


def generate_id():
    """Generate a UUID primary key"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    user_type = Column(String(20), nullable=False, index=True)  # customer, provider, admin
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    profile_picture = Column(String(500), nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    provider_profile = relationship("ServiceProvider", back_populates="user", uselist=False, passive_deletes=True)
    service_requests = relationship("ServiceRequest", back_populates="customer", passive_deletes=True)


class ServiceProvider(Base):
    __tablename__ = "service_providers"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    business_name = Column(String(255), nullable=False)
    business_license = Column(String(100), nullable=True)
    services_offered = Column(JSONColumn, default=list, nullable=False)
    service_areas = Column(JSONColumn, default=list, nullable=False)
    verification_status = Column(
        String(20), default="pending", nullable=False, index=True
    )  # pending, verified, rejected
    rating = Column(Float, default=0, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)
    years_experience = Column(Integer, default=0, nullable=False)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="provider_profile")
    quotes = relationship("Quote", back_populates="provider")
    products = relationship("Product", back_populates="provider")

    @property
    def is_verified(self) -> bool:
        return self.verification_status == "verified"


class ServiceRequest(Base):
    __tablename__ = "service_requests"

    id = Column(String(36), primary_key=True, default=generate_id)
    customer_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    service_type = Column(String(100), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    # {address, city, state, zip_code, coordinates: {lat, lng}}
    location = Column(JSONColumn, nullable=False)
    urgency = Column(String(20), default="medium", nullable=False)  # low, medium, high, emergency
    status = Column(
        String(20), default="open", nullable=False, index=True
    )  # open, quoted, booked, in_progress, completed, cancelled
    budget_min = Column(Float, nullable=True)
    budget_max = Column(Float, nullable=True)
    preferred_date = Column(DateTime, nullable=True)
    images = Column(JSONColumn, default=list, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    customer = relationship("User", back_populates="service_requests")
    quotes = relationship("Quote", back_populates="service_request", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="service_request", cascade="all, delete-orphan")


class Quote(Base):
    __tablename__ = "quotes"
    __table_args__ = (
        UniqueConstraint("service_request_id", "provider_id", name="uq_quotes_request_provider"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    service_request_id = Column(
        String(36), ForeignKey("service_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider_id = Column(
        String(36), ForeignKey("service_providers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Float, nullable=False)
    notes = Column(Text, default="", nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)  # pending, accepted, rejected, expired
    valid_until = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    service_request = relationship("ServiceRequest", back_populates="quotes")
    provider = relationship("ServiceProvider", back_populates="quotes")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_provider_time", "provider_id", "scheduled_time"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    service_request_id = Column(
        String(36), ForeignKey("service_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # One booking per quote
    quote_id = Column(String(36), ForeignKey("quotes.id", ondelete="CASCADE"), unique=True, nullable=False)
    provider_id = Column(
        String(36), ForeignKey("service_providers.id", ondelete="CASCADE"), nullable=False
    )
    customer_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_time = Column(DateTime, nullable=False)
    status = Column(String(20), default="scheduled", nullable=False, index=True)  # scheduled, in_progress, completed, cancelled
    total_amount = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    service_request = relationship("ServiceRequest", back_populates="bookings")
    quote = relationship("Quote")
    provider = relationship("ServiceProvider")


class Call(Base):
    """Voice call between a customer and a provider; the telephony leg is external"""

    __tablename__ = "calls"

    id = Column(String(36), primary_key=True, default=generate_id)
    customer_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(
        String(36), ForeignKey("service_providers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_request_id = Column(
        String(36), ForeignKey("service_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status = Column(String(20), default="initiated", nullable=False, index=True)  # initiated, ringing, in_progress, completed, failed, cancelled
    call_duration = Column(Integer, nullable=True)  # seconds
    recording_url = Column(String(500), nullable=True)
    external_call_sid = Column(String(64), unique=True, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    provider = relationship("ServiceProvider")


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    image = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_id)
    provider_id = Column(
        String(36), ForeignKey("service_providers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    price = Column(Float, nullable=False)
    original_price = Column(Float, nullable=True)
    sku = Column(String(100), unique=True, nullable=False)
    stock_quantity = Column(Integer, default=0, nullable=False)
    images = Column(JSONColumn, default=list, nullable=False)
    specifications = Column(JSONColumn, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    weight = Column(Float, nullable=True)
    dimensions = Column(JSONColumn, nullable=True)  # {length, width, height}
    tags = Column(JSONColumn, default=list, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    provider = relationship("ServiceProvider", back_populates="products")
    category = relationship("Category", back_populates="products")
