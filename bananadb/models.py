from sqlalchemy import (Column, Integer, String, Float, Text, DateTime, Boolean, ForeignKey,
                        UniqueConstraint, CheckConstraint)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from bananadb.db import Base

def utcnow():
    return datetime.now(timezone.utc)

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=True)
    password_hash = Column(String(300), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    last_sign_in_at = Column(DateTime(timezone=True), nullable=True)

class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("year_range_start <= year_range_end", name="ck_projects_year_range"),
        CheckConstraint("engine_capacity_start <= engine_capacity_end", name="ck_projects_engine_range"),
    )
    id = Column(Integer, primary_key=True)
    make = Column(String(100), nullable=False, index=True)
    model = Column(String(100), nullable=False, index=True)
    year_range_start = Column(Integer, nullable=False)
    year_range_end = Column(Integer, nullable=False)
    engine_capacity_start = Column(Integer, nullable=False, default=0)
    engine_capacity_end = Column(Integer, nullable=False, default=0)
    fuel_type = Column(String(50), nullable=False, default="Petrol")
    co2_emissions = Column(Float, nullable=False, default=0)
    doors_config = Column(String(50), nullable=False, default="all door configs")
    freename = Column(String(100), nullable=False, default="")
    transport_costs = Column(Integer, nullable=False, default=0)
    isv = Column(Integer, nullable=False, default=0)  # Portuguese vehicle tax
    portuguese_registration = Column(Integer, nullable=False, default=0)
    german_plates_insurance = Column(Integer, nullable=False, default=0)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    owner = relationship("User")
    listings = relationship("CarListing", back_populates="project", passive_deletes=True)

class CarListing(Base):
    __tablename__ = "car_listings"
    __table_args__ = (
        UniqueConstraint("source", "unique_identifier", name="uq_car_listings_source_identifier"),
    )
    id = Column(Integer, primary_key=True)
    make = Column(String(100), nullable=False, index=True)
    model = Column(String(100), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    mileage = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    co2 = Column(Float, nullable=True)
    fuel_type = Column(String(50), nullable=True)
    first_registration_date = Column(String(50), nullable=True)
    power_kw = Column(Float, nullable=True)
    power_hp = Column(Float, nullable=True)
    gear_type = Column(String(50), nullable=True)
    number_of_doors = Column(Integer, nullable=True)
    number_of_seats = Column(Integer, nullable=True)
    seller = Column(String(200), nullable=True)
    location = Column(String(200), nullable=True)
    listing_url = Column(String(1000), nullable=True)
    listing_date = Column(String(50), nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    source = Column(String(100), nullable=False)
    unique_identifier = Column(String(150), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    project = relationship("Project", back_populates="listings")

class DataSource(Base):
    __tablename__ = "data_sources"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    country = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

class AppSetting(Base):
    __tablename__ = "app_settings"
    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
