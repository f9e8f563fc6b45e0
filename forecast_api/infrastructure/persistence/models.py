"""SQLAlchemy models for locations and their daily forecasts."""
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from forecast_api.constants import LOCATION_NAME_MAX_LENGTH
from forecast_api.infrastructure.persistence.db import Base


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (
        UniqueConstraint("latitude", "longitude", name="ix_location_coordinates"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    latitude = Column(Numeric(10, 6, asdecimal=True), nullable=False)
    longitude = Column(Numeric(10, 6, asdecimal=True), nullable=False)
    name = Column(String(LOCATION_NAME_MAX_LENGTH))
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_used_at = Column(DateTime(timezone=True), nullable=False, index=True)

    forecasts = relationship(
        "WeatherForecast",
        back_populates="location",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="WeatherForecast.forecast_date",
    )


class WeatherForecast(Base):
    __tablename__ = "weather_forecasts"
    __table_args__ = (
        UniqueConstraint("location_id", "forecast_date", name="ix_weather_forecast_location_date"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(
        Integer,
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    forecast_date = Column(Date, nullable=False)
    temperature = Column(Numeric(5, 2, asdecimal=True), nullable=False)
    max_temperature = Column(Numeric(5, 2, asdecimal=True), nullable=False)
    min_temperature = Column(Numeric(5, 2, asdecimal=True), nullable=False)
    wind_speed = Column(Numeric(5, 2, asdecimal=True), nullable=False)
    weather_code = Column(Integer, nullable=False)
    retrieved_at = Column(DateTime(timezone=True), nullable=False)

    location = relationship("Location", back_populates="forecasts")
