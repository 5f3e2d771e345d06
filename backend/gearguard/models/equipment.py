from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Boolean, Date, ForeignKey, DateTime, text
from datetime import date, datetime
from typing import Optional
from .directory import Base


class Equipment(Base):
    __tablename__ = 'equipment'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    serial_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    department: Mapped[str] = mapped_column(String(80), nullable=False)
    location: Mapped[str] = mapped_column(String(120), nullable=False)
    employee_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    purchase_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    warranty_info: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    maintenance_team_id: Mapped[Optional[int]] = mapped_column(ForeignKey('teams.id'), nullable=True, index=True)
    is_scrapped: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    maintenance_team = relationship('Team')
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))
