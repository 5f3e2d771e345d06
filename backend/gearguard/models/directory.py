from __future__ import annotations
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column, validates
from sqlalchemy import String, Integer, Boolean, ForeignKey, DateTime, CheckConstraint, text
from datetime import datetime
from typing import Optional

from gearguard.constants.roles import ALL_ROLES, ROLE_SUPER_ADMIN

Base = declarative_base()

# --- Master data: teams and staff ---
class Team(Base):
    __tablename__ = 'teams'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    # Sentinel squad for requests nobody has routed yet
    is_triage: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    members = relationship('Staff', back_populates='team')
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))


class Staff(Base):
    __tablename__ = 'staff'
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    team_id: Mapped[Optional[int]] = mapped_column(ForeignKey('teams.id'), nullable=True, index=True)
    team = relationship('Team', back_populates='members')
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    __table_args__ = (
        CheckConstraint(f"role = '{ROLE_SUPER_ADMIN}' OR team_id IS NOT NULL", name='ck_staff_team_required'),
    )

    @validates('role')
    def _validate_role(self, key, value):
        if value not in ALL_ROLES:
            raise ValueError(f'unknown role {value}')
        return value
