from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, date, time, timezone
from typing import Optional, Union
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Float, Date, DateTime, ForeignKey, CheckConstraint, func
from gearguard.models.directory import Base


@dataclass(frozen=True)
class Routed:
    team_id: int


@dataclass(frozen=True)
class Unrouted:
    """Request parked on the triage squad; no technician/team match applies."""
    triage_team_id: int


Routing = Union[Routed, Unrouted]


def routing_for_team(team) -> Routing:
    if team.is_triage:
        return Unrouted(team.id)
    return Routed(team.id)


class MaintenanceRequest(Base):
    __tablename__ = 'maintenance_requests'
    # Status constants
    STATUS_NEW = 'new'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_REPAIRED = 'repaired'
    STATUS_SCRAP = 'scrap'
    ALL_STATUSES = (STATUS_NEW, STATUS_IN_PROGRESS, STATUS_REPAIRED, STATUS_SCRAP)
    TERMINAL_STATUSES = (STATUS_REPAIRED, STATUS_SCRAP)
    # Type constants
    TYPE_CORRECTIVE = 'corrective'
    TYPE_PREVENTIVE = 'preventive'
    ALL_TYPES = (TYPE_CORRECTIVE, TYPE_PREVENTIVE)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    equipment_id: Mapped[int] = mapped_column(ForeignKey('equipment.id'), nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(ForeignKey('teams.id'), nullable=False, index=True)
    technician_id: Mapped[Optional[str]] = mapped_column(ForeignKey('staff.id'), nullable=True, index=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_NEW, index=True)
    scheduled_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    duration_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    # Traceability stamps
    created_by_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    picked_up_by_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    picked_up_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_by_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    follow_up_of_request_id: Mapped[Optional[int]] = mapped_column(ForeignKey('maintenance_requests.id'), nullable=True, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    equipment = relationship('Equipment')
    team = relationship('Team')
    technician = relationship('Staff')
    follow_up_of = relationship('MaintenanceRequest', remote_side=[id])

    __table_args__ = (
        CheckConstraint("status IN ('new', 'in_progress', 'repaired', 'scrap')", name='ck_request_status'),
        CheckConstraint("type IN ('corrective', 'preventive')", name='ck_request_type'),
        CheckConstraint("type != 'preventive' OR scheduled_date IS NOT NULL", name='ck_request_preventive_schedule'),
        {'sqlite_autoincrement': True},
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def routing(self) -> Routing:
        if self.team is None:
            return Routed(self.team_id)
        return routing_for_team(self.team)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Scheduled work counts as overdue from midnight UTC of its date until repaired."""
        if self.scheduled_date is None or self.status == self.STATUS_REPAIRED:
            return False
        now = now or datetime.now(timezone.utc)
        due = datetime.combine(self.scheduled_date, time.min, tzinfo=timezone.utc)
        return due < now

# Status flow: new -> in_progress -> repaired | scrap (both terminal)
# Completion stamps require a pickup stamp; see gearguard.services.transitions.
