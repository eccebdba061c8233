from sqlalchemy import Column, Integer, Text, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import BaseModel


class StandupEntry(BaseModel):
    """One calendar day of standups, dated in the reference timezone"""
    __tablename__ = "standup_entries"

    date = Column(Date, unique=True, index=True, nullable=False)

    # Relationships
    updates = relationship("StandupUpdate", back_populates="standup_entry", cascade="all, delete-orphan")


class StandupUpdate(BaseModel):
    """A team member's yesterday/today/blockers for one standup day"""
    __tablename__ = "standup_updates"
    __table_args__ = (
        UniqueConstraint("standup_entry_id", "team_member_id", name="uq_standup_updates_entry_member"),
    )

    # Free text, may contain rich-text HTML
    yesterday = Column(Text, default="")
    today = Column(Text, default="")
    blockers = Column(Text, default="")

    # Foreign keys
    standup_entry_id = Column(Integer, ForeignKey("standup_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    team_member_id = Column(Integer, ForeignKey("team_members.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    standup_entry = relationship("StandupEntry", back_populates="updates")
    team_member = relationship("TeamMember", back_populates="updates")
