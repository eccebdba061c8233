from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from .base import BaseModel


class TeamMember(BaseModel):
    __tablename__ = "team_members"

    # Stable identity supplied by the client (UUID string in the original app)
    member_key = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)
    avatar = Column(String, default="")

    # Relationships
    updates = relationship("StandupUpdate", back_populates="team_member")
