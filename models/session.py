"""
AuthSession model: one credential epoch for a user.
Fields:
- id (uuid4 string, embedded in both tokens as `sid`)
- user_id (String(36)) - FK to users.id
- created_at

Rows are only ever inserted or deleted; deleting the row revokes every token
that names it.
"""
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class AuthSession(BaseModel, Base):
    __tablename__ = "sessions"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="sessions")

    def __repr__(self):
        return f"<AuthSession id={self.id} user_id={self.user_id}>"
