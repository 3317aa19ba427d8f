from models.base_model import Base, BaseModel, utcnow
from sqlalchemy import Column, Date, DateTime, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func


class User(BaseModel, Base):
    __tablename__ = "users"
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    birthday = Column(Date, nullable=True)
    # front-end origin captured at self-service registration; Google sign-in
    # is only allowed for users that have one
    origin_url = Column(String(2048), nullable=True)
    avatar_url = Column(String(2048), nullable=True)

    # latest issued credentials, kept for introspection only
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    sid = Column(String(36), nullable=True)

    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )

    sessions = relationship(
        "AuthSession",
        back_populates="user",
        cascade="all, delete",
        passive_deletes=True
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def record_tokens(self, session_id: str, access_token: str, refresh_token: str) -> None:
        self.sid = session_id
        self.access_token = access_token
        self.refresh_token = refresh_token

    def clear_tokens(self) -> None:
        self.sid = None
        self.access_token = ""
        self.refresh_token = ""
