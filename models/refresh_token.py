"""
RefreshToken model: stores issued refresh tokens so they can be rotated.
Fields:
- token (unique) - the signed refresh token itself
- user_id (String(36)) - FK to users.id
- created_at, updated_at

A row is consumed (hard deleted) by a successful refresh. Expiry lives
inside the signed token, so there is no expires_at column and no sweeping.
"""
from sqlalchemy import Column, String, ForeignKey
from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(1024), nullable=False, unique=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self):
        return f"<RefreshToken user={self.user_id}>"
