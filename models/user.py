from models.base_model import Base, BaseModel
from sqlalchemy import Column, String


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    def claims(self) -> dict:
        """Identity fields embedded in issued tokens."""
        return {"email": self.email, "id": str(self.id), "username": self.username}

    def __repr__(self):
        return f"<User {self.email}>"
