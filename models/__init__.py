from models.base_model import Base
from models.user import User
from models.refresh_token import RefreshToken
from models.db_storage import DBStorage
from models.stores import UserStore, RefreshTokenStore

__all__ = ["Base", "User", "RefreshToken", "DBStorage", "UserStore", "RefreshTokenStore"]
