from sqlalchemy import Column, String, DateTime
from db.database import Base
from core.timeutil import utcnow


class User(Base):
    __tablename__ = "users"

    # 認証プロバイダの subject をそのまま主キーにする
    user_id = Column(String, primary_key=True)
    push_token = Column(String)
    created_at = Column(DateTime, default=utcnow)
