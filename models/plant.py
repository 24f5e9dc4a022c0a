from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Uuid
from db.database import Base
from core.timeutil import utcnow
import uuid


class Plant(Base):
    __tablename__ = "plants"

    plant_id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # 所有者（JWT の sub）。全ての操作は (plant_id, user_id) で絞る
    user_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)

    name = Column(String, nullable=False)
    catalog_id = Column(String)

    # 追加時点のカタログ情報のスナップショット（再取得しない）
    info = Column(JSON)

    added_at = Column(DateTime, default=utcnow, nullable=False)

    # リマインダーはサブドキュメントの配列として1行にまとめて持つ（作成順）
    reminders = Column(JSON, nullable=False, default=list)
