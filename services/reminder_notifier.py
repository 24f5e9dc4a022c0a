# services/reminder_notifier.py
from datetime import datetime, timedelta
import logging

from sqlalchemy.orm import Session

from models.plant import Plant
from models.user import User
from services.plant_store import load_reminders
from services.push_service import PushService
from services.reminder_engine import due_reminders

logger = logging.getLogger(__name__)

TITLES = {
    "water": "水やりの時間です",
    "fertilize": "肥料をあげる時間です",
    "prune": "剪定の時間です",
    "repot": "植え替えの時間です",
}


def notify_due_reminders(db: Session, push: PushService, now: datetime, window: timedelta) -> int:
    """
    next_due が [now - window, now) に入ったリマインダーを通知する。
    cron の実行間隔と window を揃えれば同じリマインダーを二重に送らない

    Returns:
        int: 送信できた通知の数
    """
    start = now - window

    rows = (
        db.query(Plant, User.push_token)
        .join(User, User.user_id == Plant.user_id)
        .filter(User.push_token.isnot(None))
        .all()
    )

    sent = 0
    for plant, push_token in rows:
        for reminder in due_reminders(load_reminders(plant.reminders), start, now):
            title = TITLES.get(reminder.type.value, "お世話の時間です")
            ok = push.send(
                push_token,
                title,
                plant.name,
                data={"plantId": str(plant.plant_id), "reminderId": str(reminder.id)},
            )
            if ok:
                sent += 1

    logger.info("due reminder notifications sent: %d (window %s - %s)", sent, start, now)
    return sent
