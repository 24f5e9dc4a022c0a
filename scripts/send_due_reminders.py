"""
期限が来たリマインダーをプッシュ通知するバッチ（cron から呼ぶ）

    python scripts/send_due_reminders.py --window-minutes 15

--window-minutes は cron の実行間隔と揃えること
"""
import argparse
import logging
import sys
from datetime import timedelta

import requests
from exponent_server_sdk import PushClient

from core.config import load_settings
from core.timeutil import utcnow
from db.database import make_engine, make_session_factory
from services.push_service import PushService
from services.reminder_notifier import notify_due_reminders


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--window-minutes", type=int, default=15)
    args = parser.parse_args()

    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    engine = make_engine(settings)
    SessionLocal = make_session_factory(engine)

    with requests.Session() as session:
        push = PushService(PushClient(host=settings.expo_host, session=session))
        db = SessionLocal()
        try:
            notify_due_reminders(db, push, utcnow(), timedelta(minutes=args.window_minutes))
        finally:
            db.close()

    engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
