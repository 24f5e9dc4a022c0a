"""
ローカル確認用の JWT を発行する

    python scripts/gen_jwt.py <user_id>
"""
import os
import sys
import time

from dotenv import load_dotenv
from jose import jwt

# .env 読み込み
load_dotenv()

SECRET = os.getenv("JWT_SECRET")
if not SECRET:
    sys.exit("JWT_SECRET is not set")

USER_ID = sys.argv[1] if len(sys.argv) > 1 else "user_local_dev"

payload = {
    "sub": USER_ID,                          # 認証ユーザーID
    "role": "authenticated",
    "exp": int(time.time()) + 60 * 60 * 24,  # 24時間有効
}

token = jwt.encode(payload, SECRET, algorithm="HS256")
print(token)
