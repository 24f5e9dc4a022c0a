import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import AuthError, PersistenceError
from db.database import get_db
from models.user import User

logger = logging.getLogger(__name__)

# ヘッダーなしでも 403 にせず、こちらで 401 を返す
security = HTTPBearer(auto_error=False)


def decode_subject(token: str, secret: str, algorithm: str = "HS256") -> str:
    """
    JWT を検証して sub（ユーザーID）を返す
    """
    try:
        # 認証プロバイダの JWT には 'aud' が入っていることが多く、
        # デフォルトの検証だとエラーになるので verify_aud は False
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.info("JWT verification failed: %s", e)
        raise AuthError()

    user_id = payload.get("sub")
    if not user_id:
        logger.info("JWT has no 'sub' claim")
        raise AuthError()

    return str(user_id)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthError()

    settings = request.app.state.settings
    user_id = decode_subject(credentials.credentials, settings.jwt_secret, settings.jwt_algorithm)

    user = db.query(User).filter(User.user_id == user_id).first()

    # 初回アクセス時は自動作成
    if user is None:
        logger.info("registering new user: %s", user_id)
        try:
            user = User(user_id=user_id)
            db.add(user)
            db.commit()
            db.refresh(user)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("could not create user %s: %s", user_id, e)
            raise PersistenceError("Could not create user in database.")

    return user
