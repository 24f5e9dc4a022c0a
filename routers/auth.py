from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth.deps import get_current_user
from core.errors import PersistenceError, ValidationError
from db.database import get_db
from models.user import User
from schemas.common import DataResponse
from schemas.user import PushTokenUpdate, UserResponse
from services.push_service import is_expo_push_token

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


def _to_response(user: User) -> UserResponse:
    return UserResponse(
        user_id=user.user_id,
        has_push_token=bool(user.push_token),
        created_at=user.created_at,
    )


@router.get("/me", response_model=DataResponse[UserResponse])
def get_me(user: User = Depends(get_current_user)):
    """
    現在ログイン中のユーザー情報を返すAPI
    （JWTが正しく検証されないと動かない）
    """
    return {"data": _to_response(user)}


@router.put("/push-token", response_model=DataResponse[UserResponse])
def set_push_token(
    data: PushTokenUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """リマインダー通知用の Expo push token を登録する"""
    if not is_expo_push_token(data.token):
        raise ValidationError("Invalid Expo push token")

    try:
        user.push_token = data.token
        db.commit()
        db.refresh(user)
    except SQLAlchemyError:
        db.rollback()
        raise PersistenceError()

    return {"data": _to_response(user)}
