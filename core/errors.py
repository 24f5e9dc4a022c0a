# core/errors.py
"""
アプリ共通の例外。
ルーターの外側（main.py の exception handler）でまとめて
ステータスコード + {"message": ...} に変換する
"""


class AppError(Exception):
    status_code = 500
    public_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.public_message
        super().__init__(self.message)


class ValidationError(AppError):
    """入力の欠落・不正"""
    status_code = 400
    public_message = "Invalid request."


class AuthError(AppError):
    """認証情報なし / 不正なトークン"""
    status_code = 401
    public_message = "You are not logged in."


class NotFoundError(AppError):
    """存在しない、または他ユーザーのリソース（区別しない）"""
    status_code = 404
    public_message = "Not found."


class UpstreamError(AppError):
    """外部API（Perenual / Pl@ntNet / Expo）の失敗"""
    status_code = 500
    public_message = "Upstream service error."


class PersistenceError(AppError):
    """DB 書き込みの失敗"""
    status_code = 500
    public_message = "Could not save changes."
