"""
Caller-facing error taxonomy for request-triggered endpoints.

Each error carries a stable ``code`` and an HTTP status; the message is the
localized text shown to the caller.
"""
from flask import jsonify


class ServiceError(Exception):
    code = 'internal'
    status_code = 500
    default_message = '処理中にエラーが発生しました。しばらくしてから再度お試しください。'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_response(self):
        return jsonify({
            'success': False,
            'code': self.code,
            'error': self.message,
        }), self.status_code


class InvalidArgument(ServiceError):
    code = 'invalid-argument'
    status_code = 400
    default_message = '入力内容が正しくありません'


class Unauthenticated(ServiceError):
    code = 'unauthenticated'
    status_code = 401
    default_message = '認証が必要です'


class PermissionDenied(ServiceError):
    code = 'permission-denied'
    status_code = 403
    default_message = 'この操作を行う権限がありません'


class NotFound(ServiceError):
    code = 'not-found'
    status_code = 404
    default_message = '対象が見つかりません'


class Conflict(ServiceError):
    code = 'failed-precondition'
    status_code = 409
    default_message = '現在の状態ではこの操作はできません'
