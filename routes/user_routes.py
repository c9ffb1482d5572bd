# User-related routes

from flask import Blueprint

user_bp = Blueprint('user', __name__)

from typing import Any, Dict, Optional

from flask import current_app, jsonify, request
from services.identity_service import IdentityService
from utils.audit_logger import audit_logger, AuditEventType
from utils.error_handling import (
    AuthenticationError,
    AuthorizationError,
    ValidationError,
    ResourceNotFoundError,
    create_error_response,
    create_success_response,
)
from utils.signature_utils import parse_public_key, parse_signature, verify_signature


def _identity_service() -> IdentityService:
    return current_app.extensions['identity_service']


def _require_fields(data: Optional[Dict[str, Any]], *names: str) -> Dict[str, str]:
    """Return the named string fields from a request payload or raise ValidationError."""
    if not isinstance(data, dict):
        raise ValidationError('JSON data required')
    missing = [name for name in names if not isinstance(data.get(name), str) or data.get(name) == '']
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    return {name: data[name] for name in names}


def _error(error: Exception, user_uuid: Optional[str] = None):
    if isinstance(error, AuthenticationError):
        audit_logger.log_auth_failure(error.message, user_uuid=user_uuid)
    response, status_code = create_error_response(
        error, user_uuid=user_uuid, include_details=current_app.config.get('DEBUG', False)
    )
    return jsonify(response), status_code


def _user_payload(user) -> Dict[str, str]:
    return {
        'userUUID': user.uuid,
        'pubKey': user.pub_key,
        'hash': user.hash
    }


def _authenticate_user(user_uuid: str, message: str, signature: str):
    """
    Load a user and check ``signature`` over ``message`` against its stored key.

    The signature encoding is checked before the store is read.
    """
    parsed_signature = parse_signature(signature)
    user = _identity_service().get_user(user_uuid)
    if user is None:
        raise ResourceNotFoundError(f"User {user_uuid} not found")
    if not verify_signature(message, parse_public_key(user.pub_key), parsed_signature):
        raise AuthenticationError()
    return user


@user_bp.route('/user/create', methods=['POST'])
def create_user():
    """
    Create a user for (pubKey, hash), or return the existing one.

    Signed message: timestamp + pubKey + hash
    """
    try:
        data = _require_fields(request.get_json(silent=True), 'timestamp', 'pubKey', 'hash', 'signature')

        # Reject bad credentials before any storage access
        public_key = parse_public_key(data['pubKey'])
        signature = parse_signature(data['signature'])
        message = data['timestamp'] + data['pubKey'] + data['hash']
        if not verify_signature(message, public_key, signature):
            raise AuthenticationError()

        result = _identity_service().resolve_or_create(data['pubKey'], data['hash'])
    except Exception as e:
        return _error(e)

    if result.created:
        audit_logger.log_user_created(result.user_uuid, data['hash'])
    else:
        audit_logger.log_user_resolved(result.user_uuid, data['hash'])

    response, status_code = create_success_response(
        {'userUUID': result.user_uuid},
        status_code=201 if result.created else 200
    )
    return jsonify(response), status_code


@user_bp.route('/user/<user_uuid>', methods=['GET'])
def get_user(user_uuid):
    """
    Return a user record.

    Query parameters: timestamp, hash, signature
    Signed message: timestamp + uuid + hash
    """
    try:
        data = _require_fields(request.args.to_dict(), 'timestamp', 'hash', 'signature')
        message = data['timestamp'] + user_uuid + data['hash']
        user = _authenticate_user(user_uuid, message, data['signature'])
        if user.hash != data['hash']:
            raise AuthorizationError('Hash does not match user')
    except Exception as e:
        return _error(e, user_uuid=user_uuid)

    audit_logger.log_event(AuditEventType.USER_LOOKUP, user_uuid=user_uuid)
    response, status_code = create_success_response(_user_payload(user))
    return jsonify(response), status_code


@user_bp.route('/user/update-hash', methods=['PUT'])
def update_hash():
    """
    Move a user to a new application hash.

    Signed message: timestamp + userUUID + hash + newHash
    """
    user_uuid = None
    try:
        data = _require_fields(
            request.get_json(silent=True), 'timestamp', 'userUUID', 'hash', 'newHash', 'signature'
        )
        user_uuid = data['userUUID']
        message = data['timestamp'] + user_uuid + data['hash'] + data['newHash']
        _authenticate_user(user_uuid, message, data['signature'])
        user = _identity_service().update_hash(user_uuid, data['hash'], data['newHash'])
    except Exception as e:
        return _error(e, user_uuid=user_uuid)

    audit_logger.log_event(
        AuditEventType.USER_UPDATE_HASH,
        user_uuid=user_uuid,
        message=f'Hash updated for user {user_uuid}',
        hash=user.hash
    )
    response, status_code = create_success_response(_user_payload(user))
    return jsonify(response), status_code


@user_bp.route('/user/delete', methods=['DELETE'])
def delete_user():
    """
    Delete a user and retract its index entry.

    Signed message: timestamp + userUUID + hash
    """
    user_uuid = None
    try:
        data = _require_fields(request.get_json(silent=True), 'timestamp', 'userUUID', 'hash', 'signature')
        user_uuid = data['userUUID']
        message = data['timestamp'] + user_uuid + data['hash']
        _authenticate_user(user_uuid, message, data['signature'])
        deleted = _identity_service().delete_user(user_uuid, data['hash'])
    except Exception as e:
        return _error(e, user_uuid=user_uuid)

    audit_logger.log_event(
        AuditEventType.USER_DELETE,
        user_uuid=user_uuid,
        message=f'User {user_uuid} deleted'
    )
    response, status_code = create_success_response({'deleted': deleted})
    return jsonify(response), status_code
