import logging

from flask import Blueprint, request, jsonify

from services.context import get_context
from utils.validation import ValidationError, require_fields

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__)

ROLES = ('teacher', 'student')


@users_bp.route('/api/users', methods=['POST'])
def create_user():
    """Add a teacher or student profile"""
    ctx = get_context()
    try:
        data = request.get_json(silent=True) or {}
        require_fields(data, ['name', 'email', 'role'])

        email = str(data['email']).strip().lower()
        role = data['role']
        if role not in ROLES:
            raise ValidationError("role must be 'teacher' or 'student'")
        if ctx.users.find_by_email(email):
            return jsonify({"message": "User already registered"}), 400

        user_id = ctx.users.create_user({
            'name': str(data['name']).strip(),
            'email': email,
            'role': role,
        })
        return jsonify({"message": "User created successfully", "user_id": user_id, "role": role}), 201
    except ValidationError as e:
        return jsonify({"message": e.message}), 400
    except Exception:
        logger.exception("User creation failed")
        return jsonify({"message": "Failed to create user"}), 500
