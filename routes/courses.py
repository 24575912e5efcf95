import logging

from flask import Blueprint, request, jsonify

from services.context import get_context
from utils.validation import ValidationError, parse_id, require_fields

logger = logging.getLogger(__name__)

courses_bp = Blueprint('courses', __name__)


@courses_bp.route('/api/courses', methods=['GET'])
def list_courses():
    courses = get_context().courses.get_all_courses()
    return jsonify({"courses": [c.to_public_dict() for c in courses]})


@courses_bp.route('/api/courses', methods=['POST'])
def create_course():
    try:
        data = request.get_json(silent=True) or {}
        require_fields(data, ['name'])
        course_id = get_context().courses.create_course({
            'name': str(data['name']).strip(),
            'code': str(data.get('code', '')).strip(),
            'createdBy': parse_id(data['createdBy'], 'createdBy') if data.get('createdBy') else None,
        })
        return jsonify({"message": "Course created successfully", "courseId": course_id}), 201
    except ValidationError as e:
        return jsonify({"message": e.message}), 400
    except Exception:
        logger.exception("Course creation failed")
        return jsonify({"message": "Failed to create course"}), 500
