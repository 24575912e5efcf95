import json
import logging

from flask import Blueprint, Response, request, jsonify

from services.bundle_generator import BundleError, BundleGenerator
from services.context import get_context
from utils.validation import (
    PDF_MIME_TYPE,
    ValidationError,
    is_pdf_upload,
    parse_datetime,
    parse_id,
    parse_positive_int,
    parse_questions,
    require_fields,
)

logger = logging.getLogger(__name__)

teacher_bp = Blueprint('teacher', __name__)


def _exam_payload():
    """Exam fields from a JSON body, or from the 'data' field of a multipart form"""
    if request.files or request.form:
        try:
            data = json.loads(request.form.get('data') or '{}')
        except json.JSONDecodeError:
            data = None
    else:
        data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError("Exam data must be a JSON object")
    return data


def _read_pdf(field):
    file = request.files.get(field)
    if file is None or file.filename == '':
        return None
    if not is_pdf_upload(file):
        raise ValidationError(f"{field} must be a PDF file")
    return file.read()


@teacher_bp.route('/api/teacher/exams', methods=['POST'])
def create_exam():
    """Teacher creates an exam, optionally uploading question paper and answer key"""
    ctx = get_context()
    try:
        data = _exam_payload()
        require_fields(data, ['title', 'course', 'batch', 'startTime', 'endTime', 'k'])

        course_id = parse_id(data['course'], 'course')
        batch_id = parse_id(data['batch'], 'batch')
        if not ctx.courses.get_by_id(course_id):
            return jsonify({"message": "Course not found"}), 404
        if not ctx.batches.get_by_id(batch_id):
            return jsonify({"message": "Batch not found"}), 404

        start_time = parse_datetime(data['startTime'], 'startTime')
        end_time = parse_datetime(data['endTime'], 'endTime')
        if start_time >= end_time:
            raise ValidationError("startTime must be before endTime")

        questions = parse_questions(data.get('questions', []))
        try:
            num_questions = int(data.get('numQuestions', len(questions)))
        except (TypeError, ValueError):
            raise ValidationError("numQuestions must be an integer")
        if questions and num_questions != len(questions):
            raise ValidationError("numQuestions does not match the questions given")

        exam_data = {
            'title': str(data['title']).strip(),
            'course': course_id,
            'batch': batch_id,
            'startTime': start_time,
            'endTime': end_time,
            'numQuestions': num_questions,
            'questions': questions,
            'createdBy': parse_id(data['createdBy'], 'createdBy') if data.get('createdBy') else None,
            'k': parse_positive_int(data['k'], 'k'),
        }

        question_paper = _read_pdf('questionPaper')
        if question_paper is not None:
            exam_data['questionPaperPdf'] = question_paper
            exam_data['questionPaperMimeType'] = PDF_MIME_TYPE
        answer_key = _read_pdf('answerKey')
        if answer_key is not None:
            exam_data['answerKeyPdf'] = answer_key
            exam_data['answerKeyMimeType'] = PDF_MIME_TYPE

        exam_id = ctx.exams.create_exam(exam_data)
        logger.info("Exam %s created for batch %s", exam_id, batch_id)
        return jsonify({"message": "Exam created successfully", "examId": exam_id}), 201

    except ValidationError as e:
        return jsonify({"message": e.message}), 400
    except Exception:
        logger.exception("Exam creation failed")
        return jsonify({"message": "Failed to create exam"}), 500


@teacher_bp.route('/api/teacher/exams/<exam_id>', methods=['GET'])
def get_exam(exam_id):
    """Exam details without the stored PDFs"""
    exam = get_context().exams.get_with_relations(exam_id)
    if not exam:
        return jsonify({"message": "Exam not found"}), 404
    return jsonify({"exam": exam.to_public_dict()})


@teacher_bp.route('/api/teacher/exams/<exam_id>/qr-bundle', methods=['GET'])
def generate_qr_pdf_bundle(exam_id):
    """
    ZIP of one QR cover-page PDF per enrolled student, streamed as it is built.
    The first entry is produced before the response starts so an early
    failure still gets a proper 500; later failures can only cut the stream.
    """
    try:
        bundle = BundleGenerator(get_context()).prepare(exam_id)
        chunks = bundle.stream()
        first = next(chunks, None)
        if first is None:
            return jsonify({"message": "Failed to generate PDF bundle"}), 500
    except BundleError as e:
        return jsonify({"message": e.message}), e.status_code
    except Exception:
        logger.exception("QR PDF bundle error for exam %s", exam_id)
        return jsonify({"message": "Failed to generate PDF bundle"}), 500

    def body():
        yield first
        yield from chunks

    return Response(body(), headers=bundle.headers, direct_passthrough=True)


@teacher_bp.route('/api/teacher/exams/<exam_id>/submissions', methods=['GET'])
def get_exam_submissions(exam_id):
    """Who has submitted answers for an exam"""
    ctx = get_context()
    try:
        exam = ctx.exams.get_by_id(exam_id)
        if not exam:
            return jsonify({"message": "Exam not found"}), 404

        submissions = ctx.submissions.get_by_exam(exam.id)
        batch = ctx.batches.get_by_id(exam.batch)
        return jsonify({
            "submissions": [s.to_public_dict() for s in submissions],
            "total_submissions": len(submissions),
            "total_students": len(batch.students) if batch else 0,
        })
    except Exception:
        logger.exception("Listing submissions failed for exam %s", exam_id)
        return jsonify({"message": "Failed to load submissions"}), 500


@teacher_bp.route('/api/teacher/batches', methods=['POST'])
def create_batch():
    """Create a batch from a list of student user ids"""
    ctx = get_context()
    try:
        data = request.get_json(silent=True) or {}
        require_fields(data, ['name'])

        students = []
        for student_id in data.get('students', []):
            oid = parse_id(student_id, 'students')
            if not ctx.users.find_by_id(oid):
                raise ValidationError(f"Student {student_id} not found")
            if oid not in students:
                students.append(oid)

        batch_id = ctx.batches.create_batch({
            'name': str(data['name']).strip(),
            'course': parse_id(data['course'], 'course') if data.get('course') else None,
            'students': students,
        })
        return jsonify({"message": "Batch created successfully", "batchId": batch_id}), 201

    except ValidationError as e:
        return jsonify({"message": e.message}), 400
    except Exception:
        logger.exception("Batch creation failed")
        return jsonify({"message": "Failed to create batch"}), 500
