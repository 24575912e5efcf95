import io
import logging
from datetime import datetime

from flask import Blueprint, request, jsonify, send_file

from services.context import get_context
from utils.validation import PDF_MIME_TYPE, is_pdf_upload

logger = logging.getLogger(__name__)

student_bp = Blueprint('student', __name__)


def _student_id():
    return request.values.get('user_id')


@student_bp.route('/api/student/courses/<course_id>/exams', methods=['GET'])
def get_course_exams(course_id):
    """Exams of a course for the batches the student belongs to"""
    ctx = get_context()
    try:
        user_id = _student_id()
        if not user_id:
            return jsonify({"message": "Missing user_id"}), 400
        if not ctx.courses.get_by_id(course_id):
            return jsonify({"message": "Course not found"}), 404

        batch_ids = ctx.batches.get_batch_ids_for_student(user_id)
        exams = ctx.exams.get_by_course(course_id, batch_ids=batch_ids)
        return jsonify({
            "exams": [
                {
                    '_id': exam.id,
                    'title': exam.title,
                    'startTime': exam.start_time.isoformat() + 'Z',
                    'endTime': exam.end_time.isoformat() + 'Z',
                    'batch': {'name': exam.batch_name},
                    'numQuestions': exam.num_questions,
                    'maxMarks': exam.max_marks,
                }
                for exam in exams
            ]
        })
    except Exception:
        logger.exception("Listing exams failed for course %s", course_id)
        return jsonify({"message": "Failed to load exams"}), 500


@student_bp.route('/api/student/question-paper/<exam_id>', methods=['GET'])
def get_question_paper(exam_id):
    """Question paper PDF, once the exam has started, for students on the roster"""
    ctx = get_context()
    exam = ctx.exams.get_by_id(exam_id)
    if not exam:
        return jsonify({"message": "Exam not found"}), 404

    batch = ctx.batches.get_by_id(exam.batch)
    if not batch or not batch.has_student(_student_id()):
        return jsonify({"message": "You are not enrolled in this exam"}), 403
    if not exam.has_started():
        return jsonify({"message": "Exam has not started yet"}), 403
    if exam.question_paper_pdf is None:
        return jsonify({"message": "Question paper not uploaded"}), 404

    return send_file(
        io.BytesIO(exam.question_paper_pdf),
        mimetype=exam.question_paper_mime_type or PDF_MIME_TYPE,
        as_attachment=False,
        download_name=f"{exam.title}.pdf",
    )


@student_bp.route('/api/student/submit-answer', methods=['POST'])
def submit_answer():
    """Student uploads their scanned answer PDF while the exam is open"""
    ctx = get_context()
    try:
        if 'pdf' not in request.files:
            return jsonify({"message": "No file provided"}), 400

        file = request.files['pdf']
        exam_id = request.form.get('examId')
        user_id = _student_id()

        if not exam_id or not user_id:
            return jsonify({"message": "Missing examId or user_id"}), 400
        if file.filename == '':
            return jsonify({"message": "No file selected"}), 400
        if not is_pdf_upload(file):
            return jsonify({"message": "Only PDF files are accepted"}), 400

        exam = ctx.exams.get_by_id(exam_id)
        if not exam:
            return jsonify({"message": "Exam not found"}), 404
        student = ctx.users.find_by_id(user_id)
        if not student:
            return jsonify({"message": "User not found"}), 404

        batch = ctx.batches.get_by_id(exam.batch)
        if not batch or not batch.has_student(student._id):
            return jsonify({"message": "You are not enrolled in this exam"}), 403

        now = datetime.utcnow()
        if not exam.is_open(now):
            if not exam.has_started(now):
                return jsonify({"message": "Exam has not started yet"}), 403
            return jsonify({"message": "Submission window has closed"}), 403

        content = file.read()
        submission_id = ctx.submissions.save_submission({
            'exam': exam._id,
            'student': student._id,
            'answerPdf': content,
            'answerPdfMimeType': PDF_MIME_TYPE,
            'originalFilename': file.filename,
            'fileSize': len(content),
            'submittedAt': now,
        })
        logger.info("Answer sheet from %s saved for exam %s", student._id, exam.id)

        return jsonify({
            "message": "Answer sheet submitted successfully",
            "submission_id": submission_id,
        })

    except Exception:
        logger.exception("Answer submission failed")
        return jsonify({"message": "Submission failed"}), 500
