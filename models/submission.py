from datetime import datetime

from bson import ObjectId

from models.object_ids import parse_object_id


class Submission:
    def __init__(self, data):
        """
        A student's scanned answer PDF for one exam
        One record per (exam, student); resubmitting replaces the file
        """
        self._id = data.get('_id', ObjectId())
        self.exam = data['exam']  # Reference to exams collection
        self.student = data['student']  # Reference to users collection
        self.answer_pdf = data.get('answerPdf')
        self.answer_pdf_mime_type = data.get('answerPdfMimeType', 'application/pdf')
        self.original_filename = data.get('originalFilename')
        self.file_size = data.get('fileSize')
        self.submitted_at = data.get('submittedAt', datetime.utcnow())

        # Filled in by SubmissionModel.get_by_exam
        self.student_name = data.get('student_name')
        self.student_email = data.get('student_email')

    def to_dict(self):
        """Convert submission object to dictionary for database storage"""
        return {
            '_id': self._id,
            'exam': self.exam,
            'student': self.student,
            'answerPdf': self.answer_pdf,
            'answerPdfMimeType': self.answer_pdf_mime_type,
            'originalFilename': self.original_filename,
            'fileSize': self.file_size,
            'submittedAt': self.submitted_at,
        }

    def to_public_dict(self):
        return {
            '_id': str(self._id),
            'exam': str(self.exam),
            'student': {
                '_id': str(self.student),
                'name': self.student_name,
                'email': self.student_email,
            },
            'originalFilename': self.original_filename,
            'fileSize': self.file_size,
            'submittedAt': self.submitted_at.isoformat() + 'Z',
        }


class SubmissionModel:
    def __init__(self, db):
        """Initialize submission model with database connection"""
        self.collection = db.get_collection('submissions')
        self.users = db.get_collection('users')

    def save_submission(self, submission_data):
        """
        Create or replace the student's submission for an exam
        Returns the submission id
        """
        submission = Submission(submission_data)
        document = submission.to_dict()
        document.pop('_id')

        key = {'exam': submission.exam, 'student': submission.student}
        self.collection.update_one(key, {'$set': document}, upsert=True)
        return str(self.collection.find_one(key, {'_id': 1})['_id'])

    def get_by_exam_student(self, exam_id, student_id):
        submission_data = self.collection.find_one({
            'exam': parse_object_id(exam_id),
            'student': parse_object_id(student_id),
        })
        return Submission(submission_data) if submission_data else None

    def get_by_exam(self, exam_id):
        """
        All submissions for an exam, newest first, without the PDF bytes
        Student name and email are joined in
        """
        oid = parse_object_id(exam_id)
        if oid is None:
            return []

        submissions = [
            Submission(s) for s in
            self.collection.find({'exam': oid}, {'answerPdf': 0}).sort('submittedAt', -1)
        ]
        students = self.users.find(
            {'_id': {'$in': [s.student for s in submissions]}}, {'name': 1, 'email': 1}
        )
        by_id = {user['_id']: user for user in students}
        for submission in submissions:
            user = by_id.get(submission.student, {})
            submission.student_name = user.get('name')
            submission.student_email = user.get('email')
        return submissions
