from datetime import datetime

from bson import ObjectId

from models.object_ids import parse_object_id


class Exam:
    def __init__(self, data):
        """
        An exam given to one batch of a course
        Question paper and answer key are stored inline as binary blobs
        """
        self._id = data.get('_id', ObjectId())
        self.title = data['title']
        self.course = data['course']  # Reference to courses collection
        self.batch = data['batch']  # Reference to batches collection
        self.start_time = data['startTime']
        self.end_time = data['endTime']
        self.questions = data.get('questions', [])  # [{questionText, maxMarks}]
        self.num_questions = data.get('numQuestions', len(self.questions))
        self.created_by = data.get('createdBy')
        self.k = data['k']  # Number of peer evaluations per student

        self.question_paper_pdf = data.get('questionPaperPdf')
        self.question_paper_mime_type = data.get('questionPaperMimeType')
        self.answer_key_pdf = data.get('answerKeyPdf')
        self.answer_key_mime_type = data.get('answerKeyMimeType')

        # Filled in by ExamModel.get_with_relations
        self.course_name = data.get('course_name')
        self.batch_name = data.get('batch_name')

    @property
    def id(self):
        return str(self._id)

    @property
    def max_marks(self):
        return [q.get('maxMarks', 0) for q in self.questions]

    def has_started(self, now=None):
        return (now or datetime.utcnow()) >= self.start_time

    def is_open(self, now=None):
        """True while answers may be submitted"""
        now = now or datetime.utcnow()
        return self.start_time <= now <= self.end_time

    def to_dict(self):
        """Convert exam to a document for database storage"""
        return {
            '_id': self._id,
            'title': self.title,
            'course': self.course,
            'batch': self.batch,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'numQuestions': self.num_questions,
            'questions': self.questions,
            'createdBy': self.created_by,
            'k': self.k,
            'questionPaperPdf': self.question_paper_pdf,
            'questionPaperMimeType': self.question_paper_mime_type,
            'answerKeyPdf': self.answer_key_pdf,
            'answerKeyMimeType': self.answer_key_mime_type,
        }

    def to_public_dict(self):
        """JSON-safe view without the binary blobs"""
        return {
            '_id': self.id,
            'title': self.title,
            'course': {'_id': str(self.course), 'name': self.course_name},
            'batch': {'_id': str(self.batch), 'name': self.batch_name},
            'startTime': self.start_time.isoformat() + 'Z',
            'endTime': self.end_time.isoformat() + 'Z',
            'numQuestions': self.num_questions,
            'questions': self.questions,
            'maxMarks': self.max_marks,
            'createdBy': str(self.created_by) if self.created_by else None,
            'k': self.k,
            'hasQuestionPaper': self.question_paper_pdf is not None,
            'hasAnswerKey': self.answer_key_pdf is not None,
        }


class ExamModel:
    def __init__(self, db):
        self.collection = db.get_collection('exams')
        self.courses = db.get_collection('courses')
        self.batches = db.get_collection('batches')

    def create_exam(self, exam_data):
        exam = Exam(exam_data)
        result = self.collection.insert_one(exam.to_dict())
        return str(result.inserted_id)

    def get_by_id(self, exam_id):
        oid = parse_object_id(exam_id)
        if oid is None:
            return None
        exam_data = self.collection.find_one({'_id': oid})
        return Exam(exam_data) if exam_data else None

    def get_with_relations(self, exam_id):
        """
        Get exam with course and batch names joined in
        Read-only projection used for listings and the QR bundle
        """
        exam = self.get_by_id(exam_id)
        if not exam:
            return None

        course = self.courses.find_one({'_id': exam.course}, {'name': 1})
        batch = self.batches.find_one({'_id': exam.batch}, {'name': 1})
        exam.course_name = course['name'] if course else None
        exam.batch_name = batch['name'] if batch else None
        return exam

    def get_by_course(self, course_id, batch_ids=None):
        """Exams of a course, optionally limited to some batches, earliest first"""
        oid = parse_object_id(course_id)
        if oid is None:
            return []
        query = {'course': oid}
        if batch_ids is not None:
            query['batch'] = {'$in': list(batch_ids)}

        exams = []
        for exam_data in self.collection.find(query).sort('startTime', 1):
            exam = Exam(exam_data)
            batch = self.batches.find_one({'_id': exam.batch}, {'name': 1})
            exam.batch_name = batch['name'] if batch else None
            exams.append(exam)
        return exams
