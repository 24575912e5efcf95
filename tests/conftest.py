from datetime import datetime, timedelta

import mongomock
import pytest

from app import create_app
from config.database import Database
from config.settings import Settings
from utils.qr_encoder import QREncoder, parse_qr_payload


class RecordingQREncoder(QREncoder):
    """Real encoder that remembers every payload and can fail for chosen students"""

    def __init__(self, fail_for=()):
        super().__init__(box_size=2, border=1)
        self.payloads = []
        self.fail_for = set(fail_for)

    def encode(self, payload):
        student_id, _ = parse_qr_payload(payload)
        if student_id in self.fail_for:
            raise RuntimeError(f"encoder failed for {student_id}")
        self.payloads.append(payload)
        return super().encode(payload)


class EncoderFactory:
    def __init__(self, fail_for=()):
        self.fail_for = fail_for
        self.instances = []

    def __call__(self):
        encoder = RecordingQREncoder(self.fail_for)
        self.instances.append(encoder)
        return encoder

    @property
    def payloads(self):
        return [p for encoder in self.instances for p in encoder.payloads]


@pytest.fixture
def settings():
    return Settings(LOG_LEVEL='DEBUG')


@pytest.fixture
def database():
    return Database(db_name='peer_evaluation_test', client=mongomock.MongoClient())


@pytest.fixture
def encoder_factory():
    return EncoderFactory()


@pytest.fixture
def app(settings, database, encoder_factory):
    app = create_app(settings=settings, database=database, qr_encoder_factory=encoder_factory)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def context(app):
    return app.extensions['peer_eval']


@pytest.fixture
def seed(context):
    """Course CS101, batch with Alice and Bob, exam 'Midterm 1' open right now"""
    course_id = context.courses.create_course({'name': 'CS101', 'code': 'CS101'})
    teacher_id = context.users.create_user({'name': 'Dr. Rao', 'email': 'rao@example.edu', 'role': 'teacher'})
    alice_id = context.users.create_user({'name': 'Alice', 'email': 'alice@example.edu', 'role': 'student'})
    bob_id = context.users.create_user({'name': 'Bob', 'email': 'bob@example.edu', 'role': 'student'})
    outsider_id = context.users.create_user({'name': 'Eve', 'email': 'eve@example.edu', 'role': 'student'})

    course = context.courses.get_by_id(course_id)
    alice = context.users.find_by_id(alice_id)
    bob = context.users.find_by_id(bob_id)
    batch_id = context.batches.create_batch({
        'name': 'Batch A',
        'course': course._id,
        'students': [alice._id, bob._id],
    })
    batch = context.batches.get_by_id(batch_id)

    now = datetime.utcnow()
    exam_id = context.exams.create_exam({
        'title': 'Midterm 1',
        'course': course._id,
        'batch': batch._id,
        'startTime': now - timedelta(hours=1),
        'endTime': now + timedelta(hours=1),
        'questions': [
            {'questionText': 'Define a stack.', 'maxMarks': 5},
            {'questionText': 'Explain quicksort.', 'maxMarks': 10},
        ],
        'createdBy': context.users.find_by_id(teacher_id)._id,
        'k': 3,
        'questionPaperPdf': b'%PDF-1.4 question paper',
        'questionPaperMimeType': 'application/pdf',
    })

    return {
        'course_id': course_id,
        'teacher_id': teacher_id,
        'alice_id': alice_id,
        'bob_id': bob_id,
        'outsider_id': outsider_id,
        'batch_id': batch_id,
        'exam_id': exam_id,
    }
