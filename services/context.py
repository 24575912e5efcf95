from flask import current_app

from models.batch import BatchModel
from models.course import CourseModel
from models.exam import ExamModel
from models.submission import SubmissionModel
from models.user import UserModel
from utils.pdf_writer import CoverPageWriter
from utils.qr_encoder import QREncoder


class ServiceContext:
    """
    Everything a request handler needs: the database, the collection
    models, settings, and factories for the per-request QR encoder and
    PDF writer. Built once by create_app() and kept in app.extensions.
    """

    def __init__(self, database, settings, qr_encoder_factory=None, pdf_writer_factory=None):
        self.database = database
        self.settings = settings

        self.exams = ExamModel(database)
        self.batches = BatchModel(database)
        self.courses = CourseModel(database)
        self.users = UserModel(database)
        self.submissions = SubmissionModel(database)

        self.qr_encoder_factory = qr_encoder_factory or (
            lambda: QREncoder(box_size=settings.QR_BOX_SIZE)
        )
        self.pdf_writer_factory = pdf_writer_factory or CoverPageWriter


def get_context():
    """ServiceContext of the running app"""
    return current_app.extensions['peer_eval']
