import json
import logging
import re
import time
from urllib.parse import quote

from utils.qr_encoder import build_qr_payload
from utils.zip_stream import ZipStreamWriter

logger = logging.getLogger(__name__)

POLICY_ABORT = 'abort'
POLICY_SKIP = 'skip'
SKIPPED_MANIFEST = 'SKIPPED.json'


class BundleError(Exception):
    """Raised before any archive bytes exist"""
    message = "Failed to generate PDF bundle"
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ExamNotFound(BundleError):
    message = "Exam not found"
    status_code = 404


class BatchNotFound(BundleError):
    message = "Batch not found"
    status_code = 404


def underscore_title(title):
    """Collapse every whitespace run to a single underscore"""
    return re.sub(r'\s+', '_', title)


def entry_filename(student_name, student_id, exam_title):
    # '/' would turn the entry into a directory path inside the archive
    name = re.sub(r'[\\/]', '_', student_name)
    return f"{name}_{student_id}_{underscore_title(exam_title)}.pdf"


class StudentResult:
    """Outcome of rendering one student's cover page"""

    def __init__(self, student_id, student_name, filename=None, pdf=None, error=None):
        self.student_id = student_id
        self.student_name = student_name
        self.filename = filename
        self.pdf = pdf
        self.error = error

    @property
    def ok(self):
        return self.error is None


class Bundle:
    """
    QR cover pages for every student on an exam's roster, streamed as a
    ZIP archive. Created by BundleGenerator.prepare(); iterate stream()
    exactly once.
    """

    def __init__(self, exam, batch, context):
        self.exam = exam
        self.batch = batch
        self.context = context

        settings = context.settings
        self.policy = settings.BUNDLE_FAILURE_POLICY
        self.deadline = settings.BUNDLE_DEADLINE_SECONDS
        self.student_timeout = settings.BUNDLE_STUDENT_TIMEOUT_SECONDS

        self.clock = time.monotonic
        self.written = []
        self.skipped = []
        self.aborted = None  # reason string once the archive is abandoned
        self.finalized = False

    @property
    def filename(self):
        return f"{underscore_title(self.exam.title)}_QR_Papers.zip"

    @property
    def headers(self):
        filename = self.filename.replace('"', '')
        try:
            filename.encode('latin-1')
            disposition = f'attachment; filename="{filename}"'
        except UnicodeEncodeError:
            disposition = f"attachment; filename*=UTF-8''{quote(filename)}"
        return {
            'Content-Type': 'application/zip',
            'Content-Disposition': disposition,
        }

    def render_student(self, student, qr_encoder, pdf_writer):
        """Render one cover page; failures come back in the result"""
        student_id = str(student['_id'])
        student_name = student.get('name', '')
        try:
            payload = build_qr_payload(student_id, self.exam.id)
            qr_png = qr_encoder.encode(payload)
            pdf = pdf_writer.render(qr_png, self.exam.title, self.exam.course_name)
        except Exception as e:
            logger.exception("Cover page failed for student %s on exam %s", student_id, self.exam.id)
            return StudentResult(student_id, student_name, error=str(e) or e.__class__.__name__)
        return StudentResult(student_id, student_name,
                             filename=entry_filename(student_name, student_id, self.exam.title),
                             pdf=pdf)

    def _abort(self, reason):
        self.aborted = reason
        logger.error("Aborting QR bundle for exam %s after %d of %d students: %s",
                     self.exam.id, len(self.written), len(self.batch.roster), reason)

    def stream(self):
        """
        Yield ZIP bytes, one chunk per student plus the closing chunk.
        On abort the generator stops without the central directory, so the
        partial download never passes as a complete archive.
        """
        logger.info("Generating QR bundle for exam %s (%d students)",
                    self.exam.id, len(self.batch.roster))
        started = self.clock()
        archive = ZipStreamWriter(compresslevel=9)
        qr_encoder = self.context.qr_encoder_factory()
        pdf_writer = self.context.pdf_writer_factory()

        try:
            for student in self.batch.roster:
                if self.deadline and self.clock() - started > self.deadline:
                    self._abort(f"deadline of {self.deadline}s exceeded")
                    return

                student_started = self.clock()
                result = self.render_student(student, qr_encoder, pdf_writer)
                if self.student_timeout and self.clock() - student_started > self.student_timeout:
                    self._abort(f"student {result.student_id} took longer than {self.student_timeout}s")
                    return

                if result.ok:
                    try:
                        chunk = archive.append(result.filename, result.pdf)
                    except Exception as e:
                        logger.exception("Writing %s to the archive failed", result.filename)
                        result.error = str(e) or e.__class__.__name__
                    result.pdf = None

                if not result.ok:
                    if self.policy == POLICY_SKIP:
                        self.skipped.append(result)
                        continue
                    self._abort(f"student {result.student_id}: {result.error}")
                    return

                self.written.append(result.filename)
                yield chunk

            if self.skipped:
                manifest = [
                    {'studentId': r.student_id, 'studentName': r.student_name, 'error': r.error}
                    for r in self.skipped
                ]
                yield archive.append(SKIPPED_MANIFEST, json.dumps(manifest, indent=2).encode('utf-8'))

            tail = archive.finalize()
            self.finalized = True
            logger.info("QR bundle for exam %s complete: %d written, %d skipped",
                        self.exam.id, len(self.written), len(self.skipped))
            yield tail
        except GeneratorExit:
            if not self.finalized:
                self.aborted = "client disconnected"
                logger.warning("Client disconnected from QR bundle for exam %s after %d entries",
                               self.exam.id, len(self.written))
            raise


class BundleGenerator:
    def __init__(self, context):
        self.context = context

    def prepare(self, exam_id):
        """
        Resolve exam and roster; raises ExamNotFound / BatchNotFound
        before anything is written
        """
        policy = self.context.settings.BUNDLE_FAILURE_POLICY
        if policy not in (POLICY_ABORT, POLICY_SKIP):
            raise BundleError(f"Unknown bundle failure policy: {policy}")

        exam = self.context.exams.get_with_relations(exam_id)
        if not exam:
            raise ExamNotFound()

        batch = self.context.batches.get_with_roster(exam.batch)
        if not batch:
            raise BatchNotFound()

        return Bundle(exam, batch, self.context)
