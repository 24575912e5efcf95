from datetime import datetime, timezone

from models.object_ids import parse_object_id

PDF_MIME_TYPE = 'application/pdf'


class ValidationError(Exception):
    """Bad request input; message is safe to show to the client"""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


def require_fields(data, fields):
    missing = [f for f in fields if data.get(f) in (None, '')]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def parse_datetime(value, field):
    """ISO-8601 string -> naive UTC datetime (how pymongo hands dates back)"""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(f"{field} must be an ISO-8601 date-time")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_id(value, field):
    oid = parse_object_id(value)
    if oid is None:
        raise ValidationError(f"{field} is not a valid id")
    return oid


def parse_positive_int(value, field):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
    if number < 1:
        raise ValidationError(f"{field} must be at least 1")
    return number


def parse_questions(questions):
    """[{questionText, maxMarks}] with non-empty text and positive marks"""
    if not isinstance(questions, list):
        raise ValidationError("questions must be a list")
    cleaned = []
    for idx, raw in enumerate(questions, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"Question {idx} must be an object")
        text = str(raw.get('questionText') or '').strip()
        if not text:
            raise ValidationError(f"Question {idx} has no questionText")
        try:
            max_marks = float(raw.get('maxMarks'))
        except (TypeError, ValueError):
            raise ValidationError(f"Question {idx} maxMarks must be a number")
        if max_marks <= 0:
            raise ValidationError(f"Question {idx} maxMarks must be positive")
        cleaned.append({
            'questionText': text,
            'maxMarks': int(max_marks) if max_marks.is_integer() else max_marks,
        })
    return cleaned


def is_pdf_upload(file):
    """Uploaded file looks like a PDF by name, declared type and magic bytes"""
    if not file or not file.filename:
        return False
    if not file.filename.lower().endswith('.pdf'):
        return False
    if file.mimetype and file.mimetype not in (PDF_MIME_TYPE, 'application/octet-stream'):
        return False
    head = file.stream.read(5)
    file.stream.seek(0)
    return head == b'%PDF-'
