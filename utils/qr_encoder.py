import io
import json

import qrcode


def build_qr_payload(student_id, exam_id):
    """
    Compact JSON identifying one student's paper for one exam
    e.g. {"studentId":"s1","examId":"665f..."}
    """
    return json.dumps(
        {'studentId': str(student_id), 'examId': str(exam_id)},
        separators=(',', ':'),
    )


def parse_qr_payload(payload):
    """Inverse of build_qr_payload; returns (student_id, exam_id)"""
    data = json.loads(payload)
    return data['studentId'], data['examId']


class QREncoder:
    """Rasterizes a string payload into PNG bytes"""

    def __init__(self, box_size=10, border=4):
        self.box_size = box_size
        self.border = border

    def encode(self, payload):
        qr = qrcode.QRCode(
            version=None,  # auto
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(payload)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
