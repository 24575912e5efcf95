import io

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

PAGE_MARGIN = 50
QR_LEFT = 50
QR_TOP = 40
QR_WIDTH = 100
TITLE_FONT_SIZE = 20
COURSE_FONT_SIZE = 16


class CoverPageWriter:
    """
    Renders the one-page cover sheet a student attaches to their answers:
    QR code top-left, then exam title and course name centered below it
    """

    def __init__(self, pagesize=A4, margin=PAGE_MARGIN):
        self.pagesize = pagesize
        self.margin = margin

    def render(self, qr_png, exam_title, course_name):
        """Return the finished PDF as bytes"""
        buf = io.BytesIO()
        width, height = self.pagesize
        c = canvas.Canvas(buf, pagesize=self.pagesize)
        c.setTitle(f"Exam: {exam_title}")

        # reportlab measures y from the bottom edge
        qr_bottom = height - QR_TOP - QR_WIDTH
        c.drawImage(ImageReader(io.BytesIO(qr_png)), QR_LEFT, qr_bottom,
                    width=QR_WIDTH, height=QR_WIDTH)

        center = width / 2
        y = qr_bottom - TITLE_FONT_SIZE * 2
        c.setFont("Helvetica-Bold", TITLE_FONT_SIZE)
        c.drawCentredString(center, y, f"Exam: {exam_title}")

        y -= COURSE_FONT_SIZE * 2
        c.setFont("Helvetica", COURSE_FONT_SIZE)
        c.drawCentredString(center, y, f"Course: {course_name or ''}")

        c.showPage()
        c.save()
        return buf.getvalue()
