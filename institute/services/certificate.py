import io
import logging
from datetime import date

import requests as http_requests
from PIL import Image, ImageDraw, ImageFont

from institute.models import ExamResult

logger = logging.getLogger(__name__)

# Landscape A4 at 150 dpi
PAGE_SIZE = (1754, 1240)
PAGE_DPI = 150

PRIMARY_COLOR = (30, 58, 138)
SECONDARY_COLOR = (52, 73, 94)
GOLD_COLOR = (202, 138, 4)

FONT_DIR = '/usr/share/fonts/truetype/dejavu'


def build_certificate_data(result: ExamResult, today=None):
    """Collect the printable fields for one exam result."""
    issue_date = (today or date.today()).strftime('%Y-%m-%d')
    exam_date = result.submitted_at.strftime('%Y-%m-%d') if result.submitted_at else issue_date
    return {
        'studentName': result.student_name,
        'registrationNumber': result.registration_number,
        'testName': result.test_name,
        'testId': result.test_id,
        'score': result.score,
        'totalMarks': result.total_marks,
        'accuracy': result.accuracy,
        'certificateId': result.certificate_id,
        'percentage': result.percentage,
        'issueDate': issue_date,
        'examDate': exam_date,
    }


def certificate_filename(student_name):
    return f"Certificate-{(student_name or 'Student').replace(' ', '_')}.pdf"


def _font(name, size):
    try:
        return ImageFont.truetype(f'{FONT_DIR}/{name}', size)
    except OSError:
        return ImageFont.load_default(size=size)


def _fetch_logo(url):
    resp = http_requests.get(url, timeout=10)
    resp.raise_for_status()
    logo = Image.open(io.BytesIO(resp.content)).convert('RGBA')
    logo.thumbnail((220, 220))
    return logo


def _fmt_number(value):
    return f'{value:g}' if isinstance(value, float) else str(value)


def render_certificate_pdf(data, logo_url=None):
    """Draw the certificate and return it as PDF bytes."""
    width, height = PAGE_SIZE
    img = Image.new('RGB', PAGE_SIZE, color='white')
    draw = ImageDraw.Draw(img)

    draw.rectangle([40, 40, width - 40, height - 40], outline=PRIMARY_COLOR, width=12)
    draw.rectangle([64, 64, width - 64, height - 64], outline=GOLD_COLOR, width=3)

    title_font = _font('DejaVuSerif-Bold.ttf', 76)
    name_font = _font('DejaVuSerif-Bold.ttf', 64)
    subtitle_font = _font('DejaVuSerif.ttf', 36)
    text_font = _font('DejaVuSans.ttf', 32)
    small_font = _font('DejaVuSans.ttf', 26)

    def centered(text, font, y, fill):
        bbox = draw.textbbox((0, 0), text, font=font)
        draw.text(((width - (bbox[2] - bbox[0])) / 2, y), text, fill=fill, font=font)

    top = 110
    if logo_url:
        logo = _fetch_logo(logo_url)
        img.paste(logo, ((width - logo.width) // 2, top), logo)
        top += logo.height + 20

    centered('MTech IT Institute', subtitle_font, top, SECONDARY_COLOR)
    centered('CERTIFICATE OF ACHIEVEMENT', title_font, top + 60, PRIMARY_COLOR)
    centered('This is to certify that', subtitle_font, top + 180, SECONDARY_COLOR)
    centered(data['studentName'], name_font, top + 240, GOLD_COLOR)
    centered(f"Registration No: {data['registrationNumber']}", small_font, top + 330, SECONDARY_COLOR)
    centered('has successfully passed the examination', text_font, top + 390, SECONDARY_COLOR)
    centered(data['testName'], name_font, top + 440, PRIMARY_COLOR)
    centered(
        f"Score: {_fmt_number(data['score'])}/{_fmt_number(data['totalMarks'])}  |  "
        f"Percentage: {data['percentage']:.2f}%  |  Accuracy: {_fmt_number(data['accuracy'])}%",
        text_font, top + 540, SECONDARY_COLOR,
    )
    centered(f"Exam Date: {data['examDate']}    Issue Date: {data['issueDate']}",
             small_font, top + 610, SECONDARY_COLOR)
    centered(f"Certificate ID: {data['certificateId']}", small_font, top + 660, SECONDARY_COLOR)

    sig_y = height - 170
    for x, label in ((width // 4, 'Director'), (width * 3 // 4, 'Controller of Examinations')):
        draw.line([(x - 180, sig_y), (x + 180, sig_y)], fill=SECONDARY_COLOR, width=2)
        bbox = draw.textbbox((0, 0), label, font=small_font)
        draw.text((x - (bbox[2] - bbox[0]) / 2, sig_y + 12), label, fill=SECONDARY_COLOR, font=small_font)

    buf = io.BytesIO()
    img.save(buf, format='PDF', resolution=PAGE_DPI)
    logger.info('Rendered certificate %s', data.get('certificateId'))
    return buf.getvalue()
