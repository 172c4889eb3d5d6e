import io

import docx
import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

DIGITAL_PAGE_LINES = [
    [
        "Quarterly report for the northern region, prepared by the sales team.",
        "Revenue grew by twelve percent compared with the previous quarter.",
    ],
    [
        "Customer retention remained stable across all enterprise accounts.",
        "Two new partners were onboarded during the second month of the quarter.",
    ],
    [
        "Next steps include expanding the pilot program to three more cities.",
        "A follow-up review is scheduled for the beginning of the next quarter.",
    ],
]


def _pdf(pages: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _pdf([["Hello PDF World"]])


@pytest.fixture()
def digital_pdf_bytes() -> bytes:
    """Three pages, each well above the scanned-document threshold."""
    return _pdf(DIGITAL_PAGE_LINES)


@pytest.fixture()
def scanned_pdf_bytes() -> bytes:
    """Two pages carrying only a page number, like an image-only scan."""
    return _pdf([["1"], ["2"]])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    return _pdf([[]])


@pytest.fixture()
def docx_bytes() -> bytes:
    """Word document with a heading, formatted paragraph, bullet list and table."""
    document = docx.Document()
    document.add_heading("Quarterly Report", level=1)
    paragraph = document.add_paragraph("Revenue grew ")
    paragraph.add_run("strongly").bold = True
    document.add_paragraph("First point", style="List Bullet")
    document.add_paragraph("Second point", style="List Bullet")
    table = document.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "Region"
    table.cell(0, 1).text = "EMEA"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()
