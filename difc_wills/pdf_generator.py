"""
PDF Generator Module

Renders a DIFC will document plan to an A4 PDF with ReportLab.

Determinism:
============
- ReportLab runs in invariant mode (fixed document ID and creation date)
- The generation stamp comes from the caller, never the system clock,
  whenever a timestamp is supplied
- Same record + plan + timestamp = identical bytes and SHA256 hash

Every page carries the DIFC Wills Service Centre registration banner and a
footer identifying the testator's Emirates ID, the will type and the page.
"""

import html
import io
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from reportlab import rl_config
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Flowable, KeepTogether

from difc_wills.clause_renderer import ContentBlock, DocumentPlanItem
from difc_wills.context_builder import WillRecord
from difc_wills.utils import calculate_sha256, format_dubai_datetime
from difc_wills.will_templates import get_will_template

rl_config.invariant = 1


PAGE_WIDTH, PAGE_HEIGHT = A4
PAGE_MARGIN = 22 * mm
HEADER_OFFSET = 12 * mm
FOOTER_OFFSET = 12 * mm

BODY_FONT = 'Helvetica'
BOLD_FONT = 'Helvetica-Bold'
ITALIC_FONT = 'Helvetica-Oblique'

DIFC_MAROON = colors.HexColor('#6D1F2F')
MUTED_GREY = colors.HexColor('#5F6368')

REGISTRATION_BANNER = 'For registration with the DIFC Wills Service Centre'


class SignatureBlock(Flowable):
    """
    Signature panel for the testator or a witness.

    Draws the label, then one ruled line per field. The testator's printed
    name is pre-filled; witnesses complete theirs by hand.
    """

    RULE_START = 90
    ROW_HEIGHT = 20

    def __init__(self, content: Dict[str, Any], width: float = 380):
        super().__init__()
        self.content = content
        self.panel_width = width
        self.rows = self._rows()

    def _rows(self) -> List[Tuple[str, str]]:
        rows = [('Full name', self.content.get('name') or '')]
        if self.content.get('address_label'):
            rows.append((self.content['address_label'], ''))
        rows.append(('Signature', ''))
        rows.append((self.content.get('date_label', 'Date'), ''))
        return rows

    def wrap(self, availWidth, availHeight):
        self.width = min(self.panel_width, availWidth)
        self.height = (len(self.rows) + 1) * self.ROW_HEIGHT + 16
        return self.width, self.height

    def draw(self):
        c = self.canv
        y = self.height - 14

        c.setFont(BOLD_FONT, 10)
        c.setFillColor(DIFC_MAROON)
        c.drawString(0, y, self.content.get('label', ''))
        c.setFillColor(colors.black)

        for caption, value in self.rows:
            y -= self.ROW_HEIGHT
            c.setFont(BODY_FONT, 9)
            c.drawString(0, y, f'{caption}:')
            if value:
                c.setFont(BOLD_FONT, 9)
                c.drawString(self.RULE_START + 2, y + 1, value)
            c.setStrokeColor(MUTED_GREY)
            c.setLineWidth(0.5)
            c.line(self.RULE_START, y - 3, self.width, y - 3)


# name -> (parent style, overrides)
STYLE_SPECS = {
    'title': ('Title', {
        'fontName': BOLD_FONT, 'fontSize': 16, 'leading': 22,
        'alignment': TA_CENTER, 'textColor': DIFC_MAROON, 'spaceAfter': 18,
    }),
    'clause_heading': ('Heading3', {
        'fontName': BOLD_FONT, 'fontSize': 11, 'leading': 16,
        'spaceBefore': 14, 'spaceAfter': 6, 'textColor': DIFC_MAROON,
    }),
    'normal': ('BodyText', {
        'fontName': BODY_FONT, 'fontSize': 10, 'leading': 15,
        'alignment': TA_JUSTIFY, 'spaceAfter': 8,
    }),
    'placeholder': ('BodyText', {
        'fontName': ITALIC_FONT, 'fontSize': 10, 'leading': 15,
        'spaceAfter': 8, 'textColor': colors.HexColor('#B3261E'),
    }),
    'bullet_item': ('BodyText', {
        'fontName': BODY_FONT, 'fontSize': 10, 'leading': 15,
        'leftIndent': 18 * mm, 'bulletIndent': 10 * mm, 'spaceAfter': 4,
    }),
    'numbered_item': ('BodyText', {
        'fontName': BODY_FONT, 'fontSize': 10, 'leading': 15,
        'leftIndent': 18 * mm, 'firstLineIndent': -8 * mm, 'spaceAfter': 4,
    }),
}


def create_styles() -> Dict[str, ParagraphStyle]:
    """Build the paragraph styles used in the will, keyed by block style name."""
    sample = getSampleStyleSheet()
    return {
        name: ParagraphStyle(f'DIFC_{name}', parent=sample[parent], **overrides)
        for name, (parent, overrides) in STYLE_SPECS.items()
    }


def generate_will_pdf(record: WillRecord, document_plan: List[DocumentPlanItem],
                      generation_timestamp: Optional[datetime] = None) -> Tuple[bytes, str]:
    """
    Generate the will PDF.

    Args:
        record: The will record (document metadata, header and footer)
        document_plan: The rendered document plan
        generation_timestamp: Stored timestamp for determinism

    Returns:
        Tuple of (PDF bytes, SHA256 hash)
    """
    if generation_timestamp is None:
        generation_timestamp = datetime.utcnow()

    template = get_will_template(record.will_type)
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN + HEADER_OFFSET,
        bottomMargin=PAGE_MARGIN + FOOTER_OFFSET,
        title=template.name,
        author=record.personal_info.full_name or 'Testator',
        subject=REGISTRATION_BANNER,
        creator='DIFC Will Validator',
    )

    styles = create_styles()
    story = []
    for item in document_plan:
        story.extend(_clause_flowables(item, styles))

    decorate = _page_decorator(record, template.name, generation_timestamp)
    doc.build(story, onFirstPage=decorate, onLaterPages=decorate)

    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes, calculate_sha256(pdf_bytes)


def _clause_flowables(item: DocumentPlanItem, styles: Dict[str, ParagraphStyle]) -> List:
    flowables = []
    heading = Paragraph(_escape_text(f'{item.clause_number}. {item.title}'), styles['clause_heading'])

    body = [f for f in (_block_flowable(b, styles) for b in item.content_blocks) if f is not None]

    # A title block opens the document ahead of the first clause heading
    while body and isinstance(body[0], Paragraph) and body[0].style is styles['title']:
        flowables.append(body.pop(0))

    if body:
        # Keep each heading with its first paragraph
        flowables.append(KeepTogether([heading, body[0]]))
        flowables.extend(body[1:])
    else:
        flowables.append(heading)

    flowables.append(Spacer(1, 4 * mm))
    return flowables


def _block_flowable(block: ContentBlock, styles: Dict[str, ParagraphStyle]):
    text_styles = {
        'heading1': 'title',
        'numbered_item': 'numbered_item',
    }

    if block.type == 'signature_block':
        return SignatureBlock(block.content)
    if block.type == 'bullet_item':
        return Paragraph(_escape_text(block.content), styles['bullet_item'], bulletText='•')
    if block.type == 'paragraph':
        return Paragraph(_escape_text(block.content), styles.get(block.style, styles['normal']))
    if block.type in text_styles:
        return Paragraph(_escape_text(block.content), styles[text_styles[block.type]])
    return None


def _escape_text(text: Any) -> str:
    """Escape text for ReportLab's paragraph markup."""
    if not text:
        return ''
    return html.escape(str(text), quote=False)


def _page_decorator(record: WillRecord, will_name: str, generation_timestamp: datetime):
    stamp = format_dubai_datetime(generation_timestamp)
    national_id = record.personal_info.national_id or 'not provided'

    def decorate(canvas, doc):
        canvas.saveState()

        top = PAGE_HEIGHT - PAGE_MARGIN
        canvas.setFont(BOLD_FONT, 8)
        canvas.setFillColor(DIFC_MAROON)
        canvas.drawString(PAGE_MARGIN, top, REGISTRATION_BANNER.upper())
        canvas.setStrokeColor(DIFC_MAROON)
        canvas.setLineWidth(0.8)
        canvas.line(PAGE_MARGIN, top - 3, PAGE_WIDTH - PAGE_MARGIN, top - 3)

        bottom = PAGE_MARGIN
        canvas.setFont(BODY_FONT, 7.5)
        canvas.setFillColor(MUTED_GREY)
        canvas.drawString(PAGE_MARGIN, bottom + 10, f'{will_name} | Emirates ID: {national_id}')
        canvas.drawString(PAGE_MARGIN, bottom, f'Generated: {stamp}')
        canvas.drawRightString(PAGE_WIDTH - PAGE_MARGIN, bottom, f'Page {doc.page}')
        canvas.drawRightString(PAGE_WIDTH - PAGE_MARGIN, bottom + 10, 'Testator initials: ________')

        canvas.restoreState()

    return decorate


def verify_pdf_integrity(pdf_bytes: bytes, expected_hash: str) -> bool:
    """Check PDF bytes against the SHA256 recorded when it was generated."""
    return calculate_sha256(pdf_bytes) == expected_hash
