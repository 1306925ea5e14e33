"""
Clause Renderer Module

Renders the selected DIFC clauses into a document plan of content blocks.
The plan feeds both the plain-text output and the PDF generator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from difc_wills.clause_logic import ClauseId, select_clauses, get_clause_title
from difc_wills.context_builder import Representative, WillRecord
from difc_wills.utils import format_currency, format_percentage, join_names
from difc_wills.will_templates import WillTemplate, get_will_template


DIFC_WILLS_LAW = 'DIFC Law No. 5 of 2012 (Wills and Probate Registry Law)'


@dataclass
class ContentBlock:
    """A block of content within a clause."""
    type: str  # 'heading1', 'paragraph', 'bullet_item', 'numbered_item', 'signature_block'
    content: Any
    style: str = 'normal'
    indent_level: int = 0


@dataclass
class DocumentPlanItem:
    """A clause in the document plan."""
    id: str
    title: str
    numbering_level: int
    content_blocks: List[ContentBlock] = field(default_factory=list)
    clause_number: int = 0


def generate_difc_content(record: WillRecord, template: Optional[WillTemplate] = None) -> List[DocumentPlanItem]:
    """
    Render the complete document plan for a will.

    Args:
        record: The normalized will record
        template: Template for the will type (looked up from the record if omitted)

    Returns:
        List of document plan items in clause order
    """
    if template is None:
        template = get_will_template(record.will_type)

    document_plan = []
    for i, clause_id in enumerate(select_clauses(record)):
        item = _render_clause(clause_id, record, template, i + 1)
        if item:
            document_plan.append(item)

    return document_plan


def _render_clause(clause_id: ClauseId, record: WillRecord, template: WillTemplate,
                   clause_number: int) -> Optional[DocumentPlanItem]:
    renderers = {
        ClauseId.TITLE_IDENTIFICATION: _render_title_identification,
        ClauseId.REVOCATION: _render_revocation,
        ClauseId.GOVERNING_LAW: _render_governing_law,
        ClauseId.EXECUTORS: _render_executors,
        ClauseId.GUARDIANS: _render_guardians,
        ClauseId.ASSET_SCHEDULE: _render_asset_schedule,
        ClauseId.BENEFICIARY_DISTRIBUTION: _render_beneficiary_distribution,
        ClauseId.SPECIAL_INSTRUCTIONS: _render_special_instructions,
        ClauseId.WITNESS_ATTESTATION: _render_witness_attestation,
    }

    renderer = renderers.get(clause_id)
    if not renderer:
        return None

    return DocumentPlanItem(
        id=clause_id.value,
        title=get_clause_title(clause_id),
        numbering_level=1,
        content_blocks=renderer(record, template),
        clause_number=clause_number,
    )


def _testator_name(record: WillRecord) -> str:
    return record.personal_info.full_name or 'the Testator'


def _render_title_identification(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    """Render title and testator identification."""
    info = record.personal_info
    blocks = [ContentBlock(type='heading1', content=template.name.upper(), style='title')]

    identity = [f'I, {_testator_name(record)}']
    if info.nationality:
        identity.append(f'a national of {info.nationality}')
    if info.national_id:
        identity.append(f'holder of Emirates ID number {info.national_id}')
    if info.passport_number:
        identity.append(f'passport number {info.passport_number}')
    address = info.address.to_single_line()
    if address:
        identity.append(f'residing at {address}')

    text = ', '.join(identity) + ', declare this to be my last Will in respect of my estate.'
    blocks.append(ContentBlock(type='paragraph', content=text))

    if info.visa_status:
        blocks.append(ContentBlock(
            type='paragraph',
            content=f'I hold a {info.visa_status.replace("_", " ")} visa and am resident in the United Arab Emirates.'
        ))

    return blocks


def _render_revocation(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    return [ContentBlock(
        type='paragraph',
        content=(
            'I revoke all former wills and testamentary dispositions made by me in respect of '
            'the assets governed by this Will.'
        ),
    )]


def _render_governing_law(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    return [
        ContentBlock(
            type='paragraph',
            content=(
                f'This Will is made in accordance with {DIFC_WILLS_LAW} and shall be governed by '
                f'and construed in accordance with the laws of the Dubai International Financial Centre.'
            ),
        ),
        ContentBlock(
            type='paragraph',
            content=(
                'The Courts of the Dubai International Financial Centre shall have exclusive '
                'jurisdiction over any matter arising under this Will, and I intend this Will to be '
                'registered with the DIFC Wills Service Centre.'
            ),
        ),
    ]


def _appointment_text(people: List[Representative], role: str) -> str:
    names = join_names([p.full_name for p in people])
    plural = 's' if len(people) > 1 else ''
    return f'I appoint {names} to be my {role}{plural}.'


def _render_executors(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    blocks = []
    primary = record.primary_executors
    alternate = record.alternate_executors

    if primary:
        blocks.append(ContentBlock(type='paragraph', content=_appointment_text(primary, 'Executor')))
    if alternate:
        names = join_names([e.full_name for e in alternate])
        blocks.append(ContentBlock(
            type='paragraph',
            content=(
                f'If any Executor appointed above is unable or unwilling to act, '
                f'I appoint {names} as substitute Executor.'
            ),
        ))
    if not blocks:
        blocks.append(ContentBlock(type='paragraph', content='[Executor to be appointed]', style='placeholder'))

    return blocks


def _render_guardians(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    blocks = []
    primary = record.primary_guardians
    alternate = record.alternate_guardians

    if primary:
        names = join_names([g.full_name for g in primary])
        blocks.append(ContentBlock(
            type='paragraph',
            content=f'I appoint {names} as guardian of any of my children who are minors at my death.',
        ))
    if alternate:
        names = join_names([g.full_name for g in alternate])
        blocks.append(ContentBlock(
            type='paragraph',
            content=f'If that appointment fails, I appoint {names} as substitute guardian.',
        ))

    return blocks


def _render_asset_schedule(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    blocks = [ContentBlock(type='paragraph', content='This Will applies to the following assets:')]

    for i, asset in enumerate(record.assets, 1):
        parts = [asset.name or asset.description or f'Asset {i}']
        if asset.estimated_value is not None:
            parts.append(f'estimated at {format_currency(asset.estimated_value, asset.currency)}')
        if asset.jurisdiction:
            parts.append(f'located in {asset.jurisdiction}')
        blocks.append(ContentBlock(
            type='numbered_item',
            content=f'({i}) ' + ', '.join(parts),
            indent_level=1,
        ))

    return blocks


def _render_beneficiary_distribution(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    blocks = []
    primary = [b for b in record.beneficiaries if not b.is_contingent]
    contingent = [b for b in record.beneficiaries if b.is_contingent]

    if not primary:
        blocks.append(ContentBlock(type='paragraph', content='[Beneficiaries to be designated]', style='placeholder'))
        return blocks

    blocks.append(ContentBlock(type='paragraph', content='I give my estate to the following beneficiaries:'))
    for beneficiary in primary:
        if beneficiary.inheritance_percentage:
            share = f'{format_percentage(beneficiary.inheritance_percentage)} of my estate'
        elif beneficiary.specific_assets:
            share = 'the specific assets allocated to them'
        else:
            share = 'an equal share of my estate'
        relationship = f' ({beneficiary.relationship})' if beneficiary.relationship else ''
        text = f'{beneficiary.full_name}{relationship}: {share}'
        if beneficiary.conditions:
            text += ', subject to: ' + '; '.join(c for c in beneficiary.conditions if c)
        blocks.append(ContentBlock(type='bullet_item', content=text, indent_level=1))

    if contingent:
        names = join_names([b.full_name for b in contingent])
        blocks.append(ContentBlock(
            type='paragraph',
            content=(
                f'If any beneficiary named above does not survive me, their share passes to '
                f'{names} as contingent beneficiary.'
            ),
        ))

    return blocks


def _render_special_instructions(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    return [ContentBlock(type='paragraph', content=record.special_instructions.strip())]


def _render_witness_attestation(record: WillRecord, template: WillTemplate) -> List[ContentBlock]:
    return [
        ContentBlock(
            type='paragraph',
            content=(
                'Signed by the Testator as their last Will in our presence, both being present at '
                'the same time, and signed by us in the presence of the Testator.'
            ),
        ),
        ContentBlock(
            type='signature_block',
            content={'label': 'Testator', 'name': record.personal_info.full_name, 'date_label': 'Date'},
        ),
        ContentBlock(
            type='signature_block',
            content={'label': 'Witness 1', 'name': '', 'address_label': 'Address', 'date_label': 'Date'},
        ),
        ContentBlock(
            type='signature_block',
            content={'label': 'Witness 2', 'name': '', 'address_label': 'Address', 'date_label': 'Date'},
        ),
    ]


def render_document_text(document_plan: List[DocumentPlanItem]) -> str:
    """Flatten a document plan to plain text."""
    lines = []
    for item in document_plan:
        lines.append(f'{item.clause_number}. {item.title.upper()}')
        for block in item.content_blocks:
            if block.type == 'signature_block':
                content = block.content
                lines.append(f'{content.get("label", "")}: ____________________')
                if content.get('name'):
                    lines.append(f'Name: {content["name"]}')
                lines.append(f'{content.get("date_label", "Date")}: ____________')
            elif block.type == 'bullet_item':
                lines.append(f'  - {block.content}')
            elif block.type == 'numbered_item':
                lines.append(f'  {block.content}')
            else:
                lines.append(str(block.content))
        lines.append('')
    return '\n'.join(lines).rstrip() + '\n'


def document_plan_to_dict(document_plan: List[DocumentPlanItem]) -> List[Dict[str, Any]]:
    """Convert document plan to dictionaries for JSON responses."""
    return [
        {
            'id': item.id,
            'title': item.title,
            'clause_number': item.clause_number,
            'numbering_level': item.numbering_level,
            'content_blocks': [
                {
                    'type': block.type,
                    'content': block.content,
                    'style': block.style,
                    'indent_level': block.indent_level,
                }
                for block in item.content_blocks
            ],
        }
        for item in document_plan
    ]
