"""
Clause Logic Module

Determines which clauses appear in a DIFC will and their order.

Clause Rules:
=============

1. TITLE_IDENTIFICATION: Always included
2. REVOCATION: Always included
3. GOVERNING_LAW: Always included (DIFC law and jurisdiction)
4. EXECUTORS: Always included
5. GUARDIANS: Included if the will names at least one guardian
6. ASSET_SCHEDULE: Included if the will lists at least one asset
7. BENEFICIARY_DISTRIBUTION: Always included
8. SPECIAL_INSTRUCTIONS: Included if special instructions were given
9. WITNESS_ATTESTATION: Always included (last)

Revocation, governing law and witness attestation are the boilerplate clauses
behind the always-met DIFC compliance requirements.
"""

from enum import Enum
from typing import List

from difc_wills.context_builder import WillRecord
from difc_wills.utils import is_filled


class ClauseId(str, Enum):
    """Stable clause identifiers."""
    TITLE_IDENTIFICATION = 'title_identification'
    REVOCATION = 'revocation'
    GOVERNING_LAW = 'governing_law'
    EXECUTORS = 'executors'
    GUARDIANS = 'guardians'
    ASSET_SCHEDULE = 'asset_schedule'
    BENEFICIARY_DISTRIBUTION = 'beneficiary_distribution'
    SPECIAL_INSTRUCTIONS = 'special_instructions'
    WITNESS_ATTESTATION = 'witness_attestation'


# Fixed clause order - this never changes
CLAUSE_ORDER: List[ClauseId] = [
    ClauseId.TITLE_IDENTIFICATION,
    ClauseId.REVOCATION,
    ClauseId.GOVERNING_LAW,
    ClauseId.EXECUTORS,
    ClauseId.GUARDIANS,
    ClauseId.ASSET_SCHEDULE,
    ClauseId.BENEFICIARY_DISTRIBUTION,
    ClauseId.SPECIAL_INSTRUCTIONS,
    ClauseId.WITNESS_ATTESTATION,
]

ALWAYS_INCLUDED = frozenset([
    ClauseId.TITLE_IDENTIFICATION,
    ClauseId.REVOCATION,
    ClauseId.GOVERNING_LAW,
    ClauseId.EXECUTORS,
    ClauseId.BENEFICIARY_DISTRIBUTION,
    ClauseId.WITNESS_ATTESTATION,
])

CLAUSE_TITLES = {
    ClauseId.TITLE_IDENTIFICATION: 'Declaration',
    ClauseId.REVOCATION: 'Revocation',
    ClauseId.GOVERNING_LAW: 'Governing Law and Jurisdiction',
    ClauseId.EXECUTORS: 'Appointment of Executors',
    ClauseId.GUARDIANS: 'Appointment of Guardians',
    ClauseId.ASSET_SCHEDULE: 'Schedule of Assets',
    ClauseId.BENEFICIARY_DISTRIBUTION: 'Distribution of Estate',
    ClauseId.SPECIAL_INSTRUCTIONS: 'Special Instructions',
    ClauseId.WITNESS_ATTESTATION: 'Execution and Witnessing',
}


def _is_included(clause_id: ClauseId, record: WillRecord) -> bool:
    if clause_id in ALWAYS_INCLUDED:
        return True
    if clause_id == ClauseId.GUARDIANS:
        return len(record.guardians) > 0
    if clause_id == ClauseId.ASSET_SCHEDULE:
        return len(record.assets) > 0
    if clause_id == ClauseId.SPECIAL_INSTRUCTIONS:
        return is_filled(record.special_instructions)
    return False


def select_clauses(record: WillRecord) -> List[ClauseId]:
    """
    Select the clauses for a will, in document order.

    Args:
        record: The normalized will record

    Returns:
        Ordered list of clause ids
    """
    return [clause_id for clause_id in CLAUSE_ORDER if _is_included(clause_id, record)]


def get_clause_title(clause_id: ClauseId) -> str:
    return CLAUSE_TITLES.get(clause_id, '')
