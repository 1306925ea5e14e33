"""
Will completeness and DIFC compliance validation.

Completeness Rules:
===================

1. REQUIRED SECTIONS (per template)
   - testator_details: national ID (Emirates ID) present      -> error if missing
   - beneficiaries: at least one beneficiary                  -> error if missing
   - assets: at least one asset                               -> WARNING if missing
   - executors: at least one executor                         -> error if missing
   - any other required section has no presence check and never counts

2. OPTIONAL SECTIONS (per template)
   - guardians: at least one guardian
   - special_instructions: non-empty text

3. BENEFICIARY PERCENTAGES
   - Sum of inheritance percentages across all beneficiaries (missing = 0)
   - A total of exactly 0 means "not specified yet" and is not flagged
   - Any other total except 100 is a warning, never an error

4. COMPLETENESS
   - satisfied sections / (required + optional sections), rounded half up

DIFC Compliance Checklist:
==========================

Eight requirements, always evaluated in this order:

1. Testator Identification     national ID and nationality present
2. DIFC Jurisdiction Clause    always met (inserted by the will template)
3. Revocation Clause           always met (inserted by the will template)
4. Asset Identification        at least one asset
5. Beneficiary Designation     at least one beneficiary
6. Executor Appointment        at least one executor
7. Witness Provisions          always met (inserted by the will template)
8. UAE Residency Status        visa status present

score = met / 8, rounded half up. Compliant at 85 or above, so at most one of
the five data-dependent requirements may be unmet.

Both validators are pure: they accept partial input, never raise, and never
modify the record they are given.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from difc_wills.context_builder import WillRecord, build_will_record
from difc_wills.utils import is_filled, round_half_up, format_percentage
from difc_wills.will_templates import WillTemplate


@dataclass
class ValidationResult:
    """Outcome of a completeness check."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    completeness: int = 0

    def add_error(self, message: str):
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        """Add a non-blocking warning."""
        self.warnings.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isValid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'completeness': self.completeness,
        }


@dataclass
class ComplianceRequirement:
    """A single DIFC checklist item."""
    name: str
    met: bool
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'met': self.met, 'description': self.description}


@dataclass
class ComplianceResult:
    """Outcome of the DIFC compliance checklist."""
    is_compliant: bool = False
    requirements: List[ComplianceRequirement] = field(default_factory=list)
    score: int = 0

    @property
    def unmet_requirements(self) -> List[ComplianceRequirement]:
        return [r for r in self.requirements if not r.met]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isCompliant': self.is_compliant,
            'requirements': [r.to_dict() for r in self.requirements],
            'score': self.score,
        }


# Section names
SECTION_TESTATOR_DETAILS = 'testator_details'
SECTION_BENEFICIARIES = 'beneficiaries'
SECTION_ASSETS = 'assets'
SECTION_EXECUTORS = 'executors'
SECTION_GUARDIANS = 'guardians'
SECTION_SPECIAL_INSTRUCTIONS = 'special_instructions'

# A missing section in this set is reported as a warning, not an error
WARNING_ONLY_SECTIONS = frozenset([SECTION_ASSETS])

FULL_ALLOCATION_PERCENTAGE = 100
# All-zero percentages mean the split has not been entered yet
UNSPECIFIED_ALLOCATION_PERCENTAGE = 0

DIFC_COMPLIANCE_THRESHOLD = 85

REQUIREMENT_TESTATOR_IDENTIFICATION = 'Testator Identification'
REQUIREMENT_JURISDICTION_CLAUSE = 'DIFC Jurisdiction Clause'
REQUIREMENT_REVOCATION_CLAUSE = 'Revocation Clause'
REQUIREMENT_ASSET_IDENTIFICATION = 'Asset Identification'
REQUIREMENT_BENEFICIARY_DESIGNATION = 'Beneficiary Designation'
REQUIREMENT_EXECUTOR_APPOINTMENT = 'Executor Appointment'
REQUIREMENT_WITNESS_PROVISIONS = 'Witness Provisions'
REQUIREMENT_RESIDENCY_STATUS = 'UAE Residency Status'

# Clauses the DIFC document template always inserts; they do not depend on
# the will data and are therefore always met.
BOILERPLATE_REQUIREMENTS = frozenset([
    REQUIREMENT_JURISDICTION_CLAUSE,
    REQUIREMENT_REVOCATION_CLAUSE,
    REQUIREMENT_WITNESS_PROVISIONS,
])


def _has_testator_details(will: WillRecord) -> bool:
    return is_filled(will.personal_info.national_id)


def _has_beneficiaries(will: WillRecord) -> bool:
    return len(will.beneficiaries) > 0


def _has_assets(will: WillRecord) -> bool:
    return len(will.assets) > 0


def _has_executors(will: WillRecord) -> bool:
    return len(will.executors) > 0


def _has_guardians(will: WillRecord) -> bool:
    return len(will.guardians) > 0


def _has_special_instructions(will: WillRecord) -> bool:
    return is_filled(will.special_instructions)


REQUIRED_SECTION_CHECKS: Dict[str, Callable[[WillRecord], bool]] = {
    SECTION_TESTATOR_DETAILS: _has_testator_details,
    SECTION_BENEFICIARIES: _has_beneficiaries,
    SECTION_ASSETS: _has_assets,
    SECTION_EXECUTORS: _has_executors,
}

OPTIONAL_SECTION_CHECKS: Dict[str, Callable[[WillRecord], bool]] = {
    SECTION_GUARDIANS: _has_guardians,
    SECTION_SPECIAL_INSTRUCTIONS: _has_special_instructions,
}


def total_inheritance_percentage(will: WillRecord) -> float:
    """Sum of inheritance percentages over all beneficiaries; missing counts as 0."""
    total = sum(b.inheritance_percentage or 0 for b in will.beneficiaries)
    # Shares like 33.3/33.3/33.4 must compare equal to 100
    return round(total, 6)


def calculate_completeness(will: Any, template: WillTemplate) -> int:
    """
    Percentage of template sections populated in the will.

    Args:
        will: WillRecord or raw payload
        template: Template for the will type

    Returns:
        Integer 0-100
    """
    will = build_will_record(will)

    total_sections = len(template.required_sections) + len(template.optional_sections)
    if total_sections == 0:
        return 0

    completed = 0
    for section in template.required_sections:
        check = REQUIRED_SECTION_CHECKS.get(section)
        if check is not None and check(will):
            completed += 1

    for section in template.optional_sections:
        check = OPTIONAL_SECTION_CHECKS.get(section)
        if check is not None and check(will):
            completed += 1

    return round_half_up(100 * completed / total_sections)


def validate_completeness(will: Any, template: WillTemplate) -> ValidationResult:
    """
    Check a will against the required sections of its template.

    Args:
        will: WillRecord or raw payload
        template: Template for the will type

    Returns:
        ValidationResult; warnings never affect is_valid
    """
    will = build_will_record(will)
    result = ValidationResult()

    for section in template.required_sections:
        check = REQUIRED_SECTION_CHECKS.get(section)
        if check is None or check(will):
            continue
        if section in WARNING_ONLY_SECTIONS:
            result.add_warning(f'{section} missing')
        else:
            result.add_error(f'{section} missing')

    total = total_inheritance_percentage(will)
    if total not in (UNSPECIFIED_ALLOCATION_PERCENTAGE, FULL_ALLOCATION_PERCENTAGE):
        result.add_warning(
            f'Beneficiary percentages total {format_percentage(total)} '
            f'instead of {FULL_ALLOCATION_PERCENTAGE}%'
        )

    result.completeness = calculate_completeness(will, template)
    return result


def validate_difc_compliance(will: Any) -> ComplianceResult:
    """
    Score a will against the DIFC registration checklist.

    Args:
        will: WillRecord or raw (possibly partial) payload

    Returns:
        ComplianceResult with all eight requirements in fixed order
    """
    will = build_will_record(will)
    info = will.personal_info

    requirements = [
        ComplianceRequirement(
            name=REQUIREMENT_TESTATOR_IDENTIFICATION,
            met=is_filled(info.national_id) and is_filled(info.nationality),
            description='Testator must be identified by Emirates ID and nationality',
        ),
        ComplianceRequirement(
            name=REQUIREMENT_JURISDICTION_CLAUSE,
            met=True,
            description='Will must submit to DIFC governing law and jurisdiction',
        ),
        ComplianceRequirement(
            name=REQUIREMENT_REVOCATION_CLAUSE,
            met=True,
            description='Will must revoke all previous wills and codicils',
        ),
        ComplianceRequirement(
            name=REQUIREMENT_ASSET_IDENTIFICATION,
            met=_has_assets(will),
            description='Assets covered by the will must be identified',
        ),
        ComplianceRequirement(
            name=REQUIREMENT_BENEFICIARY_DESIGNATION,
            met=_has_beneficiaries(will),
            description='At least one beneficiary must be designated',
        ),
        ComplianceRequirement(
            name=REQUIREMENT_EXECUTOR_APPOINTMENT,
            met=_has_executors(will),
            description='At least one executor must be appointed',
        ),
        ComplianceRequirement(
            name=REQUIREMENT_WITNESS_PROVISIONS,
            met=True,
            description='Will must be signed before two witnesses',
        ),
        ComplianceRequirement(
            name=REQUIREMENT_RESIDENCY_STATUS,
            met=is_filled(info.visa_status),
            description='Testator UAE residency (visa) status must be stated',
        ),
    ]

    met_count = sum(1 for r in requirements if r.met)
    score = round_half_up(100 * met_count / len(requirements))

    return ComplianceResult(
        is_compliant=score >= DIFC_COMPLIANCE_THRESHOLD,
        requirements=requirements,
        score=score,
    )
