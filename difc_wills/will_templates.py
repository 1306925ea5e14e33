"""
DIFC will templates.

Each will type has a fixed list of required and optional sections. The
templates are defined once at import time and never change.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple


# Will types
WILL_TYPE_SIMPLE = 'simple'
WILL_TYPE_COMPLEX = 'complex'
WILL_TYPE_BUSINESS_SUCCESSION = 'business_succession'
WILL_TYPE_DIGITAL_ASSETS = 'digital_assets'

WILL_TYPES = [
    WILL_TYPE_SIMPLE,
    WILL_TYPE_COMPLEX,
    WILL_TYPE_BUSINESS_SUCCESSION,
    WILL_TYPE_DIGITAL_ASSETS,
]


@dataclass(frozen=True)
class WillTemplate:
    """Section requirements for one will type."""
    id: str
    will_type: str
    name: str
    description: str
    required_sections: Tuple[str, ...]
    optional_sections: Tuple[str, ...]

    @property
    def section_count(self) -> int:
        return len(self.required_sections) + len(self.optional_sections)

    def to_dict(self) -> Dict[str, object]:
        return {
            'id': self.id,
            'willType': self.will_type,
            'name': self.name,
            'description': self.description,
            'requiredSections': list(self.required_sections),
            'optionalSections': list(self.optional_sections),
        }


DIFC_WILL_TEMPLATES: Dict[str, WillTemplate] = {
    WILL_TYPE_SIMPLE: WillTemplate(
        id='simple_difc',
        will_type=WILL_TYPE_SIMPLE,
        name='Simple DIFC Will',
        description='Basic will for expatriates with straightforward asset distribution',
        required_sections=('testator_details', 'beneficiaries', 'assets', 'executors'),
        optional_sections=('guardians', 'special_instructions'),
    ),
    WILL_TYPE_COMPLEX: WillTemplate(
        id='complex_difc',
        will_type=WILL_TYPE_COMPLEX,
        name='Complex DIFC Will',
        description='Advanced will for complex asset structures and multiple jurisdictions',
        required_sections=('testator_details', 'beneficiaries', 'assets', 'executors', 'trustees'),
        optional_sections=('guardians', 'special_instructions', 'charitable_bequests'),
    ),
    WILL_TYPE_BUSINESS_SUCCESSION: WillTemplate(
        id='business_difc',
        will_type=WILL_TYPE_BUSINESS_SUCCESSION,
        name='Business Succession DIFC Will',
        description='Specialized will for business owners with succession planning',
        required_sections=('testator_details', 'beneficiaries', 'business_assets', 'executors',
                           'business_continuity'),
        optional_sections=('guardians', 'buy_sell_agreements', 'key_person_provisions'),
    ),
    WILL_TYPE_DIGITAL_ASSETS: WillTemplate(
        id='digital_difc',
        will_type=WILL_TYPE_DIGITAL_ASSETS,
        name='Digital Assets DIFC Will',
        description='Modern will including cryptocurrency and digital asset management',
        required_sections=('testator_details', 'beneficiaries', 'digital_assets', 'executors',
                           'digital_access'),
        optional_sections=('guardians', 'crypto_trustees', 'digital_instructions'),
    ),
}


def get_will_template(will_type: str) -> WillTemplate:
    """Return the template for a will type; unknown types get the simple template."""
    if not isinstance(will_type, str):
        return DIFC_WILL_TEMPLATES[WILL_TYPE_SIMPLE]
    return DIFC_WILL_TEMPLATES.get(will_type, DIFC_WILL_TEMPLATES[WILL_TYPE_SIMPLE])


def list_will_templates() -> List[WillTemplate]:
    return [DIFC_WILL_TEMPLATES[t] for t in WILL_TYPES]
