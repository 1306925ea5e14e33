"""
Context Builder Module

Transforms a raw will payload into a normalized, read-only WillRecord.

The wizard and API send camelCase keys (personalInfo, inheritancePercentage);
older clients and internal callers use snake_case. Both are accepted. Building
a record never raises: sections of the wrong type are treated as empty, so a
partially filled will can always be validated.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from difc_wills.utils import coerce_to_float


def _pick(data: Any, *keys: str, default: Any = None) -> Any:
    """Return the first key present (and not None) in a mapping."""
    if not isinstance(data, Mapping):
        return default
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return ''
    if isinstance(value, (int, float)):
        return str(value)
    return ''


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _as_mapping(value: Any) -> Dict[str, Any]:
    if isinstance(value, Mapping):
        return dict(value)
    return {}


@dataclass
class Address:
    """UAE postal address."""
    street: str = ''
    city: str = ''
    emirate: str = ''
    po_box: str = ''
    country: str = ''

    @classmethod
    def from_dict(cls, data: Any) -> 'Address':
        if isinstance(data, str):
            return cls(street=data)
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            street=_text(data.get('street')),
            city=_text(data.get('city')),
            emirate=_text(data.get('emirate')),
            po_box=_text(_pick(data, 'poBox', 'po_box')),
            country=_text(data.get('country')),
        )

    def to_single_line(self) -> str:
        parts = [self.street, self.city, self.emirate]
        if self.po_box:
            parts.append(f'P.O. Box {self.po_box}')
        parts.append(self.country)
        return ', '.join(p for p in parts if p)


@dataclass
class EmergencyContact:
    name: str = ''
    relationship: str = ''
    phone: str = ''
    email: str = ''

    @classmethod
    def from_dict(cls, data: Any) -> 'EmergencyContact':
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            name=_text(data.get('name')),
            relationship=_text(data.get('relationship')),
            phone=_text(data.get('phone')),
            email=_text(data.get('email')),
        )


@dataclass
class PersonalInfo:
    """Testator identity and residency details."""
    full_name: str = ''
    national_id: str = ''
    passport_number: str = ''
    nationality: str = ''
    visa_status: str = ''
    marital_status: str = ''
    address: Address = field(default_factory=Address)
    emergency_contact: EmergencyContact = field(default_factory=EmergencyContact)

    @classmethod
    def from_dict(cls, data: Any) -> 'PersonalInfo':
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            full_name=_text(_pick(data, 'fullName', 'full_name', 'testatorName')),
            # The Emirates ID is the national ID for UAE residents
            national_id=_text(_pick(data, 'nationalId', 'national_id', 'emiratesId', 'emirates_id')),
            passport_number=_text(_pick(data, 'passportNumber', 'passport_number')),
            nationality=_text(data.get('nationality')),
            visa_status=_text(_pick(data, 'visaStatus', 'visa_status')),
            marital_status=_text(_pick(data, 'maritalStatus', 'marital_status')),
            address=Address.from_dict(data.get('address')),
            emergency_contact=EmergencyContact.from_dict(
                _pick(data, 'emergencyContact', 'emergency_contact')
            ),
        )


@dataclass
class Asset:
    """Asset entry (property, bank account, investment, business, digital)."""
    id: str = ''
    type: str = ''
    name: str = ''
    description: str = ''
    estimated_value: Optional[float] = None
    currency: str = 'AED'
    jurisdiction: str = ''

    @classmethod
    def from_dict(cls, data: Any, index: int) -> 'Asset':
        if not isinstance(data, Mapping):
            return cls(id=f'asset_{index}')
        description = _text(data.get('description'))
        return cls(
            id=_text(data.get('id')) or f'asset_{index}',
            type=_text(data.get('type')),
            name=_text(data.get('name')) or description,
            description=description,
            estimated_value=coerce_to_float(_pick(data, 'estimatedValue', 'estimated_value', 'value')),
            currency=_text(data.get('currency')) or 'AED',
            jurisdiction=_text(_pick(data, 'jurisdiction', 'location')),
        )


@dataclass
class Beneficiary:
    """Beneficiary entity."""
    id: str = ''
    type: str = 'individual'
    full_name: str = ''
    relationship: str = ''
    inheritance_percentage: Optional[float] = None
    specific_assets: List[str] = field(default_factory=list)
    conditions: List[str] = field(default_factory=list)
    is_contingent: bool = False

    @classmethod
    def from_dict(cls, data: Any, index: int) -> 'Beneficiary':
        if not isinstance(data, Mapping):
            return cls(id=f'beneficiary_{index}')
        conditions = _pick(data, 'conditions', default=[])
        if isinstance(conditions, str):
            conditions = [conditions] if conditions else []
        return cls(
            id=_text(data.get('id')) or f'beneficiary_{index}',
            type=_text(data.get('type')) or 'individual',
            full_name=_text(_pick(data, 'fullName', 'full_name', 'name')),
            relationship=_text(data.get('relationship')),
            inheritance_percentage=coerce_to_float(
                _pick(data, 'inheritancePercentage', 'inheritance_percentage', 'percentage')
            ),
            specific_assets=[_text(a) for a in _as_list(_pick(data, 'specificAssets', 'specific_assets'))],
            conditions=[_text(c) for c in _as_list(conditions)],
            is_contingent=_pick(data, 'isContingent', 'is_contingent', 'contingent', default=False) is True,
        )


@dataclass
class Representative:
    """Executor or guardian: a named contact flagged primary or alternate."""
    id: str = ''
    full_name: str = ''
    relationship: str = ''
    phone: str = ''
    address: str = ''
    is_primary: bool = True

    @classmethod
    def from_dict(cls, data: Any, index: int, prefix: str) -> 'Representative':
        if not isinstance(data, Mapping):
            return cls(id=f'{prefix}_{index}')
        contact = _as_mapping(_pick(data, 'contactInfo', 'contact_info'))
        is_primary = _pick(data, 'isPrimary', 'is_primary')
        if is_primary is None:
            alternate = _pick(data, 'alternateExecutor', 'alternateGuardian', 'alternate', default=False)
            is_primary = alternate is not True
        return cls(
            id=_text(data.get('id')) or f'{prefix}_{index}',
            full_name=_text(_pick(data, 'fullName', 'full_name', 'name')),
            relationship=_text(data.get('relationship')),
            phone=_text(_pick(data, 'phone', default=contact.get('phone'))),
            address=_text(_pick(data, 'address', default=contact.get('address'))),
            is_primary=is_primary is True,
        )


@dataclass
class WillRecord:
    """
    Normalized will data.

    Built once per request and treated as read-only by everything downstream.
    """
    will_type: str = 'simple'
    language: str = 'en'
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    assets: List[Asset] = field(default_factory=list)
    beneficiaries: List[Beneficiary] = field(default_factory=list)
    executors: List[Representative] = field(default_factory=list)
    guardians: List[Representative] = field(default_factory=list)
    special_instructions: str = ''

    @property
    def primary_executors(self) -> List[Representative]:
        return [e for e in self.executors if e.is_primary]

    @property
    def alternate_executors(self) -> List[Representative]:
        return [e for e in self.executors if not e.is_primary]

    @property
    def primary_guardians(self) -> List[Representative]:
        return [g for g in self.guardians if g.is_primary]

    @property
    def alternate_guardians(self) -> List[Representative]:
        return [g for g in self.guardians if not g.is_primary]


def build_will_record(payload: Any) -> WillRecord:
    """
    Build a WillRecord from a raw payload.

    Args:
        payload: Will data as decoded from JSON. A WillRecord is returned unchanged.

    Returns:
        Normalized WillRecord
    """
    if isinstance(payload, WillRecord):
        return payload

    data = _as_mapping(payload)

    personal = _pick(data, 'personalInfo', 'personal_info')
    if personal is None:
        # Flat wizard payloads carry the testator fields at the top level
        personal = data

    return WillRecord(
        will_type=_text(_pick(data, 'willType', 'will_type')) or 'simple',
        language=_text(data.get('language')) or 'en',
        personal_info=PersonalInfo.from_dict(personal),
        assets=[Asset.from_dict(a, i) for i, a in enumerate(_as_list(data.get('assets')), 1)],
        beneficiaries=[
            Beneficiary.from_dict(b, i) for i, b in enumerate(_as_list(data.get('beneficiaries')), 1)
        ],
        executors=[
            Representative.from_dict(e, i, 'executor')
            for i, e in enumerate(_as_list(data.get('executors')), 1)
        ],
        guardians=[
            Representative.from_dict(g, i, 'guardian')
            for i, g in enumerate(_as_list(data.get('guardians')), 1)
        ],
        special_instructions=_text(_pick(data, 'specialInstructions', 'special_instructions')),
    )
