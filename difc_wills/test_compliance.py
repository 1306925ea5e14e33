"""
Unit tests for the DIFC compliance checklist.
"""

import copy
import itertools

import pytest
from difc_wills.validation import (
    validate_difc_compliance, validate_completeness, ComplianceResult,
    DIFC_COMPLIANCE_THRESHOLD, BOILERPLATE_REQUIREMENTS
)
from difc_wills.will_templates import DIFC_WILL_TEMPLATES
from difc_wills.test_validation import full_will, empty_will


REQUIREMENT_NAMES = [
    'Testator Identification',
    'DIFC Jurisdiction Clause',
    'Revocation Clause',
    'Asset Identification',
    'Beneficiary Designation',
    'Executor Appointment',
    'Witness Provisions',
    'UAE Residency Status',
]


def _break_identification(will):
    will['personalInfo']['nationality'] = ''


def _break_assets(will):
    will['assets'] = []


def _break_beneficiaries(will):
    will['beneficiaries'] = []


def _break_executors(will):
    will['executors'] = []


def _break_residency(will):
    will['personalInfo']['visaStatus'] = ''


DATA_CHECKS = {
    'Testator Identification': _break_identification,
    'Asset Identification': _break_assets,
    'Beneficiary Designation': _break_beneficiaries,
    'Executor Appointment': _break_executors,
    'UAE Residency Status': _break_residency,
}


class TestComplianceScenarios:
    def test_complete_will_scores_100(self):
        result = validate_difc_compliance(full_will())
        assert result.score == 100
        assert result.is_compliant is True
        assert all(r.met for r in result.requirements)

    def test_scenario_with_valid_completeness(self):
        will = full_will()
        completeness = validate_completeness(will, DIFC_WILL_TEMPLATES['simple'])
        compliance = validate_difc_compliance(will)
        assert completeness.completeness == 67
        assert compliance.score == 100

    def test_empty_will_scores_boilerplate_only(self):
        result = validate_difc_compliance(empty_will())
        assert result.score == 38
        assert result.is_compliant is False
        met = {r.name for r in result.requirements if r.met}
        assert met == set(BOILERPLATE_REQUIREMENTS)

    def test_requirements_are_in_fixed_order(self):
        for will in (full_will(), empty_will(), {}):
            result = validate_difc_compliance(will)
            assert [r.name for r in result.requirements] == REQUIREMENT_NAMES

    def test_every_requirement_has_description(self):
        for requirement in validate_difc_compliance(empty_will()).requirements:
            assert requirement.description

    def test_boilerplate_is_always_met(self):
        for payload in (None, {}, 'x', empty_will()):
            result = validate_difc_compliance(payload)
            for requirement in result.requirements:
                if requirement.name in BOILERPLATE_REQUIREMENTS:
                    assert requirement.met is True


class TestTestatorIdentification:
    def _identification(self, will):
        return validate_difc_compliance(will).requirements[0]

    def test_requires_national_id(self):
        will = full_will()
        will['personalInfo']['nationalId'] = ''
        assert self._identification(will).met is False

    def test_requires_nationality(self):
        will = full_will()
        del will['personalInfo']['nationality']
        assert self._identification(will).met is False

    def test_whitespace_nationality_is_missing(self):
        will = full_will()
        will['personalInfo']['nationality'] = '  '
        assert self._identification(will).met is False


class TestScoreThreshold:
    def test_threshold(self):
        assert DIFC_COMPLIANCE_THRESHOLD == 85

    @pytest.mark.parametrize('name', sorted(DATA_CHECKS))
    def test_single_unmet_check_is_still_compliant(self, name):
        will = full_will()
        DATA_CHECKS[name](will)
        result = validate_difc_compliance(will)
        assert result.score == 88
        assert result.is_compliant is True
        assert [r.name for r in result.unmet_requirements] == [name]

    def test_all_failure_combinations(self):
        expected_scores = {0: 100, 1: 88, 2: 75, 3: 63, 4: 50, 5: 38}
        for size in range(len(DATA_CHECKS) + 1):
            for combo in itertools.combinations(DATA_CHECKS, size):
                will = full_will()
                for name in combo:
                    DATA_CHECKS[name](will)
                result = validate_difc_compliance(will)
                assert result.score == expected_scores[size]
                assert result.is_compliant is (size <= 1)
                assert len(result.unmet_requirements) == size

    def test_score_is_multiple_of_eighth(self):
        for size in range(len(DATA_CHECKS) + 1):
            will = full_will()
            for name in list(DATA_CHECKS)[:size]:
                DATA_CHECKS[name](will)
            score = validate_difc_compliance(will).score
            met = 8 - size
            # Rounded half up from met * 12.5
            assert score == int(met * 12.5 + 0.5)


class TestComplianceResult:
    def test_to_dict(self):
        result = validate_difc_compliance(full_will())
        data = result.to_dict()
        assert data['isCompliant'] is True
        assert data['score'] == 100
        assert len(data['requirements']) == 8
        assert data['requirements'][0] == {
            'name': 'Testator Identification',
            'met': True,
            'description': result.requirements[0].description,
        }

    def test_default_result_is_not_compliant(self):
        assert ComplianceResult().is_compliant is False

    def test_idempotent(self):
        will = full_will()
        _break_residency(will)
        assert validate_difc_compliance(will).to_dict() == validate_difc_compliance(will).to_dict()

    def test_input_is_not_mutated(self):
        will = full_will()
        snapshot = copy.deepcopy(will)
        validate_difc_compliance(will)
        assert will == snapshot

    def test_percentages_do_not_affect_compliance(self):
        will = full_will()
        will['beneficiaries'][0]['inheritancePercentage'] = 10
        assert validate_difc_compliance(will).score == 100
