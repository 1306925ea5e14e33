"""
Determinism Tests

Tests that validation and document generation are deterministic:
- Same payload = identical validation and compliance results
- Same payload + same timestamp = identical PDF bytes
- Hash verification works correctly
"""

import copy
import unittest
from datetime import datetime

from difc_wills.clause_renderer import generate_difc_content, render_document_text, document_plan_to_dict
from difc_wills.context_builder import build_will_record
from difc_wills.pdf_generator import generate_will_pdf, verify_pdf_integrity
from difc_wills.utils import calculate_sha256
from difc_wills.validation import validate_completeness, validate_difc_compliance
from difc_wills.will_templates import get_will_template


class TestDeterminism(unittest.TestCase):
    """Test deterministic validation and PDF generation."""

    def setUp(self):
        self.payload = {
            'willType': 'complex',
            'language': 'en',
            'personalInfo': {
                'fullName': 'Rajesh Menon',
                'nationalId': '784-1978-5551234-9',
                'passportNumber': 'Z1234567',
                'nationality': 'India',
                'visaStatus': 'golden',
                'maritalStatus': 'married',
                'address': {
                    'street': 'Apartment 1204, Marina Gate 2',
                    'city': 'Dubai',
                    'emirate': 'Dubai',
                    'poBox': '45678',
                    'country': 'United Arab Emirates'
                }
            },
            'assets': [
                {'id': 'a1', 'type': 'property', 'name': 'Marina Gate apartment',
                 'estimatedValue': 3200000, 'currency': 'AED', 'jurisdiction': 'Dubai'},
                {'id': 'a2', 'type': 'bank_account', 'name': 'Emirates NBD current account',
                 'estimatedValue': 410000.75, 'currency': 'AED', 'jurisdiction': 'Dubai'},
            ],
            'beneficiaries': [
                {'id': 'b1', 'fullName': 'Priya Menon', 'relationship': 'spouse', 'inheritancePercentage': 50},
                {'id': 'b2', 'fullName': 'Arjun Menon', 'relationship': 'son', 'inheritancePercentage': 25,
                 'conditions': ['Reaches age 21']},
                {'id': 'b3', 'fullName': 'Kavya Menon', 'relationship': 'daughter', 'inheritancePercentage': 25},
            ],
            'executors': [
                {'id': 'e1', 'fullName': 'Suresh Nair', 'relationship': 'friend', 'isPrimary': True},
                {'id': 'e2', 'fullName': 'Anita Nair', 'relationship': 'friend', 'isPrimary': False},
            ],
            'guardians': [
                {'id': 'g1', 'fullName': 'Lakshmi Menon', 'relationship': 'sister', 'isPrimary': True},
            ],
            'specialInstructions': 'My watch collection is to be sold and the proceeds shared equally.',
        }

        # Fixed timestamp for determinism testing
        self.fixed_timestamp = datetime(2024, 12, 25, 10, 0, 0)

    def test_validation_is_idempotent(self):
        template = get_will_template(self.payload['willType'])
        first = validate_completeness(self.payload, template)
        second = validate_completeness(self.payload, template)

        self.assertEqual(first.to_dict(), second.to_dict())
        self.assertTrue(first.is_valid)
        # trustees and charitable_bequests have no presence check: 6 of 8
        self.assertEqual(first.completeness, 75)

    def test_compliance_is_idempotent(self):
        first = validate_difc_compliance(self.payload)
        second = validate_difc_compliance(self.payload)
        self.assertEqual(first.to_dict(), second.to_dict())
        self.assertEqual(first.score, 100)

    def test_validation_does_not_mutate_payload(self):
        snapshot = copy.deepcopy(self.payload)
        validate_completeness(self.payload, get_will_template('complex'))
        validate_difc_compliance(self.payload)
        self.assertEqual(self.payload, snapshot)

    def test_document_plan_is_stable(self):
        record = build_will_record(self.payload)
        plan1 = document_plan_to_dict(generate_difc_content(record))
        plan2 = document_plan_to_dict(generate_difc_content(build_will_record(copy.deepcopy(self.payload))))
        self.assertEqual(plan1, plan2)

    def test_document_text_is_stable(self):
        record = build_will_record(self.payload)
        text1 = render_document_text(generate_difc_content(record))
        text2 = render_document_text(generate_difc_content(record))
        self.assertEqual(text1, text2)
        self.assertIn('COMPLEX DIFC WILL', text1)

    def test_same_payload_same_timestamp_same_pdf(self):
        """Test that same payload + same timestamp = identical PDF."""
        record = build_will_record(self.payload)
        document_plan = generate_difc_content(record)

        pdf1_bytes, hash1 = generate_will_pdf(record, document_plan, generation_timestamp=self.fixed_timestamp)
        pdf2_bytes, hash2 = generate_will_pdf(record, document_plan, generation_timestamp=self.fixed_timestamp)

        self.assertEqual(pdf1_bytes, pdf2_bytes, "PDFs should be byte-for-byte identical")
        self.assertEqual(hash1, hash2, "Hashes should be identical")

    def test_rebuilt_record_same_pdf(self):
        record1 = build_will_record(self.payload)
        record2 = build_will_record(copy.deepcopy(self.payload))

        _, hash1 = generate_will_pdf(record1, generate_difc_content(record1), self.fixed_timestamp)
        _, hash2 = generate_will_pdf(record2, generate_difc_content(record2), self.fixed_timestamp)

        self.assertEqual(hash1, hash2)

    def test_hash_verification(self):
        record = build_will_record(self.payload)
        pdf_bytes, expected_hash = generate_will_pdf(
            record, generate_difc_content(record), generation_timestamp=self.fixed_timestamp
        )

        self.assertEqual(calculate_sha256(pdf_bytes), expected_hash)
        self.assertTrue(verify_pdf_integrity(pdf_bytes, expected_hash))
        self.assertFalse(verify_pdf_integrity(pdf_bytes, 'a' * 64))

    def test_different_content_different_hash(self):
        record1 = build_will_record(self.payload)
        changed = copy.deepcopy(self.payload)
        changed['personalInfo']['fullName'] = 'Rajesh K. Menon'
        record2 = build_will_record(changed)

        _, hash1 = generate_will_pdf(record1, generate_difc_content(record1), self.fixed_timestamp)
        _, hash2 = generate_will_pdf(record2, generate_difc_content(record2), self.fixed_timestamp)

        self.assertNotEqual(hash1, hash2)


if __name__ == '__main__':
    unittest.main()
