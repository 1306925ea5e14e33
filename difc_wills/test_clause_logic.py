"""
Unit tests for clause logic and clause rendering.
"""

import pytest
from difc_wills.clause_logic import (
    select_clauses, get_clause_title, ClauseId, CLAUSE_ORDER, ALWAYS_INCLUDED
)
from difc_wills.clause_renderer import (
    generate_difc_content, render_document_text, document_plan_to_dict, DIFC_WILLS_LAW
)
from difc_wills.context_builder import build_will_record, WillRecord
from difc_wills.will_templates import DIFC_WILL_TEMPLATES
from difc_wills.test_validation import full_will


class TestClauseSelection:
    def test_always_included_clauses(self):
        clauses = select_clauses(WillRecord())

        assert clauses == [
            ClauseId.TITLE_IDENTIFICATION,
            ClauseId.REVOCATION,
            ClauseId.GOVERNING_LAW,
            ClauseId.EXECUTORS,
            ClauseId.BENEFICIARY_DISTRIBUTION,
            ClauseId.WITNESS_ATTESTATION,
        ]

    def test_asset_schedule_conditional(self):
        record = build_will_record(full_will())
        assert ClauseId.ASSET_SCHEDULE in select_clauses(record)

        will = full_will()
        will['assets'] = []
        assert ClauseId.ASSET_SCHEDULE not in select_clauses(build_will_record(will))

    def test_guardians_conditional(self):
        will = full_will()
        assert ClauseId.GUARDIANS not in select_clauses(build_will_record(will))

        will['guardians'] = [{'fullName': 'Sara Nasser'}]
        assert ClauseId.GUARDIANS in select_clauses(build_will_record(will))

    def test_special_instructions_conditional(self):
        will = full_will()
        will['specialInstructions'] = '  '
        assert ClauseId.SPECIAL_INSTRUCTIONS not in select_clauses(build_will_record(will))

        will['specialInstructions'] = 'Bury me in Al Quoz.'
        assert ClauseId.SPECIAL_INSTRUCTIONS in select_clauses(build_will_record(will))

    def test_order_is_fixed(self):
        will = full_will()
        will['guardians'] = [{'fullName': 'Sara Nasser'}]
        will['specialInstructions'] = 'Note'
        clauses = select_clauses(build_will_record(will))

        assert clauses == CLAUSE_ORDER
        assert clauses[-1] == ClauseId.WITNESS_ATTESTATION

    def test_boilerplate_clauses_always_present(self):
        for clause_id in (ClauseId.REVOCATION, ClauseId.GOVERNING_LAW, ClauseId.WITNESS_ATTESTATION):
            assert clause_id in ALWAYS_INCLUDED

    def test_every_clause_has_title(self):
        for clause_id in CLAUSE_ORDER:
            assert get_clause_title(clause_id)


class TestClauseRendering:
    def _plan(self, will=None):
        record = build_will_record(will if will is not None else full_will())
        return generate_difc_content(record, DIFC_WILL_TEMPLATES['simple'])

    def _item(self, plan, clause_id):
        for item in plan:
            if item.id == clause_id.value:
                return item
        raise AssertionError(f'{clause_id} not rendered')

    def test_clauses_numbered_sequentially(self):
        plan = self._plan()
        assert [item.clause_number for item in plan] == list(range(1, len(plan) + 1))

    def test_title_uses_template_name(self):
        plan = self._plan()
        heading = plan[0].content_blocks[0]
        assert heading.type == 'heading1'
        assert heading.content == 'SIMPLE DIFC WILL'

    def test_identification_mentions_emirates_id(self):
        item = self._item(self._plan(), ClauseId.TITLE_IDENTIFICATION)
        text = ' '.join(str(b.content) for b in item.content_blocks)
        assert 'Aisha Rahman' in text
        assert '784-1990-1234567-1' in text
        assert 'a national of UAE' in text

    def test_governing_law_cites_difc_law(self):
        item = self._item(self._plan(), ClauseId.GOVERNING_LAW)
        assert DIFC_WILLS_LAW in item.content_blocks[0].content

    def test_executor_appointment(self):
        item = self._item(self._plan(), ClauseId.EXECUTORS)
        assert item.content_blocks[0].content == 'I appoint Khalid Nasser to be my Executor.'

    def test_alternate_executor(self):
        will = full_will()
        will['executors'].append({'fullName': 'Mona Nasser', 'alternateExecutor': True})
        item = self._item(self._plan(will), ClauseId.EXECUTORS)
        assert len(item.content_blocks) == 2
        assert 'Mona Nasser as substitute Executor' in item.content_blocks[1].content

    def test_missing_executors_render_placeholder(self):
        will = full_will()
        will['executors'] = []
        item = self._item(self._plan(will), ClauseId.EXECUTORS)
        assert item.content_blocks[0].style == 'placeholder'

    def test_asset_schedule_formats_value(self):
        item = self._item(self._plan(), ClauseId.ASSET_SCHEDULE)
        assert item.content_blocks[1].content == (
            '(1) Apartment, Dubai Marina, estimated at AED 2,500,000, located in Dubai'
        )

    def test_beneficiary_shares(self):
        item = self._item(self._plan(), ClauseId.BENEFICIARY_DISTRIBUTION)
        bullets = [b.content for b in item.content_blocks if b.type == 'bullet_item']
        assert bullets == [
            'Omar Rahman (spouse): 60% of my estate',
            'Layla Rahman (daughter): 40% of my estate',
        ]

    def test_contingent_beneficiary_paragraph(self):
        will = full_will()
        will['beneficiaries'].append({'fullName': 'Yusuf Rahman', 'isContingent': True})
        item = self._item(self._plan(will), ClauseId.BENEFICIARY_DISTRIBUTION)
        assert 'Yusuf Rahman as contingent beneficiary' in item.content_blocks[-1].content

    def test_witness_signature_blocks(self):
        item = self._item(self._plan(), ClauseId.WITNESS_ATTESTATION)
        labels = [b.content['label'] for b in item.content_blocks if b.type == 'signature_block']
        assert labels == ['Testator', 'Witness 1', 'Witness 2']

    def test_empty_record_renders(self):
        plan = generate_difc_content(WillRecord())
        assert len(plan) == 6
        assert 'the Testator' in plan[0].content_blocks[1].content


class TestDocumentOutput:
    def test_text_contains_headings(self):
        plan = generate_difc_content(build_will_record(full_will()))
        text = render_document_text(plan)
        assert '1. DECLARATION' in text
        assert 'EXECUTION AND WITNESSING' in text
        assert 'Testator: ____________________' in text
        assert text.endswith('\n')

    def test_plan_to_dict(self):
        plan = generate_difc_content(build_will_record(full_will()))
        data = document_plan_to_dict(plan)
        assert data[0]['id'] == 'title_identification'
        assert data[0]['clause_number'] == 1
        assert data[0]['content_blocks'][0]['type'] == 'heading1'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
