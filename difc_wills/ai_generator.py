"""
AI Will Generation Module

Builds DIFC drafting prompts from a WillRecord and sends them to the OpenAI
chat completions API. Prompts are Jinja2 templates under templates/prompts.
"""

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined
from openai import OpenAI

from difc_wills.clause_renderer import DIFC_WILLS_LAW
from difc_wills.context_builder import WillRecord
from difc_wills.utils import format_currency, format_percentage
from difc_wills.will_templates import WillTemplate, get_will_template


DEFAULT_MODEL = 'gpt-4o'
DEFAULT_TEMPERATURE = 0.3
ANALYSIS_TEMPERATURE = 0.2
CHECKLIST_TEMPERATURE = 0.1

FORMALITY_LEVELS = {
    'standard': 'clear and accessible',
    'formal': 'formal and professional',
    'very_formal': 'very formal and traditional',
}

LANGUAGE_NAMES = {
    'en': 'English',
    'ar': 'Arabic',
}

GENERATED_WILL_KEYS = [
    'title', 'preamble', 'revocation', 'beneficiaryProvisions', 'executorProvisions',
    'residuaryClause', 'witnessClause', 'signature', 'difcCompliance',
]
LEGAL_ANALYSIS_KEYS = [
    'riskLevel', 'keyRisks', 'recommendations', 'crossBorderImplications', 'confidenceScore',
]
WILL_SUMMARY_KEYS = ['summary', 'keyPoints', 'assetDistribution', 'importantNotes']
COMPLIANCE_CHECKLIST_KEYS = ['difcCompliant', 'checklist', 'overallScore']

CHECKLIST_STATUSES = ('met', 'not_met', 'unclear')
CHECKLIST_REQUIREMENTS = [
    'Proper testator identification',
    'Clear revocation of previous wills',
    'Proper beneficiary identification',
    'Asset distribution clarity',
    'Executor appointment',
    'Witness requirements',
    'DIFC jurisdiction clauses',
    'Registration requirements',
    'Legal language compliance',
    'Signature provisions',
]


class WillGenerationError(Exception):
    """Raised when the AI service fails or returns an unusable response."""


@dataclass
class AIGenerationOptions:
    language: str = 'en'
    include_technical_terms: bool = True
    formality_level: str = 'formal'
    include_explanations: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], language: str = 'en') -> 'AIGenerationOptions':
        data = data if isinstance(data, dict) else {}
        formality = data.get('formalityLevel', data.get('formality_level', 'formal'))
        if formality not in FORMALITY_LEVELS:
            formality = 'formal'
        lang = data.get('language', language)
        if lang not in LANGUAGE_NAMES:
            lang = 'en'
        return cls(
            language=lang,
            include_technical_terms=data.get('includeTechnicalTerms', True) is not False,
            formality_level=formality,
            include_explanations=data.get('includeExplanations', False) is True,
        )


def _currency_filter(value: Any, currency: str = 'AED') -> str:
    if value is None:
        return 'value not stated'
    return format_currency(value, currency)


prompt_env = Environment(
    loader=PackageLoader('difc_wills', 'templates/prompts'),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)
prompt_env.filters['currency'] = _currency_filter
prompt_env.filters['percentage'] = format_percentage


def _language_name(options: AIGenerationOptions) -> str:
    return LANGUAGE_NAMES.get(options.language, 'English')


def build_system_prompt(template: WillTemplate, options: AIGenerationOptions) -> str:
    """Render the drafting instructions for a will template."""
    return prompt_env.get_template('system_prompt.j2').render(
        template=template,
        options=options,
        language_name=_language_name(options),
        formality=FORMALITY_LEVELS.get(options.formality_level, FORMALITY_LEVELS['formal']),
        wills_law=DIFC_WILLS_LAW,
        response_keys=GENERATED_WILL_KEYS,
    )


def build_user_prompt(record: WillRecord, options: AIGenerationOptions) -> str:
    """Render the will details for the drafting request."""
    return prompt_env.get_template('user_prompt.j2').render(
        record=record,
        info=record.personal_info,
        options=options,
        language_name=_language_name(options),
    )


class AIWillGenerator:
    """OpenAI-backed drafting service."""

    def __init__(self, client: Any = None, api_key: Optional[str] = None,
                 model: Optional[str] = None, temperature: Optional[float] = None):
        self.api_key = api_key if api_key is not None else os.environ.get('OPENAI_API_KEY', '')
        self.model = model or os.environ.get('OPENAI_MODEL', DEFAULT_MODEL)
        self.temperature = DEFAULT_TEMPERATURE if temperature is None else temperature
        self._client = client

    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise WillGenerationError('AI service is not configured')
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def _complete_json(self, messages: List[Dict[str, str]], required_keys: List[str],
                       temperature: float) -> Dict[str, Any]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                response_format={'type': 'json_object'},
            )
            content = response.choices[0].message.content
        except WillGenerationError:
            raise
        except Exception as e:
            raise WillGenerationError(f'AI request failed: {e}') from e

        try:
            data = json.loads(content or '')
        except (TypeError, ValueError) as e:
            raise WillGenerationError('AI response was not valid JSON') from e

        if not isinstance(data, dict):
            raise WillGenerationError('AI response was not a JSON object')

        missing = [key for key in required_keys if key not in data]
        if missing:
            raise WillGenerationError(f'AI response missing keys: {", ".join(missing)}')

        return data

    def generate_will(self, record: WillRecord, options: Optional[AIGenerationOptions] = None) -> Dict[str, Any]:
        """
        Draft a DIFC will.

        Args:
            record: The will record
            options: Drafting options (language, formality)

        Returns:
            Parsed draft with the GENERATED_WILL_KEYS sections

        Raises:
            WillGenerationError: if the request fails or the response is unusable
        """
        if options is None:
            options = AIGenerationOptions(language=record.language)
        template = get_will_template(record.will_type)

        messages = [
            {'role': 'system', 'content': build_system_prompt(template, options)},
            {'role': 'user', 'content': build_user_prompt(record, options)},
        ]
        return self._complete_json(messages, GENERATED_WILL_KEYS, self.temperature)

    def generate_legal_analysis(self, will_text: str, record: WillRecord) -> Dict[str, Any]:
        """Ask for a risk assessment of a drafted will."""
        prompt = prompt_env.get_template('legal_analysis.j2').render(
            will_text=will_text,
            record=record,
            response_keys=LEGAL_ANALYSIS_KEYS,
        )
        return self._complete_json([{'role': 'user', 'content': prompt}], LEGAL_ANALYSIS_KEYS,
                                   ANALYSIS_TEMPERATURE)

    def generate_will_summary(self, will_text: str, language: str = 'en') -> Dict[str, Any]:
        """Ask for a plain-language summary of a drafted will for client review."""
        prompt = prompt_env.get_template('will_summary.j2').render(
            will_text=will_text,
            language_name=LANGUAGE_NAMES.get(language, 'English'),
            response_keys=WILL_SUMMARY_KEYS,
        )
        return self._complete_json([{'role': 'user', 'content': prompt}], WILL_SUMMARY_KEYS,
                                   self.temperature)

    def generate_compliance_checklist(self, will_text: str) -> Dict[str, Any]:
        """
        Ask for a requirement-by-requirement DIFC compliance review of a will.

        Returns:
            difcCompliant, checklist of {requirement, status, notes} and
            overallScore (0-100)

        Raises:
            WillGenerationError: if the response does not match that shape
        """
        prompt = prompt_env.get_template('compliance_checklist.j2').render(
            will_text=will_text,
            requirements=CHECKLIST_REQUIREMENTS,
            statuses=CHECKLIST_STATUSES,
            response_keys=COMPLIANCE_CHECKLIST_KEYS,
        )
        data = self._complete_json([{'role': 'user', 'content': prompt}], COMPLIANCE_CHECKLIST_KEYS,
                                   CHECKLIST_TEMPERATURE)

        checklist = data['checklist']
        if not isinstance(checklist, list):
            raise WillGenerationError('Compliance checklist was not a list')
        for item in checklist:
            if not isinstance(item, dict) or item.get('status') not in CHECKLIST_STATUSES:
                raise WillGenerationError('Compliance checklist item has an invalid status')

        score = data['overallScore']
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 100:
            raise WillGenerationError('Compliance score must be a number from 0 to 100')

        return data
