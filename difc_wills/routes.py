"""
Flask routes for the DIFC Will Validator API.

All endpoints take and return JSON except /wills/pdf, which returns the
rendered document.
"""

import io
from datetime import datetime

from flask import Blueprint, request, jsonify, send_file, current_app
from flask_wtf.csrf import generate_csrf

from difc_wills.ai_generator import AIGenerationOptions, AIWillGenerator, WillGenerationError
from difc_wills.audit_logger import (
    AuditAction, log_validation_result, log_compliance_result,
    log_document_generated, log_ai_generation
)
from difc_wills.clause_renderer import generate_difc_content, render_document_text, document_plan_to_dict
from difc_wills.context_builder import build_will_record
from difc_wills.pdf_generator import generate_will_pdf
from difc_wills.security import limiter, sanitize_payload, get_client_ip, RATE_LIMITS
from difc_wills.validation import validate_completeness, validate_difc_compliance
from difc_wills.will_templates import DIFC_WILL_TEMPLATES, get_will_template, list_will_templates


api_bp = Blueprint('api', __name__, url_prefix='/api')


def _missing_payload():
    return jsonify({
        'ok': False,
        'errors': [{'field': '', 'message': 'No JSON payload provided', 'code': 'missing_payload'}]
    }), 400


def _read_payload():
    """Return the sanitized JSON object from the request, or None."""
    payload = request.get_json(silent=True)
    if not payload or not isinstance(payload, dict):
        return None
    return sanitize_payload(payload)


def _get_generator() -> AIWillGenerator:
    return AIWillGenerator(
        api_key=current_app.config.get('OPENAI_API_KEY', ''),
        model=current_app.config.get('OPENAI_MODEL'),
        temperature=current_app.config.get('AI_TEMPERATURE'),
    )


@api_bp.route('/csrf-token', methods=['GET'])
def api_csrf_token():
    """Issue a CSRF token for the X-CSRFToken header."""
    return jsonify({'ok': True, 'csrfToken': generate_csrf()})


@api_bp.route('/templates', methods=['GET'])
def api_list_templates():
    return jsonify({'ok': True, 'templates': [t.to_dict() for t in list_will_templates()]})


@api_bp.route('/templates/<will_type>', methods=['GET'])
def api_get_template(will_type: str):
    if will_type not in DIFC_WILL_TEMPLATES:
        return jsonify({'ok': False, 'error': f'Unknown will type: {will_type}'}), 404
    return jsonify({'ok': True, 'template': DIFC_WILL_TEMPLATES[will_type].to_dict()})


@api_bp.route('/wills/validate', methods=['POST'])
@limiter.limit(RATE_LIMITS['validate'])
def api_validate():
    """
    Check a will against its template's required sections.

    An incomplete will is a normal result, not a client error, so the
    response is 200 with ok mirroring isValid.
    """
    payload = _read_payload()
    if payload is None:
        return _missing_payload()

    try:
        record = build_will_record(payload)
        template = get_will_template(record.will_type)
        result = validate_completeness(record, template)

        log_validation_result(template.will_type, result, actor_id=get_client_ip())

        return jsonify({
            'ok': result.is_valid,
            'willType': template.will_type,
            'validation': result.to_dict(),
        }), 200

    except Exception as e:
        current_app.logger.error(f'Validation error: {str(e)}')
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'Internal validation error', 'code': 'internal_error'}]
        }), 500


@api_bp.route('/wills/compliance', methods=['POST'])
@limiter.limit(RATE_LIMITS['validate'])
def api_compliance():
    """Score a will against the DIFC registration checklist."""
    payload = _read_payload()
    if payload is None:
        return _missing_payload()

    try:
        record = build_will_record(payload)
        result = validate_difc_compliance(record)

        will_type = get_will_template(record.will_type).will_type
        log_compliance_result(will_type, result, actor_id=get_client_ip())

        return jsonify({'ok': result.is_compliant, 'compliance': result.to_dict()}), 200

    except Exception as e:
        current_app.logger.error(f'Compliance error: {str(e)}')
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'Internal compliance error', 'code': 'internal_error'}]
        }), 500


@api_bp.route('/wills/content', methods=['POST'])
@limiter.limit(RATE_LIMITS['content'])
def api_content():
    """Render the template-based DIFC will with its validation results."""
    payload = _read_payload()
    if payload is None:
        return _missing_payload()

    try:
        record = build_will_record(payload)
        template = get_will_template(record.will_type)
        document_plan = generate_difc_content(record, template)
        validation = validate_completeness(record, template)
        compliance = validate_difc_compliance(record)

        log_document_generated(template.will_type, AuditAction.CONTENT_GENERATED, actor_id=get_client_ip())

        return jsonify({
            'ok': True,
            'willType': template.will_type,
            'document': document_plan_to_dict(document_plan),
            'text': render_document_text(document_plan),
            'validation': validation.to_dict(),
            'compliance': compliance.to_dict(),
        }), 200

    except Exception as e:
        current_app.logger.error(f'Content error: {str(e)}')
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'Failed to render will content', 'code': 'content_error'}]
        }), 500


@api_bp.route('/wills/pdf', methods=['POST'])
@limiter.limit(RATE_LIMITS['pdf'])
def api_pdf():
    """Render the will as a PDF; blocked while required sections are missing."""
    payload = _read_payload()
    if payload is None:
        return _missing_payload()

    try:
        record = build_will_record(payload)
        template = get_will_template(record.will_type)
        validation = validate_completeness(record, template)
        if not validation.is_valid:
            return jsonify({'ok': False, 'validation': validation.to_dict()}), 422

        document_plan = generate_difc_content(record, template)
        pdf_bytes, pdf_hash = generate_will_pdf(record, document_plan, datetime.utcnow())

        log_document_generated(template.will_type, AuditAction.PDF_GENERATED, pdf_hash, actor_id=get_client_ip())

        response = send_file(
            io.BytesIO(pdf_bytes),
            mimetype='application/pdf',
            as_attachment=True,
            download_name='DIFC_Will.pdf'
        )
        response.headers['X-Document-Hash'] = pdf_hash
        return response

    except Exception as e:
        current_app.logger.error(f'PDF error: {str(e)}')
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'Failed to generate PDF', 'code': 'generation_error'}]
        }), 500


@api_bp.route('/wills/generate', methods=['POST'])
@limiter.limit(RATE_LIMITS['generate'])
def api_generate():
    """
    Draft a will with the AI service.

    Body: the will record plus an optional generateOptions object
    (formalityLevel, includeLegalAnalysis, includeSummary,
    includeComplianceCheck).
    """
    payload = _read_payload()
    if payload is None:
        return _missing_payload()

    generator = _get_generator()
    if not generator.is_configured():
        return jsonify({'ok': False, 'error': 'AI drafting is not configured'}), 503

    record = build_will_record(payload)
    template = get_will_template(record.will_type)
    generate_options = payload.get('generateOptions')
    if not isinstance(generate_options, dict):
        generate_options = {}
    options = AIGenerationOptions.from_dict(generate_options, language=record.language)

    validation = validate_completeness(record, template)
    compliance = validate_difc_compliance(record)

    try:
        draft = generator.generate_will(record, options)

        will_text = render_document_text(generate_difc_content(record, template))
        legal_analysis = None
        summary = None
        compliance_check = None
        if generate_options.get('includeLegalAnalysis'):
            legal_analysis = generator.generate_legal_analysis(will_text, record)
        if generate_options.get('includeComplianceCheck'):
            compliance_check = generator.generate_compliance_checklist(will_text)
        if generate_options.get('includeSummary'):
            summary = generator.generate_will_summary(will_text, options.language)

    except WillGenerationError as e:
        current_app.logger.error(f'AI generation error: {str(e)}')
        log_ai_generation(template.will_type, False, str(e), actor_id=get_client_ip())
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'Failed to generate will', 'code': 'generation_error'}]
        }), 502

    log_ai_generation(template.will_type, True, actor_id=get_client_ip())

    return jsonify({
        'ok': True,
        'generatedWill': draft,
        'templateContent': will_text,
        'legalAnalysis': legal_analysis,
        'complianceCheck': compliance_check,
        'willSummary': summary,
        'validation': validation.to_dict(),
        'difcValidation': compliance.to_dict(),
        'metadata': {
            'generatedAt': datetime.utcnow().isoformat(),
            'language': options.language,
            'willType': template.will_type,
            'difcCompliant': compliance.is_compliant,
            'completeness': validation.completeness,
            'complianceScore': compliance.score,
        },
    }), 200
