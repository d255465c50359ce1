# api/contact.py
"""
Contact form endpoint

Accepts JSON or form-encoded submissions and relays them by email.
"""

from flask import Blueprint, request, jsonify, current_app, Response
from werkzeug.datastructures import CombinedMultiDict, MultiDict
from werkzeug.exceptions import MethodNotAllowed
import logging

from api.responses import plain_text
from core.exceptions import SubmissionError, MailDispatchError
from core.submission import SubmissionRequest, parse_urlencoded
from middleware.security import apply_cors_headers, cors_headers

contact_bp = Blueprint('contact', __name__)
logger = logging.getLogger(__name__)

CONTACT_PATH = '/contact'

# Common verbs reach the view; anything else is answered by method_not_allowed
CONTACT_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']

SUCCESS_MESSAGE = 'Your message has been sent successfully'

FORM_URLENCODED = 'application/x-www-form-urlencoded'
FORM_MULTIPART = 'multipart/form-data'


@contact_bp.route(CONTACT_PATH, methods=CONTACT_METHODS)
@cors_headers
def contact():
    """
    Relay a contact form submission

    OPTIONS is answered as a preflight; anything but POST is rejected.
    """
    if request.method == 'OPTIONS':
        return Response(status=200)

    if request.method != 'POST':
        return plain_text('Method not allowed', 405)

    try:
        submission = read_submission()
        submission.validate()
    except SubmissionError as e:
        logger.info(f"Rejected submission from {request.remote_addr}: {e}")
        return plain_text(e.public_message, e.status_code)

    try:
        current_app.contact_relay.relay(submission)
    except MailDispatchError:
        return plain_text('Failed to send email', 500)

    return jsonify({
        'status': 'success',
        'message': SUCCESS_MESSAGE
    }), 200


@contact_bp.app_errorhandler(MethodNotAllowed)
def method_not_allowed(error):
    """Reject verbs the router refused, keeping the contact endpoint's CORS contract"""
    if request.path != CONTACT_PATH:
        return plain_text(error.name, error.code)
    return apply_cors_headers(plain_text('Method not allowed', 405))


def read_submission() -> SubmissionRequest:
    """
    Build the submission from the current request body.

    JSON when the Content-Type mentions application/json. Otherwise form
    fields from a URL-encoded body (also assumed when no Content-Type is
    sent) or a multipart/form-data body, with body values taking precedence
    over query string values. Other content types contribute only the query
    string.
    """
    content_type = request.headers.get('Content-Type', '')

    if 'application/json' in content_type:
        return SubmissionRequest.from_json(request.get_data())

    mimetype = request.mimetype
    if mimetype == FORM_MULTIPART:
        body_fields = request.form
    elif mimetype in ('', FORM_URLENCODED):
        body_fields = MultiDict(parse_urlencoded(request.get_data()))
    else:
        body_fields = MultiDict()

    return SubmissionRequest.from_fields(CombinedMultiDict([body_fields, request.args]))
