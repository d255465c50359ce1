# SMTP reply code categorization based on RFC 5321 & RFC 3463
# Used to annotate failed dispatches for the logs

from dataclasses import dataclass
from typing import Dict, Optional
from enum import Enum

import aiosmtplib


class ResponseCategory(Enum):
    """SMTP Response Categories based on RFC 5321"""
    SUCCESS = "success"
    TEMP_FAIL = "temp_fail"
    PERM_FAIL = "perm_fail"
    UNKNOWN = "unknown"


@dataclass
class SMTPResponseCode:
    """RFC 5321 reply code definition"""
    code: str
    category: ResponseCategory
    description: str
    enhanced_status: Optional[str] = None


# Reply codes a submission relay is likely to see
SMTP_CODES: Dict[str, SMTPResponseCode] = {
    '220': SMTPResponseCode('220', ResponseCategory.SUCCESS, 'Service ready', '2.0.0'),
    '221': SMTPResponseCode('221', ResponseCategory.SUCCESS,
                            'Service closing transmission channel', '2.0.0'),
    '235': SMTPResponseCode('235', ResponseCategory.SUCCESS, 'Authentication successful', '2.7.0'),
    '250': SMTPResponseCode('250', ResponseCategory.SUCCESS,
                            'Requested mail action okay, completed', '2.0.0'),
    '354': SMTPResponseCode('354', ResponseCategory.SUCCESS,
                            'Start mail input; end with <CRLF>.<CRLF>', '2.0.0'),

    '421': SMTPResponseCode('421', ResponseCategory.TEMP_FAIL,
                            'Service not available, closing transmission channel', '4.3.2'),
    '450': SMTPResponseCode('450', ResponseCategory.TEMP_FAIL,
                            'Mailbox unavailable (busy or temporarily blocked)', '4.2.0'),
    '451': SMTPResponseCode('451', ResponseCategory.TEMP_FAIL,
                            'Local error in processing; try again later', '4.3.0'),
    '452': SMTPResponseCode('452', ResponseCategory.TEMP_FAIL,
                            'Insufficient system storage', '4.3.1'),
    '454': SMTPResponseCode('454', ResponseCategory.TEMP_FAIL,
                            'TLS not available due to temporary reason', '4.7.0'),

    '500': SMTPResponseCode('500', ResponseCategory.PERM_FAIL,
                            'Syntax error, command unrecognized', '5.5.2'),
    '501': SMTPResponseCode('501', ResponseCategory.PERM_FAIL,
                            'Syntax error in parameters or arguments', '5.5.4'),
    '502': SMTPResponseCode('502', ResponseCategory.PERM_FAIL, 'Command not implemented', '5.5.1'),
    '503': SMTPResponseCode('503', ResponseCategory.PERM_FAIL, 'Bad sequence of commands', '5.5.1'),
    '530': SMTPResponseCode('530', ResponseCategory.PERM_FAIL,
                            'Access denied / Authentication required', '5.7.1'),
    '534': SMTPResponseCode('534', ResponseCategory.PERM_FAIL,
                            'Authentication mechanism is too weak', '5.7.9'),
    '535': SMTPResponseCode('535', ResponseCategory.PERM_FAIL,
                            'Authentication credentials invalid', '5.7.8'),
    '550': SMTPResponseCode('550', ResponseCategory.PERM_FAIL,
                            'Mailbox unavailable (not found, access denied)', '5.1.1'),
    '552': SMTPResponseCode('552', ResponseCategory.PERM_FAIL, 'Exceeded storage allocation', '5.2.2'),
    '553': SMTPResponseCode('553', ResponseCategory.PERM_FAIL,
                            'Mailbox name not allowed (invalid address syntax)', '5.1.3'),
    '554': SMTPResponseCode('554', ResponseCategory.PERM_FAIL,
                            'Transaction failed (general failure or policy violation)', '5.3.0'),
}


class SMTPResponseAnalyzer:
    """Maps SMTP replies and client exceptions onto RFC 5321 categories"""

    def categorize_response(self, response_code: str) -> SMTPResponseCode:
        code_info = SMTP_CODES.get(response_code)
        if code_info:
            return code_info

        # Fallback on the first digit
        if response_code.startswith(('2', '3')):
            return SMTPResponseCode(response_code, ResponseCategory.SUCCESS, 'Unknown success code')
        elif response_code.startswith('4'):
            return SMTPResponseCode(response_code, ResponseCategory.TEMP_FAIL, 'Unknown temporary failure')
        elif response_code.startswith('5'):
            return SMTPResponseCode(response_code, ResponseCategory.PERM_FAIL, 'Unknown permanent failure')
        return SMTPResponseCode(response_code, ResponseCategory.UNKNOWN, 'Invalid response code format')

    def classify_exception(self, exc: BaseException) -> Optional[SMTPResponseCode]:
        """
        Return the categorized reply code behind a client exception, or None
        when the failure happened below the SMTP layer (DNS, TCP, TLS, timeout).
        """
        if isinstance(exc, aiosmtplib.SMTPRecipientsRefused) and exc.recipients:
            exc = exc.recipients[0]
        if isinstance(exc, aiosmtplib.SMTPResponseException) and exc.code is not None and exc.code > 0:
            return self.categorize_response(str(exc.code))
        return None
