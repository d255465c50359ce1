# api/responses.py
"""
Response helpers shared by the blueprints and the error handlers
"""

from flask import Response


def plain_text(message: str, status: int) -> Response:
    """Single-line text/plain body, newline-terminated"""
    return Response(f"{message}\n", status=status, mimetype='text/plain')
