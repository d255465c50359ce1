# wsgi.py
"""
Production WSGI entry point, e.g. ``gunicorn --bind 0.0.0.0:8080 wsgi:application``

Configuration is validated at import time, so a worker with an unusable
mail setup fails to boot instead of serving traffic.
"""

from app import create_app

application = create_app()
