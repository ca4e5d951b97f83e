"""WSGI config for the UniNest project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'uninest_project.settings')

application = get_wsgi_application()
