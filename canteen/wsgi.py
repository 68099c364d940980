"""
WSGI config for the canteen project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'canteen.settings')

application = get_wsgi_application()
