"""
Celery configuration for the storefront API.
"""
import os
from celery import Celery

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'main.settings')

app = Celery('storefront')

# Load config from Django settings, using CELERY_ namespace.
# The beat schedule lives in settings as CELERY_BEAT_SCHEDULE.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks in all registered Django apps
app.autodiscover_tasks()
