import os

from celery import Celery

# Default to development settings unless DJANGO_SETTINGS_MODULE is set otherwise
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "academy_backend.settings")

app = Celery("academy_backend")

# All celery-related settings use the CELERY_ prefix in Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
