"""Pipeline steps and Celery task definitions."""
