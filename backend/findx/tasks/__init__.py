"""
Celery Task Modules

- mail.py: password reset emails over SMTP
"""

from findx.tasks.mail import send_password_reset_email

__all__ = ["send_password_reset_email"]
