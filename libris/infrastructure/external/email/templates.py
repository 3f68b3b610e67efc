"""Transactional email templates: template key → subject/body (Jinja)."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, StrictUndefined, Template
from markupsafe import Markup

_LAYOUT = """\
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{{ subject }}</title></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2>{{ subject }}</h2>
    <p>Hi {{ name or "there" }},</p>
    {{ content }}
    <p style="color: #666; font-size: 12px;">
      This is an automated message from {{ app_name }}. Please do not reply.
    </p>
  </div>
</body>
</html>
"""

# key → (subject_template, content_template); content is wrapped in _LAYOUT.
# Context: name, app_name, plus per-template keys documented inline.
_DEFAULT_TEMPLATES: dict[str, tuple[str, str]] = {
    # verification_link, resend_link, expires_minutes
    "verify_email": (
        "Confirm Your Email Address",
        '<p>Please confirm your email address to activate your account.</p>'
        '<p><a href="{{ verification_link }}">Verify my email</a></p>'
        "<p>This link expires in {{ expires_minutes }} minutes. "
        'Need a new one? <a href="{{ resend_link }}">Resend the verification email</a>.</p>',
    ),
    # temp_password, reset_link, expires_minutes
    "admin_welcome": (
        "Welcome Email",
        "<p>Your email address has been verified and your staff account is ready.</p>"
        "<p>Temporary password: <strong>{{ temp_password }}</strong></p>"
        "<p>You must choose a new password before you can log in. "
        'Use the temporary password as your old password on the <a href="{{ reset_link }}">reset page</a>.</p>'
        "<p>The reset link expires in {{ expires_minutes }} minutes.</p>",
    ),
    # reset_link, expires_minutes
    "reset_password": (
        "Reset Your Password",
        "<p>We received a request to reset your password.</p>"
        '<p><a href="{{ reset_link }}">Reset my password</a></p>'
        "<p>This link expires in {{ expires_minutes }} minutes. "
        "If you did not ask for this, you can ignore this email.</p>",
    ),
    "reset_password_success": (
        "Reset Password Successful",
        "<p>Your password was changed successfully. "
        "If this was not you, request a password reset immediately.</p>",
    ),
    # device (dict), at (ISO string)
    "login_notification": (
        "Login Successfully",
        "<p>A new sign-in to your account was recorded at {{ at }}.</p>"
        "<ul>"
        "{% for key, value in device.items() %}<li>{{ key }}: {{ value }}</li>{% endfor %}"
        "</ul>"
        "<p>If this was not you, reset your password.</p>",
    ),
}


class EmailTemplateRenderer:
    """Renders subject and HTML body for a template key."""

    def __init__(
        self,
        app_name: str,
        templates: dict[str, tuple[str, str]] | None = None,
    ) -> None:
        """Initialize with optional template dict; falls back to _DEFAULT_TEMPLATES."""
        self._app_name = app_name
        self._env = Environment(autoescape=True, undefined=StrictUndefined)
        self._layout = self._env.from_string(_LAYOUT)
        self._compiled: dict[str, tuple[Template, Template]] = {
            key: (self._env.from_string(sub_str), self._env.from_string(body_str))
            for key, (sub_str, body_str) in (templates or _DEFAULT_TEMPLATES).items()
        }

    def render(self, template_key: str, context: dict[str, Any]) -> tuple[str, str]:
        """Render (subject, html) for the template key. Raises KeyError if key unknown."""
        if template_key not in self._compiled:
            raise KeyError(f"Unknown email template: {template_key}")
        ctx = {"name": None, "app_name": self._app_name, **context}
        subject_tpl, content_tpl = self._compiled[template_key]
        subject = subject_tpl.render(**ctx)
        content = content_tpl.render(**ctx)
        # content is already escaped by autoescape; mark it safe for the layout
        html = self._layout.render(**{**ctx, "subject": subject, "content": Markup(content)})
        return subject, html
