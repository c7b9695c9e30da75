"""Purpose-specific OTP email rendering.

Subjects are fixed per purpose; bodies come from Jinja2 templates under
templates/emails/ (one per OtpPurpose value, all extending base.html).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from schemas.models.otp import OtpPurpose

_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)

_SUBJECTS = {
    OtpPurpose.EMAIL_VERIFICATION: "🔐 Verify Your Email - {app_name}",
    OtpPurpose.PASSWORD_RESET: "🔄 Password Reset Request - {app_name}",
    OtpPurpose.TWO_FACTOR_AUTH: "🔒 Two-Factor Authentication Code - {app_name}",
}

_TEXT_INTROS = {
    OtpPurpose.EMAIL_VERIFICATION: "Use the following code to verify your email address",
    OtpPurpose.PASSWORD_RESET: "Use the following code to reset your password",
    OtpPurpose.TWO_FACTOR_AUTH: "Use the following code to complete your login",
}


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


class OtpEmailRenderer:
    def __init__(
        self,
        app_name: str = "FirstLight Apartments",
        client_url: str = "http://localhost:3000",
        support_email: str = "support@firstlight.com",
        security_email: str = "security@firstlight.com",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._app_name = app_name
        self._client_url = client_url
        self._support_email = support_email
        self._security_email = security_email
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(
        self,
        purpose: OtpPurpose,
        user_name: Optional[str],
        code: str,
        validity_minutes: int,
    ) -> RenderedEmail:
        purpose = OtpPurpose(purpose)
        subject = _SUBJECTS[purpose].format(app_name=self._app_name)
        template = self._jinja.get_template(f"{purpose.value}.html")
        html = template.render(
            app_name=self._app_name,
            client_url=self._client_url,
            support_email=self._support_email,
            security_email=self._security_email,
            user_name=user_name,
            otp_code=code,
            validity_minutes=validity_minutes,
        )
        text = (
            f"{subject}\n\n"
            f"Hello{f' {user_name}' if user_name else ''},\n\n"
            f"{_TEXT_INTROS[purpose]}: {code}\n\n"
            f"This code expires in {validity_minutes} minutes. "
            f"Do not share it with anyone.\n\n"
            f"{self._app_name}"
        )
        return RenderedEmail(subject=subject, html=html, text=text)
