"""Transactional email for the marketplace (HTML + plain text).

A ``Mailer`` is built once from ``SmtpConfig`` at process start and passed
to whatever needs to send mail. Each send opens its own SMTP connection.
"""
from __future__ import annotations

import html
import re
import smtplib
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid

from jobmatch.config import SmtpConfig
from jobmatch.digest import build_recommendation_digest
from jobmatch.errors import EmailNotConfiguredError
from jobmatch.log import get_logger
from jobmatch.models import ScoredJob
from jobmatch.retry import retry

log = get_logger(__name__)

BRAND = "JobAgency"
GMAIL_HOST = "smtp.gmail.com"

STATUS_MESSAGES: dict[str, tuple[str, str, str]] = {
    "reviewed": (
        "Application Reviewed",
        "Your application has been reviewed by the employer.",
        "#3b82f6",
    ),
    "shortlisted": (
        "Congratulations! You've Been Shortlisted",
        "Great news! You've been shortlisted for this position. "
        "The employer may contact you soon for next steps.",
        "#10b981",
    ),
    "interview": (
        "Interview Scheduled",
        "You've been selected for an interview! Check your dashboard for interview details.",
        "#8b5cf6",
    ),
    "rejected": (
        "Application Update",
        "Unfortunately, the employer has decided to move forward with other candidates. "
        "Don't be discouraged - keep applying!",
        "#6b7280",
    ),
    "hired": (
        "Congratulations! You're Hired!",
        "Amazing news! You've been selected for this position. "
        "The employer will be in touch with onboarding details.",
        "#10b981",
    ),
}

ROLE_MESSAGES: dict[str, str] = {
    "jobseeker": "Start exploring job opportunities and take the next step in your career.",
    "employer": "Post your job openings and find the perfect candidates for your team.",
    "training_center": "Showcase your courses and help professionals develop their skills.",
}


def _is_permanent_failure(exc: BaseException) -> bool:
    """Authentication errors and 550 mailbox rejections are not retried."""
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return True
    if isinstance(exc, smtplib.SMTPResponseException) and exc.smtp_code == 550:
        return True
    if isinstance(exc, smtplib.SMTPRecipientsRefused):
        return any(code == 550 for code, _ in exc.recipients.values())
    return False


def md_to_html(md: str) -> str:
    """Lightweight markdown-to-HTML for digest emails."""
    html_parts: list[str] = []
    in_table = False

    for line in md.split("\n"):
        stripped = line.strip()

        if not stripped:
            if in_table:
                html_parts.append("</table>")
                in_table = False
            html_parts.append("<br>")
            continue

        if stripped.startswith("### "):
            html_parts.append(f'<h3 style="margin:12px 0 4px;color:#1f2937">{_inline(stripped[4:])}</h3>')
            continue
        if stripped.startswith("# "):
            html_parts.append(f'<h1 style="margin:0 0 8px;color:#1f2937">{_inline(stripped[2:])}</h1>')
            continue
        if stripped == "---":
            html_parts.append('<hr style="border:none;border-top:1px solid #e5e7eb;margin:16px 0">')
            continue

        if stripped.startswith("|") and stripped.endswith("|"):
            cells = [c.strip() for c in stripped.split("|")[1:-1]]
            if all(set(c) <= {"-", " ", ":"} for c in cells):
                continue
            tag = "td" if in_table else "th"
            if not in_table:
                html_parts.append('<table style="border-collapse:collapse;width:100%;font-size:13px;margin:8px 0">')
                in_table = True
            html_parts.append("<tr>" + "".join(
                f'<{tag} style="border:1px solid #e5e7eb;padding:5px 8px;text-align:left">{_inline(c)}</{tag}>'
                for c in cells
            ) + "</tr>")
            continue

        if stripped.startswith("- "):
            html_parts.append(f'<div style="margin:2px 0 2px 16px">• {_inline(stripped[2:])}</div>')
            continue

        html_parts.append(f"<p style='margin:4px 0'>{_inline(stripped)}</p>")

    if in_table:
        html_parts.append("</table>")

    return "\n".join(html_parts)


def _inline(text: str) -> str:
    """Convert inline markdown (bold, links) to HTML, escaping everything else."""
    text = html.escape(text, quote=False)
    text = re.sub(r'\*\*(.+?)\*\*', r'<strong>\1</strong>', text)
    text = re.sub(r'\[([^\]]+)\]\(([^)]+)\)', r'<a href="\2" style="color:#2563eb">\1</a>', text)
    return text


def _layout(heading: str, body_html: str) -> str:
    year = datetime.now(timezone.utc).year
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Arial,sans-serif;line-height:1.6;color:#333;max-width:600px;margin:0 auto;padding:20px">
  <div style="background:linear-gradient(135deg,#2563eb 0%,#4f46e5 100%);padding:30px;border-radius:12px 12px 0 0;text-align:center">
    <h1 style="color:white;margin:0;font-size:24px">{html.escape(heading)}</h1>
  </div>
  <div style="background:#ffffff;padding:30px;border:1px solid #e5e7eb;border-top:none;border-radius:0 0 12px 12px">
{body_html}
  </div>
  <div style="text-align:center;padding:20px;color:#9ca3af;font-size:12px">
    <p style="margin:0">&copy; {year} {BRAND}. All rights reserved.</p>
  </div>
</body>
</html>"""


def _button(url: str, label: str) -> str:
    return (
        '<div style="text-align:center;margin:30px 0">'
        f'<a href="{html.escape(url)}" style="display:inline-block;background:#2563eb;color:white;'
        'padding:14px 32px;text-decoration:none;border-radius:8px;font-weight:600">'
        f"{html.escape(label)}</a></div>"
    )


class Mailer:
    def __init__(self, config: SmtpConfig, max_attempts: int = 3) -> None:
        self.config = config
        self.max_attempts = max_attempts

    def _connect(self) -> smtplib.SMTP:
        host = self.config.host or GMAIL_HOST
        if self.config.use_ssl:
            return smtplib.SMTP_SSL(host, self.config.port or 465)
        return smtplib.SMTP(host, self.config.port)

    def _deliver(self, to_addr: str, msg: MIMEMultipart) -> None:
        @retry(
            max_attempts=self.max_attempts,
            base_delay=1.0,
            retryable=(smtplib.SMTPException, OSError),
            give_up=_is_permanent_failure,
        )
        def attempt() -> None:
            with self._connect() as server:
                if not self.config.use_ssl:
                    server.starttls()
                server.login(self.config.user, self.config.password)
                server.sendmail(self.config.sender, [to_addr], msg.as_string())

        attempt()

    def send_email(
        self, to: str, subject: str, text: str, html_body: str | None = None
    ) -> str:
        """Send a message; returns its Message-ID. Raises after the last retry."""
        if not self.config.configured:
            raise EmailNotConfiguredError(
                "Email service not configured: SMTP_USER and SMTP_PASSWORD are required"
            )

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.config.sender
        msg["To"] = to
        msg["Message-ID"] = make_msgid(domain=BRAND.lower())
        msg.attach(MIMEText(text, "plain", "utf-8"))
        if html_body:
            msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            self._deliver(to, msg)
        except Exception:
            log.error("Failed to send email to %s after %d attempts", to, self.max_attempts)
            raise
        log.info("Email sent to %s: %s", to, msg["Message-ID"])
        return msg["Message-ID"]

    def send_welcome_email(self, to: str, user_name: str, role: str) -> str:
        role_message = ROLE_MESSAGES.get(role, "Welcome to our platform!")
        login_url = f"{self.config.frontend_url.rstrip('/')}/login"
        text = (
            f"Welcome to {BRAND}, {user_name}!\n\n"
            "Your account has been created successfully.\n\n"
            f"{role_message}\n\n"
            "Get started by completing your profile to make the most of our platform.\n\n"
            f"Best regards,\nThe {BRAND} Team"
        )
        body = (
            f"<h2 style='color:#1f2937;margin-top:0'>Hello {html.escape(user_name)}!</h2>"
            "<p>Your account has been created successfully.</p>"
            f"<p>{html.escape(role_message)}</p>"
            + _button(login_url, "Get Started")
        )
        return self.send_email(to, f"Welcome to {BRAND}!", text, _layout(f"Welcome to {BRAND}!", body))

    def send_password_reset_email(self, to: str, reset_url: str, user_name: str = "User") -> str:
        text = (
            f"Hello {user_name},\n\n"
            f"You requested to reset your password for your {BRAND} account.\n\n"
            f"Click the link below to reset your password:\n{reset_url}\n\n"
            "This link will expire in 1 hour.\n\n"
            "If you didn't request this password reset, please ignore this email.\n\n"
            f"Best regards,\nThe {BRAND} Team"
        )
        body = (
            "<h2 style='color:#1f2937;margin-top:0'>Password Reset Request</h2>"
            f"<p>Hello {html.escape(user_name)},</p>"
            f"<p>You requested to reset your password for your {BRAND} account.</p>"
            + _button(reset_url, "Reset Password")
            + "<p style='color:#6b7280;font-size:14px'>This link will expire in <strong>1 hour</strong>.</p>"
        )
        return self.send_email(to, f"Password Reset Request - {BRAND}", text, _layout(BRAND, body))

    def send_verification_email(self, to: str, verification_url: str, user_name: str = "User") -> str:
        text = (
            f"Hello {user_name},\n\n"
            f"Please verify your email address to complete your {BRAND} registration.\n\n"
            f"{verification_url}\n\n"
            "This link will expire in 24 hours.\n\n"
            f"Best regards,\nThe {BRAND} Team"
        )
        body = (
            "<h2 style='color:#1f2937;margin-top:0'>Verify Your Email Address</h2>"
            f"<p>Hello {html.escape(user_name)},</p>"
            f"<p>Thank you for registering with {BRAND}! Please verify your email address.</p>"
            + _button(verification_url, "Verify Email")
            + "<p style='color:#6b7280;font-size:14px'>This link will expire in <strong>24 hours</strong>.</p>"
        )
        return self.send_email(to, f"Verify Your Email - {BRAND}", text, _layout(BRAND, body))

    def send_application_status_email(
        self,
        to: str,
        user_name: str,
        job_title: str,
        company_name: str,
        status: str,
        job_url: str,
    ) -> str:
        title, message, color = STATUS_MESSAGES.get(
            status,
            (
                "Application Status Update",
                f"Your application status has been updated to: {status}",
                "#6b7280",
            ),
        )
        subject = f"{title} - {job_title} at {company_name}"
        text = (
            f"Hello {user_name},\n\n{title}\n\n"
            f"Job: {job_title}\nCompany: {company_name}\n\n"
            f"{message}\n\nView your application: {job_url}\n\n"
            f"Best regards,\nThe {BRAND} Team"
        )
        body = (
            f"<h2 style='color:{color};margin-top:0;text-align:center'>{html.escape(title)}</h2>"
            f"<p>Hello {html.escape(user_name)},</p>"
            "<div style='background:#f9fafb;border-radius:8px;padding:20px;margin:20px 0'>"
            f"<p style='margin:0 0 8px 0'><strong>Position:</strong> {html.escape(job_title)}</p>"
            f"<p style='margin:0'><strong>Company:</strong> {html.escape(company_name)}</p></div>"
            f"<p>{html.escape(message)}</p>"
            + _button(job_url, "View Application")
        )
        return self.send_email(to, subject, text, _layout(BRAND, body))

    def send_new_application_email(
        self,
        to: str,
        company_name: str,
        job_title: str,
        applicant_name: str,
        application_url: str,
    ) -> str:
        subject = f"New Application: {job_title} - {applicant_name}"
        text = (
            f"Hello {company_name},\n\n"
            f"{applicant_name} has applied for {job_title}.\n\n"
            f"Review the application: {application_url}\n\n"
            f"Best regards,\nThe {BRAND} Team"
        )
        body = (
            "<h2 style='color:#1f2937;margin-top:0'>New Application Received</h2>"
            f"<p><strong>{html.escape(applicant_name)}</strong> has applied for "
            f"<strong>{html.escape(job_title)}</strong>.</p>"
            + _button(application_url, "Review Application")
        )
        return self.send_email(to, subject, text, _layout(BRAND, body))

    def send_recommendation_digest(
        self, to: str, scored_jobs: list[ScoredJob], seeker_name: str = ""
    ) -> str:
        digest = build_recommendation_digest(
            scored_jobs, seeker_name, frontend_url=self.config.frontend_url
        )
        subject = f"Your Job Recommendations – {datetime.now(timezone.utc).strftime('%Y-%m-%d')}"
        return self.send_email(to, subject, digest, _layout(BRAND, md_to_html(digest)))
