# app/services/email.py

import asyncio
import html
import logging
import smtplib
from email.message import EmailMessage
from typing import Set

from app.core.config import settings

logger = logging.getLogger(__name__)

# Ссылки на запущенные задачи, чтобы их не собрал GC до завершения
_background_tasks: Set[asyncio.Task] = set()

_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #008000; color: #fff; padding: 20px; text-align: center;"><h1>{title}</h1></div>
    <div style="padding: 20px; background: #f9f9f9;">{content}</div>
    <div style="text-align: center; padding: 20px; color: #666; font-size: 12px;">
      <p>&copy; Cirvee. All rights reserved.</p>
    </div>
  </div>
</body>
</html>"""


def render(title: str, content: str) -> str:
    return _LAYOUT.format(title=title, content=content)


def send_email(to: str, subject: str, html_body: str) -> None:
    """
    Синхронная отправка письма через SMTP.
    Без учетных данных SMTP письмо не отправляется, а только логируется.
    """
    if not settings.SMTP_USER or not settings.SMTP_PASSWORD:
        logger.info(f"SMTP is not configured, email to {to} with subject '{subject}' was not sent.")
        return

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL or settings.SMTP_USER}>"
    msg["To"] = to
    msg.set_content("This message requires an HTML-capable email client.")
    msg.add_alternative(html_body, subtype="html")

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as server:
        server.ehlo()
        server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.send_message(msg)
    logger.info(f"Email '{subject}' sent to {to}.")


def _on_task_done(task: asyncio.Task) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background email delivery failed: {exc}", exc_info=exc)


def dispatch(to: str, subject: str, html_body: str) -> None:
    """
    Отправляет письмо в фоне и сразу возвращает управление (fire-and-forget).
    Ошибки доставки только логируются и никогда не доходят до вызывающего.
    Должна вызываться из работающего event loop.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.error(f"No running event loop, email '{subject}' to {to} dropped.")
        return
    task = loop.create_task(asyncio.to_thread(send_email, to, subject, html_body))
    _background_tasks.add(task)
    task.add_done_callback(_on_task_done)


# --- Шаблоны писем ---

def send_welcome_email(email: str, name: str) -> None:
    content = (
        f"<h2>Hi {html.escape(name)},</h2>"
        "<p>Thank you for joining Cirvee! We're excited to have you on board.</p>"
        "<p>You can now start referring students and earn commissions. "
        "Share your unique referral code with friends and colleagues to start earning!</p>"
        "<p>Login to your dashboard to get your referral code and track your earnings.</p>"
    )
    dispatch(email, "Welcome to Cirvee!", render("Welcome to Cirvee!", content))


def send_password_reset_email(email: str, token: str) -> None:
    link = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
    content = (
        "<p>You requested to reset your password. Click the link below to set a new password:</p>"
        f'<p><a href="{link}">Reset Password</a></p>'
        f"<p>This link expires in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes. "
        "If you didn't request this, you can safely ignore this email.</p>"
    )
    dispatch(email, "Reset Your Password - Cirvee", render("Password Reset", content))


def send_student_confirmation(email: str, name: str, course: str) -> None:
    content = (
        f"<h2>Hi {html.escape(name)},</h2>"
        "<p>Thank you for registering with Cirvee! Your application has been received.</p>"
        f"<h3>Course Selected</h3><p><strong>{html.escape(course)}</strong></p>"
        "<p>Our team will be in touch with you shortly with the next steps and payment details.</p>"
    )
    dispatch(email, "Registration Confirmed - Cirvee", render("Registration Confirmed!", content))


def send_referral_notification(email: str, name: str, student_name: str, course: str, earnings: int) -> None:
    content = (
        f"<h2>Congratulations {html.escape(name)}!</h2>"
        "<p>Great news! Someone just used your referral code to register.</p>"
        f"<p><strong>Student:</strong> {html.escape(student_name)}<br>"
        f"<strong>Course:</strong> {html.escape(course)}</p>"
        f"<p>You earned <strong>&#8358;{earnings:,}</strong></p>"
        "<p>Keep sharing your referral code to earn more!</p>"
    )
    dispatch(email, "New Referral - You Earned a Commission!", render("New Referral!", content))


def send_admin_new_student_alert(student_name: str, student_email: str, course: str, referrer: str) -> None:
    if not settings.ADMIN_EMAIL:
        logger.info("ADMIN_EMAIL is not set, admin new-student alert skipped.")
        return
    content = (
        "<p>A new student has registered on the platform:</p>"
        f"<p><strong>Name:</strong> {html.escape(student_name)}<br>"
        f"<strong>Email:</strong> {html.escape(student_email)}<br>"
        f"<strong>Course:</strong> {html.escape(course)}<br>"
        f"<strong>Referred by:</strong> {html.escape(referrer)}</p>"
    )
    dispatch(settings.ADMIN_EMAIL, "New Student Registration - Cirvee Admin", render("New Student Registration", content))
