"""
Email Service using Resend

Handles transactional email for account flows (password reset).
"""

import asyncio
import logging
import os
from html import escape
from urllib.parse import urlencode

import resend

logger = logging.getLogger(__name__)

# Initialize Resend with API key
resend.api_key = os.getenv("RESEND_API_KEY")

# Configurations
EMAIL_FROM = os.getenv("EMAIL_FROM", "Academy <noreply@academy.dev>")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": EMAIL_FROM,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def build_password_reset_link(token: str, email: str) -> str:
    query = urlencode({"token": token, "email": email})
    return f"{FRONTEND_URL}/admin/reset-password?{query}"


async def send_password_reset_email(
    to_email: str,
    user_name: str,
    token: str,
    expiry_minutes: int,
) -> bool:
    """Send a password reset link to an admin."""
    safe_user_name = escape(user_name)
    reset_url = escape(build_password_reset_link(token, to_email))

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #9a3412; margin-bottom: 24px; }}
            .button {{ display: inline-block; background-color: #ea580c; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Reset Your Password</h1>

            <p>Hello {safe_user_name},</p>

            <p>We received a request to reset the password for your Academy admin account.</p>

            <a href="{reset_url}" class="button">Reset Password</a>

            <p>Or copy and paste this link into your browser:</p>
            <p style="word-break: break-all; color: #3b82f6;">{reset_url}</p>

            <p><strong>This link expires in {expiry_minutes} minutes.</strong></p>

            <div class="footer">
                <p>If you didn't request a password reset, you can safely ignore this email.</p>
            </div>
        </div>
    </body>
    </html>
    """
    return await send_email(
        to_email=to_email,
        subject="Reset your Academy admin password",
        html_content=html_content,
    )
