"""Verification e-mail, sent through the Mailgun HTTP API.

Without MAILGUN_API_KEY / MAILGUN_DOMAIN (local dev) the link is logged
instead, so sign-up can still be completed by hand.
"""
import logging
from urllib.parse import urlencode

import requests

from pocket_kintai.core.config import settings

logger = logging.getLogger(__name__)

MAILGUN_API_BASE = "https://api.mailgun.net/v3/"


def build_verification_link(token: str, user_id: int) -> str:
    query = urlencode({"token": token, "userId": user_id})
    return settings.FRONTEND_URL.rstrip("/") + "/verify-email?" + query


def build_verification_email(name: str, link: str) -> tuple:
    """Return (subject, text body, html body)."""
    hours = settings.EMAIL_VERIFICATION_EXPIRE_HOURS
    subject = f"[{settings.APP_NAME}] メールアドレスの確認"
    text = (
        f"{name} 様\n\n"
        f"{settings.APP_NAME} へのご登録ありがとうございます。\n"
        f"以下のリンクからメールアドレスを確認してください。\n\n"
        f"{link}\n\n"
        f"このリンクの有効期限は{hours}時間です。\n"
    )
    html = f"""<!DOCTYPE html>
<html>
<body style="font-family: sans-serif; color: #1f2937;">
  <p>{name} 様</p>
  <p>{settings.APP_NAME} へのご登録ありがとうございます。<br>
     以下のボタンからメールアドレスを確認してください。</p>
  <p><a href="{link}" style="display:inline-block;padding:10px 20px;background:#2563eb;color:#fff;border-radius:6px;text-decoration:none;">メールアドレスを確認する</a></p>
  <p style="font-size:12px;color:#6b7280;">このリンクの有効期限は{hours}時間です。</p>
</body>
</html>"""
    return subject, text, html


def send_verification_email(to_email: str, name: str, token: str, user_id: int) -> dict:
    link = build_verification_link(token, user_id)

    if not settings.MAILGUN_API_KEY or not settings.MAILGUN_DOMAIN:
        logger.info("Mailgun not configured - verification link for %s: %s", to_email, link)
        return {"success": True, "message_id": None}

    subject, text, html = build_verification_email(name, link)
    mail_data = {
        "from": settings.EMAIL_FROM_NAME + " <" + settings.EMAIL_FROM + ">",
        "to": [to_email],
        "subject": subject,
        "text": text,
        "html": html,
    }

    try:
        resp = requests.post(
            MAILGUN_API_BASE + settings.MAILGUN_DOMAIN + "/messages",
            auth=("api", settings.MAILGUN_API_KEY),
            data=mail_data,
            timeout=30,
        )
    except requests.RequestException as e:
        logger.error("Failed to send verification email to %s: %s", to_email, e)
        return {"success": False, "error": str(e)}

    if resp.status_code == 200:
        msg_id = resp.json().get("id", "")
        logger.info("Verification email sent to %s - msg_id: %s", to_email, msg_id)
        return {"success": True, "message_id": msg_id}

    logger.error("Mailgun error %s: %s", resp.status_code, resp.text)
    return {"success": False, "error": "Mailgun returned " + str(resp.status_code)}
