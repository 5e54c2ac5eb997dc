"""
Payment notifications (Telegram bot or e-mail).

Sending is best effort. Callers go through ``notify_payments`` which logs
and swallows every failure so a dead bot never fails a collection.
"""
import logging
from datetime import datetime

import pytz
import requests
from flask import current_app
from flask_mail import Message

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org/bot{token}/sendMessage"
STATUS_EMOJI = {"paid": "✅", "partial": "⚠️"}


def _amount(value):
    value = float(value or 0)
    return f"{value:,.0f}" if value == int(value) else f"{value:,.2f}"


def format_payment_message(renter_name, renter_code, month, status, received, expected,
                           shops=None, tz="Asia/Kolkata", now=None):
    now = now or datetime.now(pytz.UTC)
    local = now.astimezone(pytz.timezone(tz)) if now.tzinfo else now
    emoji = STATUS_EMOJI.get(status, "❌")
    remaining = max(0.0, float(expected or 0) - float(received or 0))

    message = "<b>🏢 Rent Notification</b>\n\n"
    message += f"<b>Renter:</b> {renter_name} (Code: {renter_code})\n"
    if shops:
        message += f"<b>Shops:</b> {', '.join(shops)}\n"
    message += f"<b>Month:</b> {month}\n"

    if status == "paid":
        message += f"<b>Status:</b> {emoji} Payment <b>COMPLETE</b>\n"
        message += f"<b>Amount Paid:</b> ₹{_amount(received)}\n"
    elif status == "partial":
        message += f"<b>Status:</b> {emoji} <b>PARTIAL</b> Payment\n"
        message += f"<b>Amount Paid:</b> ₹{_amount(received)}\n"
        message += f"<b>Remaining:</b> ₹{_amount(remaining)}\n"
    else:
        message += f"<b>Status:</b> {emoji} <b>UNPAID</b>\n"
        message += f"<b>Expected:</b> ₹{_amount(expected)}\n"

    message += f"\n<b>Time:</b> {local.strftime('%I:%M %p')}"
    return message


class NullNotifier:
    timezone = "Asia/Kolkata"

    def send(self, message):
        logger.debug("[NOTIFY - DISABLED] %s", message[:120])
        return False


class TelegramNotifier:
    def __init__(self, bot_token, chat_id, timeout=10, timezone="Asia/Kolkata", http=None):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.timeout = timeout
        self.timezone = timezone
        self.http = http or requests

    def send(self, message):
        if not self.bot_token or not self.chat_id:
            logger.warning("Telegram credentials not configured")
            return False

        response = self.http.post(
            TELEGRAM_API.format(token=self.bot_token),
            json={"chat_id": self.chat_id, "text": message, "parse_mode": "HTML"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return True


class MailNotifier:
    def __init__(self, recipient, subject="Rent Notification", timezone="Asia/Kolkata"):
        self.recipient = recipient
        self.subject = subject
        self.timezone = timezone

    def send(self, message):
        mail = current_app.extensions.get("mail")
        if mail is None or not self.recipient:
            logger.warning("[EMAIL - NOT CONFIGURED] Subject: %s", self.subject)
            return False

        msg = Message(
            subject=self.subject,
            recipients=[self.recipient],
            html=message.replace("\n", "<br>"),
            sender=current_app.config.get("MAIL_DEFAULT_SENDER"),
        )
        mail.send(msg)
        return True


def build_notifier(config):
    channel = (config.get("NOTIFY_CHANNEL") or "none").lower()
    tz = config.get("TIMEZONE", "Asia/Kolkata")
    if channel == "telegram":
        return TelegramNotifier(
            config.get("TELEGRAM_BOT_TOKEN"),
            config.get("TELEGRAM_CHAT_ID"),
            timeout=config.get("TELEGRAM_TIMEOUT", 10),
            timezone=tz,
        )
    if channel == "mail":
        return MailNotifier(config.get("NOTIFY_EMAIL"), timezone=tz)
    return NullNotifier()


def notify_payments(notifier, renter, records):
    """Send one message per payment row. Returns how many went out."""
    sent = 0
    shops = [s.shop_no for s in renter.active_shops]
    for record in records:
        try:
            message = format_payment_message(
                renter.name,
                renter.renter_code,
                record.period_month,
                str(record.status),
                record.received_amount,
                record.expected_amount,
                shops=shops,
                tz=getattr(notifier, "timezone", "Asia/Kolkata"),
            )
            if notifier.send(message):
                sent += 1
        except Exception as e:
            logger.exception("Payment notification failed for %s %s: %s",
                             renter.renter_code, record.period_month, e)
    return sent
