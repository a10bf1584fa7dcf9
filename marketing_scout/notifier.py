# File: marketing_scout/notifier.py
"""marketing_scout.notifier: Отправка лога обхода по e-mail (SMTP + STARTTLS).

Настройки читаются из окружения и, при наличии, из файла ``.env``:

* ``EMAIL_FROM``, ``EMAIL_PASSWORD``, ``EMAIL_TO`` (через запятую) - обязательные;
* ``SMTP_HOST`` (``smtp.gmail.com``) и ``SMTP_PORT`` (``587``) - необязательные.
"""
from __future__ import annotations

import os
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from marketing_scout.errors import ConfigurationError
from marketing_scout.logger import logger

__all__ = ["NotifierSettings", "load_notifier_settings", "send_log"]


class NotifierSettings(BaseModel):
    """Параметры SMTP-доставки."""
    model_config = ConfigDict(frozen=True)

    sender: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    recipients: List[str] = Field(..., min_length=1)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = Field(587, gt=0)


def load_notifier_settings(env_file: Union[str, Path, None] = None) -> NotifierSettings:
    """Собирает NotifierSettings; без обязательных переменных бросает ConfigurationError."""
    if env_file is not None and not Path(env_file).is_file():
        raise ConfigurationError(f"env file not found: {env_file}")
    load_dotenv(dotenv_path=env_file)

    sender = os.getenv("EMAIL_FROM", "").strip()
    password = os.getenv("EMAIL_PASSWORD", "")
    recipients = [a.strip() for a in os.getenv("EMAIL_TO", "").split(",") if a.strip()]

    missing = [
        name
        for name, value in (("EMAIL_FROM", sender), ("EMAIL_PASSWORD", password), ("EMAIL_TO", recipients))
        if not value
    ]
    if missing:
        raise ConfigurationError(f"missing environment variables: {', '.join(missing)}")

    port_raw = os.getenv("SMTP_PORT", "587")
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ConfigurationError(f"SMTP_PORT must be an integer, got {port_raw!r}") from exc

    return NotifierSettings(
        sender=sender,
        password=password,
        recipients=recipients,
        smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
        smtp_port=port,
    )


def send_log(
    body: str,
    settings: NotifierSettings,
    subject: str = "Crawling Logs",
    timeout: Optional[float] = 30.0,
) -> bool:
    """Отправляет body списку получателей. Ошибки доставки только логируются."""
    msg = EmailMessage()
    msg["From"] = settings.sender
    msg["To"] = ", ".join(settings.recipients)
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=timeout) as s:
            s.ehlo()
            s.starttls()
            s.ehlo()
            s.login(settings.sender, settings.password)
            s.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Error sending email: %s", exc)
        return False

    logger.info("Email sent to %s", ", ".join(settings.recipients))
    return True
