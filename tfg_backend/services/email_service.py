# tfg_backend/services/email_service.py
"""
Envío de emails por SMTP.

Recibe la configuración por constructor. Sin credenciales SMTP funciona en
modo prueba: no envía nada y solo lo registra en el log.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from tfg_backend.core.config import Settings

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self, config: Settings):
        self.smtp_host = config.smtp_host
        self.smtp_port = config.smtp_port
        self.smtp_user = config.smtp_user
        self.smtp_password = config.smtp_password
        self.use_tls = config.smtp_use_tls
        self.timeout = config.smtp_timeout
        self.from_email = config.smtp_from_email
        self.from_name = config.smtp_from_name

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    def _crear_mensaje(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> MIMEMultipart:
        mensaje = MIMEMultipart("alternative")
        mensaje["Subject"] = subject
        mensaje["From"] = f"{self.from_name} <{self.from_email}>"
        mensaje["To"] = to_email
        if body_text:
            mensaje.attach(MIMEText(body_text, "plain", "utf-8"))
        mensaje.attach(MIMEText(body_html, "html", "utf-8"))
        return mensaje

    def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> bool:
        """
        Envía un email. Devuelve True si se entregó al servidor SMTP.
        Los fallos se registran y no se propagan.
        """
        if not self.is_configured:
            logger.warning(
                "[MODO PRUEBA] SMTP no configurado, email no enviado",
                extra={"to": to_email, "subject": subject},
            )
            return False

        mensaje = self._crear_mensaje(to_email, subject, body_html, body_text)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.send_message(mensaje)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error enviando email: %s", e, extra={"to": to_email})
            return False

        logger.info("Email enviado", extra={"to": to_email, "subject": subject})
        return True
