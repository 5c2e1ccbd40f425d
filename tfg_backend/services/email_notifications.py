# tfg_backend/services/email_notifications.py
"""
Notificaciones por email de la gestión de cuentas.

Funciones de alto nivel sobre ``EmailService`` que usan las plantillas HTML
de ``tfg_backend/templates/emails/``.
"""

import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates" / "emails"


def _load_template(template_name: str) -> str:
    template_path = TEMPLATES_DIR / template_name
    try:
        with open(template_path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        logger.error(f"Plantilla no encontrada: {template_path}")
        raise


def _render_template(template_html: str, **kwargs) -> str:
    """
    Sustituye las variables ``{nombre}`` de la plantilla.
    Reemplazo manual para no chocar con las llaves del CSS.
    """
    result = template_html
    for key, value in kwargs.items():
        result = result.replace(f"{{{key}}}", str(value))
    return result


def enviar_codigo_verificacion(email_service, email_usuario: str, nombre_usuario: str, codigo: str) -> bool:
    """Envía el código de validación de cuenta tras el registro."""
    html_body = _render_template(
        _load_template("codigo_verificacion.html"),
        nombre_usuario=nombre_usuario,
        codigo=codigo,
        fecha_hora=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    )
    return email_service.send_email(
        to_email=email_usuario,
        subject=f"Tu código de verificación: {codigo}",
        body_html=html_body,
        body_text=f"Tu código de verificación es {codigo}",
    )


def enviar_codigo_recuperacion(email_service, email_usuario: str, nombre_usuario: str, codigo: str) -> bool:
    """Envía el código para restablecer la contraseña."""
    html_body = _render_template(
        _load_template("recuperacion_password.html"),
        nombre_usuario=nombre_usuario,
        codigo=codigo,
        fecha_hora=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    )
    return email_service.send_email(
        to_email=email_usuario,
        subject="Recuperación de contraseña - Repositorio de TFGs",
        body_html=html_body,
        body_text=f"Tu código de recuperación es {codigo}",
    )
