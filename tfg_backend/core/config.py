# tfg_backend/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List


# Roles del sistema
class Roles:
    """Constantes para roles de usuario."""
    ADMIN = "administrador"
    COORDINADOR = "coordinador"
    USUARIO = "usuario"

    TODOS = (ADMIN, COORDINADOR, USUARIO)
    PRIVILEGIADOS = (ADMIN, COORDINADOR)


class Settings(BaseSettings):
    # --- Core ---
    environment: str = Field("development")

    # --- Seguridad / JWT ---
    secret_key: str = Field(...)
    algorithm: str = Field("HS256")
    access_token_expire_minutes: int = Field(60 * 24)
    bcrypt_rounds: int = Field(12)

    # --- Bloqueo por intentos ---
    # Login: bloquea la cuenta al alcanzar el umbral
    login_max_attempts: int = Field(5)
    # Validación de cuenta y recuperación de contraseña
    code_max_attempts: int = Field(3)

    # --- Base de datos ---
    database_url: str = Field(...)

    # --- Paginación ---
    page_size: int = Field(10)

    # --- CORS ---
    backend_cors_origins: List[str] | str = Field("")

    # --- Registro ---
    # Dominios de email permitidos, separados por coma. Vacío = cualquiera
    allowed_email_domains: str = Field("")

    # --- Pinata (almacenamiento de PDFs) ---
    pinata_api_key: str = Field("")
    pinata_secret_key: str = Field("")
    pinata_api_url: str = Field("https://api.pinata.cloud")
    pinata_gateway_url: str = Field("gateway.pinata.cloud")
    pinata_timeout: int = Field(30)

    # --- SMTP ---
    smtp_host: str = Field("smtp.gmail.com")
    smtp_port: int = Field(587)
    smtp_user: str = Field("")
    smtp_password: str = Field("")
    smtp_from_email: str = Field("noreply@tfg.local")
    smtp_from_name: str = Field("Repositorio de TFGs")
    smtp_use_tls: bool = Field(True)
    smtp_timeout: int = Field(30)

    # --- Administrador inicial ---
    first_admin_email: str = Field("")
    first_admin_password: str = Field("")
    first_admin_name: str = Field("Administrador")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def email_domains(self) -> List[str]:
        return [d.strip().lower() for d in self.allowed_email_domains.split(",") if d.strip()]


settings = Settings()
