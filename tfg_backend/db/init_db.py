from sqlalchemy.orm import Session

from tfg_backend.core.config import Roles, settings
from tfg_backend.crud.user import create_user, get_user_by_email
from tfg_backend.utils.logger import logger


def create_default_admin(db: Session):
	"""Crea el administrador inicial si está configurado y no existe."""
	if not settings.first_admin_email or not settings.first_admin_password:
		logger.info("Administrador inicial no configurado")
		return None

	admin = get_user_by_email(db, settings.first_admin_email, include_deleted=True)
	if not admin:
		admin = create_user(
			db,
			name=settings.first_admin_name,
			email=settings.first_admin_email,
			password=settings.first_admin_password,
			role=Roles.ADMIN,
			validated=True,
		)
		logger.info("Admin created: %s", admin.email)
	return admin
