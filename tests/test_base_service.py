"""
Tests del servicio genérico de entidades (BaseService) y de la
normalización de errores.
"""
from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tfg_backend.core.exceptions import AppError, normalize_error, resolve_error
from tfg_backend.models.degree import Degree
from tfg_backend.models.user import User
from tfg_backend.schemas.reference import YearCreate
from tfg_backend.services.base_service import BaseService
from tfg_backend.services.reference_service import (
    current_year_label,
    degree_service,
    get_current_year,
    year_service,
)
from tfg_backend.services.refs import RefById, RefByLabel, parse_ref


class TestLectura:

    def test_get_by_id_acepta_entero_y_cadena(self, db: Session):
        service = year_service(db)
        year = service.create({"year": "23/24"})

        assert service.get_by_id(year.id).year == "23/24"
        assert service.get_by_id(str(year.id)).id == year.id

    @pytest.mark.parametrize("bad_id", ["abc", "1.5", "", "-3", 0, None])
    def test_id_con_forma_invalida(self, db: Session, bad_id):
        with pytest.raises(AppError) as exc:
            year_service(db).get_by_id(bad_id)
        assert exc.value.kind == "INVALID_ID"

    def test_id_inexistente(self, db: Session):
        with pytest.raises(AppError) as exc:
            year_service(db).get_by_id(999)
        assert exc.value.kind == "YEAR_NOT_FOUND"
        assert exc.value.status_code == 404

    def test_get_all_proyecta_campos(self, db: Session):
        service = degree_service(db)
        service.create({"degree": "Matemáticas"})
        service.create({"degree": "Física", "active": False})

        rows = service.get_all()
        assert [row["degree"] for row in rows] == ["Física", "Matemáticas"]
        assert set(rows[0]) == {"id", "degree", "active"}

        extended = service.get_all(select=["created_at"])
        assert "created_at" in extended[0]

    def test_get_all_filtra(self, db: Session):
        service = degree_service(db)
        service.create({"degree": "Matemáticas"})
        service.create({"degree": "Física", "active": False})

        rows = service.get_all({"active": True})
        assert [row["degree"] for row in rows] == ["Matemáticas"]

    def test_get_all_campo_desconocido(self, db: Session):
        with pytest.raises(AppError) as exc:
            degree_service(db).get_all({"color": "rojo"})
        assert exc.value.kind == "VALIDATION_ERROR"

    def test_find_by_field(self, db: Session):
        service = degree_service(db)
        degree = service.create({"degree": "Computer Science"})

        assert service.find_by_field("degree", "Computer Science", exact=True).id == degree.id
        assert service.find_by_field("degree", "computer science", exact=True) is None
        assert service.find_by_field("degree", "COMPUTER SCIENCE", case_insensitive=True).id == degree.id
        assert service.find_by_field("degree", "Science").id == degree.id
        assert service.find_by_field("id", str(degree.id)).id == degree.id
        assert service.find_by_field("id", "abc") is None

    def test_find_by_name(self, db: Session):
        service = degree_service(db)
        service.create({"degree": "Computer Science"})
        service.create({"degree": "Data Science"})
        service.create({"degree": "Historia"})

        names = [d.degree for d in service.find_by_name("sCIence")]
        assert names == ["Computer Science", "Data Science"]

    def test_find_by_name_escapa_comodines(self, db: Session):
        service = degree_service(db)
        service.create({"degree": "Historia"})
        assert service.find_by_name("%") == []


class TestEscritura:

    def test_crear_duplicado_sin_distinguir_mayusculas(self, db: Session):
        service = degree_service(db)
        service.create({"degree": "Computer Science"})

        with pytest.raises(AppError) as exc:
            service.create({"degree": "computer science"})
        assert exc.value.kind == "DEGREE_ALREADY_EXISTS"
        assert exc.value.status_code == 409

    @pytest.mark.parametrize("label", ["2023", "23-24", "23/25", "23/23"])
    def test_formato_de_curso(self, db: Session, label):
        with pytest.raises(AppError) as exc:
            year_service(db).create({"year": label})
        assert exc.value.kind == "VALIDATION_ERROR"
        assert exc.value.details[0]["field"] == "year"

    def test_curso_cambio_de_siglo(self, db: Session):
        assert year_service(db).create({"year": "99/00"}).year == "99/00"

    def test_update_parcial(self, db: Session):
        service = year_service(db)
        year = service.create({"year": "23/24"})

        updated = service.update(year.id, {"active": False})
        assert updated.active is False
        assert updated.year == "23/24"

    def test_update_revalida_datos_fusionados(self, db: Session):
        service = year_service(db)
        year = service.create({"year": "23/24", "start_date": date(2023, 9, 1)})

        with pytest.raises(AppError) as exc:
            service.update(year.id, {"end_date": date(2023, 1, 1)})
        assert exc.value.kind == "VALIDATION_ERROR"

        with pytest.raises(AppError) as exc:
            service.update(year.id, {"year": "2024"})
        assert exc.value.kind == "VALIDATION_ERROR"

    def test_update_a_etiqueta_existente(self, db: Session):
        service = degree_service(db)
        service.create({"degree": "Matemáticas"})
        fisica = service.create({"degree": "Física"})

        with pytest.raises(AppError) as exc:
            service.update(fisica.id, {"degree": "MATEMÁTICAS"})
        assert exc.value.kind == "DEGREE_ALREADY_EXISTS"

        # Cambiar solo mayúsculas de la propia etiqueta está permitido
        assert service.update(fisica.id, {"degree": "FÍSICA"}).degree == "FÍSICA"

    def test_update_inexistente(self, db: Session):
        with pytest.raises(AppError) as exc:
            degree_service(db).update(42, {"degree": "Nada"})
        assert exc.value.kind == "DEGREE_NOT_FOUND"

    def test_delete_y_restaurar(self, db: Session):
        service = degree_service(db)
        degree = service.create({"degree": "Computer Science"})

        assert service.delete(degree.id) == {"message": "degree eliminado"}

        with pytest.raises(AppError) as exc:
            service.get_by_id(degree.id)
        assert exc.value.kind == "DEGREE_NOT_FOUND"
        assert service.get_all() == []
        assert service.find_including_deleted().filter(Degree.id == degree.id).one().is_deleted

        restored = service.create({"degree": "computer science"})
        assert restored.id == degree.id
        assert restored.degree == "computer science"
        assert not restored.is_deleted

    def test_delete_inexistente(self, db: Session):
        with pytest.raises(AppError) as exc:
            year_service(db).delete(7)
        assert exc.value.kind == "YEAR_NOT_FOUND"

    def test_delete_solo_entidades_de_referencia(self, db: Session, normal_user):
        service = BaseService(db, User, "user", label_field="email")
        with pytest.raises(AppError) as exc:
            service.delete(normal_user.id)
        assert exc.value.kind == "INVALID_ENTITY_NAME"


class TestReferencias:

    def test_parse_ref(self):
        assert parse_ref(5) == RefById(5)
        assert parse_ref(" 12 ") == RefById(12)
        assert parse_ref("23/24") == RefByLabel("23/24")
        assert parse_ref(RefByLabel("x")) == RefByLabel("x")
        with pytest.raises(ValueError):
            parse_ref("   ")
        with pytest.raises(ValueError):
            parse_ref(True)

    def test_resolve_ref(self, db: Session):
        service = degree_service(db)
        degree = service.create({"degree": "Computer Science"})

        assert service.resolve_ref(RefById(degree.id)).id == degree.id
        assert service.resolve_ref(RefByLabel("COMPUTER science")).id == degree.id
        assert service.resolve_ref(RefByLabel("Historia")) is None

        service.delete(degree.id)
        assert service.resolve_ref(RefById(degree.id)) is None


class TestCursoActual:

    @pytest.mark.parametrize("today, label", [
        (date(2023, 10, 15), "23/24"),
        (date(2024, 3, 15), "23/24"),
        (date(2024, 9, 1), "24/25"),
        (date(1999, 12, 1), "99/00"),
    ])
    def test_etiqueta_por_calendario(self, today, label):
        assert current_year_label(today) == label

    def test_prefiere_rango_de_fechas(self, db: Session):
        service = year_service(db)
        service.create({"year": "23/24"})
        ranged = service.create({
            "year": "24/25",
            "start_date": date(2023, 7, 1),
            "end_date": date(2024, 6, 30),
        })

        assert get_current_year(db, date(2024, 1, 10)).id == ranged.id

    def test_sin_curso(self, db: Session):
        assert get_current_year(db, date(2030, 1, 1)) is None


class TestNormalizacionErrores:

    def test_app_error_pasa_sin_cambios(self):
        error = AppError("YEAR_NOT_FOUND")
        assert normalize_error(error, "year", "getById", 1) is error

    def test_validation_error(self):
        with pytest.raises(ValidationError) as exc:
            YearCreate(year="nope")
        normalized = normalize_error(exc.value, "year", "create")
        assert normalized.kind == "VALIDATION_ERROR"
        assert normalized.details[0]["field"] == "year"

    def test_integrity_error(self):
        error = IntegrityError("INSERT INTO degrees", {}, Exception("UNIQUE constraint failed"))
        assert normalize_error(error, "degree", "create").kind == "DEGREE_ALREADY_EXISTS"

    def test_error_desconocido(self):
        normalized = normalize_error(RuntimeError("boom"), "tfg", "update", 3)
        assert normalized.kind == "DEFAULT_ERROR"
        assert normalized.status_code == 500

    def test_resolucion_por_sufijo(self):
        assert resolve_error("THING_NOT_FOUND")[0] == 404
        assert resolve_error("THING_IN_USE")[0] == 409
        assert resolve_error("NO_EXISTE_ESTE_CODIGO")[0] == 500

    def test_formato_de_respuesta(self):
        body = AppError("VALIDATION_ERROR", [{"field": "year", "message": "mal"}]).to_dict()
        assert body["error"] == "VALIDATION_ERROR"
        assert body["status"] == 422
        assert body["details"] == [{"field": "year", "message": "mal"}]
        assert "details" not in AppError("TFG_NOT_FOUND").to_dict()
