"""
Tests del servicio de TFGs: resolución de referencias, visibilidad,
búsqueda paginada, contadores, borrado y uso de entidades de referencia.
"""
import pytest
from sqlalchemy.orm import Session

from tfg_backend.core.exceptions import AppError
from tfg_backend.models.tfg import NO_FILE_LINK
from tfg_backend.services.file_service import FileService
from tfg_backend.services.reference_service import advisor_service, degree_service, year_service
from tfg_backend.services.tfg_service import TFGService


def _create_many(service: TFGService, tfg_data: dict, count: int):
    created = []
    for i in range(count):
        data = dict(tfg_data, title=f"Trabajo {i}", student=f"Estudiante {i}")
        created.append(service.create_tfg(data))
    return created


class TestAltaYEdicion:

    def test_crear_por_etiquetas(self, db: Session, tfg_data, year, degree, advisor, normal_user):
        tfg = TFGService(db).create_tfg(tfg_data, created_by=normal_user.id)

        assert tfg.year_id == year.id
        assert tfg.degree_id == degree.id
        assert tfg.advisor_id == advisor.id
        assert tfg.verified is False
        assert tfg.link == NO_FILE_LINK
        assert tfg.keywords == ["machine learning", "redes", "clasificación"]
        assert tfg.created_by == normal_user.id

    def test_crear_por_ids(self, db: Session, tfg_data, year, degree, advisor):
        data = dict(tfg_data, year=year.id, degree=str(degree.id), advisor=advisor.id)
        tfg = TFGService(db).create_tfg(data)
        assert (tfg.year_id, tfg.degree_id, tfg.advisor_id) == (year.id, degree.id, advisor.id)

    @pytest.mark.parametrize("field, value, kind", [
        ("year", "30/31", "YEAR_NOT_FOUND"),
        ("degree", "Historia", "DEGREE_NOT_FOUND"),
        ("advisor", 999, "ADVISOR_NOT_FOUND"),
    ])
    def test_referencia_inexistente(self, db: Session, tfg_data, field, value, kind):
        with pytest.raises(AppError) as exc:
            TFGService(db).create_tfg(dict(tfg_data, **{field: value}))
        assert exc.value.kind == kind

    def test_referencia_eliminada(self, db: Session, tfg_data, advisor):
        advisor_service(db).delete(advisor.id)
        with pytest.raises(AppError) as exc:
            TFGService(db).create_tfg(tfg_data)
        assert exc.value.kind == "ADVISOR_NOT_FOUND"

    def test_keywords_vacias(self, db: Session, tfg_data):
        with pytest.raises(AppError) as exc:
            TFGService(db).create_tfg(dict(tfg_data, keywords=" , ,"))
        assert exc.value.kind == "VALIDATION_ERROR"

    def test_campos_obligatorios(self, db: Session, tfg_data):
        data = dict(tfg_data)
        del data["title"]
        with pytest.raises(AppError) as exc:
            TFGService(db).create_tfg(data)
        assert exc.value.kind == "VALIDATION_ERROR"
        assert exc.value.details[0]["field"] == "title"

    def test_update_parcial(self, db: Session, tfg_data, year, degree):
        service = TFGService(db)
        tfg = service.create_tfg(tfg_data)
        other_degree = degree_service(db).create({"degree": "Data Science"})

        updated = service.update_tfg(tfg.id, {"degree": "data science", "keywords": ["ia", " datos "]})
        assert updated.degree_id == other_degree.id
        assert updated.year_id == year.id
        assert updated.keywords == ["ia", "datos"]
        assert updated.title == tfg_data["title"]

    def test_update_invalido(self, db: Session, tfg_data):
        service = TFGService(db)
        tfg = service.create_tfg(tfg_data)

        with pytest.raises(AppError) as exc:
            service.update_tfg(tfg.id, {"title": "   "})
        assert exc.value.kind == "VALIDATION_ERROR"

        with pytest.raises(AppError) as exc:
            service.update_tfg(tfg.id, {"year": "10/11"})
        assert exc.value.kind == "YEAR_NOT_FOUND"

        with pytest.raises(AppError) as exc:
            service.update_tfg("x1", {"title": "Nuevo"})
        assert exc.value.kind == "INVALID_ID"

    def test_update_ignora_campos_no_editables(self, db: Session, tfg_data):
        service = TFGService(db)
        tfg = service.create_tfg(tfg_data)
        updated = service.update_tfg(tfg.id, {"verified": True, "views": 50, "title": "Otro"})
        assert updated.title == "Otro"
        assert updated.verified is False
        assert updated.views == 0


class TestVisibilidad:

    def test_no_verificado(self, db: Session, tfg_data):
        service = TFGService(db)
        tfg = service.create_tfg(tfg_data)

        with pytest.raises(AppError) as exc:
            service.get_tfg_by_id(tfg.id)
        assert exc.value.kind == "NOT_VERIFIED"
        assert exc.value.status_code == 403

        assert service.get_tfg_by_id(tfg.id, allow_unverified=True).id == tfg.id

    def test_verificar_y_retirar(self, db: Session, tfg_data, admin_user):
        service = TFGService(db)
        tfg = service.create_tfg(tfg_data)

        verified = service.verify_tfg(tfg.id, user_id=admin_user.id)
        assert verified.verified is True
        assert verified.verified_by == admin_user.id
        assert service.get_tfg_by_id(tfg.id).id == tfg.id

        revoked = service.verify_tfg(tfg.id, user_id=admin_user.id, verified=False, reason="PDF ilegible")
        assert revoked.verified is False
        assert revoked.reason == "PDF ilegible"

        again = service.verify_tfg(tfg.id, user_id=admin_user.id, verified=False)
        assert again.reason == "PDF ilegible"


    def test_nombres_solo_verificados(self, db: Session, tfg_data):
        service = TFGService(db)
        first, second = _create_many(service, tfg_data, 2)
        service.verify_tfg(second.id)

        assert [t.id for t in service.get_tfg_names()] == [second.id]

    def test_listado_con_filtros(self, db: Session, tfg_data, year):
        service = TFGService(db)
        first, second = _create_many(service, tfg_data, 2)
        service.verify_tfg(first.id)

        assert {t.id for t in service.get_all_tfgs()} == {first.id, second.id}
        assert [t.id for t in service.get_all_tfgs({"verified": True})] == [first.id]
        assert len(service.get_all_tfgs({"year": "23/24"})) == 2
        assert service.get_all_tfgs({"year": "20/21"}) == []


class TestPaginacion:

    @pytest.mark.parametrize("total, page_size", [(7, 3), (6, 3), (1, 5), (10, 1)])
    def test_ley_de_paginacion(self, db: Session, tfg_data, total, page_size):
        service = TFGService(db)
        created = _create_many(service, tfg_data, total)

        first = service.get_paginated_tfgs({}, 1, page_size)
        assert first["total_items"] == total
        assert first["total_pages"] == -(-total // page_size)

        seen = []
        for page in range(1, first["total_pages"] + 1):
            result = service.get_paginated_tfgs({}, page, page_size)
            assert result["current_page"] == page
            seen.extend(t.id for t in result["items"])

        assert len(seen) == len(set(seen))
        assert set(seen) == {t.id for t in created}

        # El orden es estable entre consultas
        again = [t.id for t in service.get_paginated_tfgs({}, 1, page_size)["items"]]
        assert again == seen[:page_size]

    def test_sin_resultados(self, db: Session):
        result = TFGService(db).get_paginated_tfgs({}, 1, 10)
        assert result == {"items": [], "total_pages": 0, "current_page": 1, "total_items": 0}

    def test_pagina_invalida(self, db: Session):
        with pytest.raises(AppError) as exc:
            TFGService(db).get_paginated_tfgs({}, 0, 10)
        assert exc.value.kind == "VALIDATION_ERROR"

    def test_busqueda_por_texto_y_keywords(self, db: Session, tfg_data):
        service = TFGService(db)
        by_title = service.create_tfg(dict(tfg_data, title="Blockchain en logística", keywords="cadena"))
        by_student = service.create_tfg(dict(tfg_data, title="Otro", student="María BLOCKCHAIN", keywords="x"))
        by_keyword = service.create_tfg(dict(tfg_data, title="Registro distribuido", abstract="Nada", keywords="Ledger, otra"))
        service.create_tfg(dict(tfg_data, title="Sin relación", abstract="Nada", keywords="jardinería"))

        found = {t.id for t in service.get_paginated_tfgs({"search": "blockchain"}, 1, 10)["items"]}
        assert found == {by_title.id, by_student.id}

        found = {t.id for t in service.get_paginated_tfgs({"search": "ledger"}, 1, 10)["items"]}
        assert found == {by_keyword.id}

    def test_filtros_combinados(self, db: Session, tfg_data, advisor):
        service = TFGService(db)
        other = advisor_service(db).create({"advisor": "Alan Turing"})
        mine = service.create_tfg(tfg_data)
        service.create_tfg(dict(tfg_data, advisor=other.id))
        service.verify_tfg(mine.id)

        result = service.get_paginated_tfgs({"advisor": "jane doe", "verified": True}, 1, 10)
        assert [t.id for t in result["items"]] == [mine.id]

        result = service.get_paginated_tfgs({"advisor": "Nadie"}, 1, 10)
        assert result["total_items"] == 0


class TestContadores:

    def test_visitas_y_descargas(self, db: Session, tfg_data):
        service = TFGService(db)
        tfg = service.create_tfg(tfg_data)

        assert service.increment_views(tfg.id).views == 1
        assert service.increment_views(tfg.id).views == 2
        assert service.increment_downloads(tfg.id).download_count == 1

    def test_fallo_no_propaga(self, db: Session, tfg_data, monkeypatch):
        from sqlalchemy.exc import OperationalError

        service = TFGService(db)
        tfg = service.create_tfg(tfg_data)

        def broken_execute(*args, **kwargs):
            raise OperationalError("UPDATE tfgs", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "execute", broken_execute)
        assert service.increment_views(tfg.id) is None


class TestBorrado:

    def test_borrado_logico_con_limpieza_de_archivo(self, db: Session, tfg_data, file_store):
        service = TFGService(db, file_store)
        tfg = service.create_tfg(tfg_data)
        url = FileService(db, file_store).upload_file(b"%PDF-1.4", "tfg.pdf")
        service.update_tfg_file(tfg.id, url)

        assert service.delete(tfg.id) == {"message": "tfg eliminado"}
        assert file_store.deleted == [url]

        with pytest.raises(AppError) as exc:
            service.get_by_id(tfg.id)
        assert exc.value.kind == "TFG_NOT_FOUND"

    def test_fallo_del_almacenamiento_no_impide_borrar(self, db: Session, tfg_data, file_store):
        file_store.fail_delete = True
        service = TFGService(db, file_store)
        tfg = service.create_tfg(tfg_data)
        service.update_tfg_file(tfg.id, "https://gateway.example.com/ipfs/QmRoto")

        service.delete(tfg.id)
        assert service.find_including_deleted().filter_by(id=tfg.id).one().is_deleted


class TestArchivo:

    def test_nuevo_archivo_elimina_el_anterior(self, db: Session, tfg_data, file_store):
        service = TFGService(db, file_store)
        files = FileService(db, file_store)
        tfg = service.create_tfg(tfg_data)

        first = files.upload_file(b"%PDF-1.4 v1", "tfg.pdf")
        service.update_tfg_file(tfg.id, first)
        assert file_store.deleted == []

        second = files.upload_file(b"%PDF-1.4 v2", "tfg.pdf")
        updated = service.update_tfg_file(tfg.id, second)
        assert updated.link == second
        assert file_store.deleted == [first]
        assert list(file_store.files) == [second]

    def test_fallo_al_eliminar_el_anterior_no_impide_asociar(self, db: Session, tfg_data, file_store):
        service = TFGService(db, file_store)
        tfg = service.create_tfg(tfg_data)
        service.update_tfg_file(tfg.id, "https://gateway.example.com/ipfs/QmViejo")

        file_store.fail_delete = True
        updated = service.update_tfg_file(tfg.id, "https://gateway.example.com/ipfs/QmNuevo")
        assert updated.link == "https://gateway.example.com/ipfs/QmNuevo"



class TestUsoDeReferencias:

    def test_curso_en_uso(self, db: Session, tfg_data, year):
        service = TFGService(db)
        tfg = service.create_tfg(tfg_data)
        years = year_service(db)

        assert years.is_used_in_tfgs(year.id) is True
        with pytest.raises(AppError) as exc:
            years.delete(year.id)
        assert exc.value.kind == "YEAR_IN_USE"
        assert years.get_by_id(year.id).id == year.id

        # Un TFG eliminado ya no cuenta como uso
        service.delete(tfg.id)
        assert years.is_used_in_tfgs(year.id) is False
        assert years.delete(year.id) == {"message": "year eliminado"}
        assert years.get_all() == []

    def test_uso_de_entidad_inexistente(self, db: Session):
        assert degree_service(db).is_used_in_tfgs(123) is False
        assert degree_service(db).is_used_in_tfgs("abc") is False
