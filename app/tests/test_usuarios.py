import pytest
from sqlalchemy.future import select

from app.core.enums import AuditAction
from app.models.audit import Audit
from app.models.user import User


NEW_USER = {
    "primer_nombre": "Lucía",
    "segundo_nombre": "Isabel",
    "primer_apellido": "Martínez",
    "email": "lucia@trustcorreduria.com",
    "password": "clave-segura-1",
    "identificacion": "001-200290-0002B",
    "rol": "colaborador",
}


@pytest.mark.crud
class TestUserAdminAccess:

    async def test_requires_token(self, test_client):
        response = await test_client.get("/api/usuarios/")
        assert response.status_code == 401

    async def test_colaborador_forbidden(self, test_client, colaborador_headers):
        response = await test_client.get("/api/usuarios/", headers=colaborador_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Permisos insuficientes"


@pytest.mark.crud
class TestUserAdminCrud:

    async def test_create_user(self, test_client, db_session, admin_user, admin_headers):
        response = await test_client.post("/api/usuarios/", headers=admin_headers, json=NEW_USER)
        assert response.status_code == 201
        assert response.json()["message"] == "Usuario creado"
        user = response.json()["user"]
        assert user["email"] == "lucia@trustcorreduria.com"
        assert user["rol"] == "colaborador"
        assert user["activo"] is True

        res = await db_session.execute(select(Audit).where(Audit.action == AuditAction.CREATE_USER.value))
        audit = res.scalars().first()
        assert audit is not None
        assert audit.user_id == admin_user.id

    async def test_create_duplicate_email(self, test_client, admin_headers, colaborador_user):
        response = await test_client.post("/api/usuarios/", headers=admin_headers,
                                          json={**NEW_USER, "email": "COLAB@trustcorreduria.com"})
        assert response.status_code == 400

    async def test_create_rejects_cliente_role(self, test_client, admin_headers):
        response = await test_client.post("/api/usuarios/", headers=admin_headers, json={**NEW_USER, "rol": "cliente"})
        assert response.status_code == 422

    async def test_create_requires_long_password(self, test_client, admin_headers):
        response = await test_client.post("/api/usuarios/", headers=admin_headers, json={**NEW_USER, "password": "1234567"})
        assert response.status_code == 422

    async def test_get_user(self, test_client, admin_headers, colaborador_user):
        response = await test_client.get(f"/api/usuarios/{colaborador_user.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "colab@trustcorreduria.com"

    async def test_get_missing_user(self, test_client, admin_headers):
        response = await test_client.get("/api/usuarios/9999", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Usuario no encontrado"

    async def test_list_with_filters(self, test_client, admin_headers, colaborador_user, inactive_user):
        response = await test_client.get("/api/usuarios/", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"total": 3, "limit": 20, "offset": 0}
        assert len(body["data"]) == 3

        response = await test_client.get("/api/usuarios/", headers=admin_headers, params={"rol": "colaborador"})
        assert {u["email"] for u in response.json()["data"]} == {"colab@trustcorreduria.com", "inactive@trustcorreduria.com"}

        response = await test_client.get("/api/usuarios/", headers=admin_headers, params={"activo": "false"})
        assert [u["email"] for u in response.json()["data"]] == ["inactive@trustcorreduria.com"]

        response = await test_client.get("/api/usuarios/", headers=admin_headers, params={"q": "Colaborador"})
        assert [u["email"] for u in response.json()["data"]] == ["colab@trustcorreduria.com"]

    async def test_list_search_by_email_and_identification(self, test_client, admin_headers):
        await test_client.post("/api/usuarios/", headers=admin_headers, json=NEW_USER)

        response = await test_client.get("/api/usuarios/", headers=admin_headers, params={"q": "LUCIA@"})
        assert [u["email"] for u in response.json()["data"]] == ["lucia@trustcorreduria.com"]

        response = await test_client.get("/api/usuarios/", headers=admin_headers, params={"q": "200290"})
        assert [u["email"] for u in response.json()["data"]] == ["lucia@trustcorreduria.com"]

    async def test_list_pagination(self, test_client, admin_headers, colaborador_user, inactive_user):
        response = await test_client.get("/api/usuarios/", headers=admin_headers, params={"limit": 1, "offset": 1})
        body = response.json()
        assert body["pagination"] == {"total": 3, "limit": 1, "offset": 1}
        assert len(body["data"]) == 1

        response = await test_client.get("/api/usuarios/", headers=admin_headers, params={"limit": 500})
        assert response.status_code == 422

    async def test_patch_and_put_update(self, test_client, admin_headers, colaborador_user):
        response = await test_client.patch(f"/api/usuarios/{colaborador_user.id}", headers=admin_headers,
                                           json={"telefono": "88887777", "rol": "administrador"})
        assert response.status_code == 200
        assert response.json()["message"] == "Usuario actualizado"
        user = response.json()["user"]
        assert user["telefono"] == "88887777"
        assert user["rol"] == "administrador"

        response = await test_client.put(f"/api/usuarios/{colaborador_user.id}", headers=admin_headers,
                                         json={"municipio": "Tipitapa"})
        assert response.status_code == 200
        assert response.json()["user"]["municipio"] == "Tipitapa"
        assert response.json()["user"]["telefono"] == "88887777"

    async def test_update_with_empty_body(self, test_client, admin_headers, colaborador_user):
        response = await test_client.patch(f"/api/usuarios/{colaborador_user.id}", headers=admin_headers, json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "No hay campos para actualizar"

    async def test_update_missing_user(self, test_client, admin_headers):
        response = await test_client.patch("/api/usuarios/9999", headers=admin_headers, json={"telefono": "1"})
        assert response.status_code == 404

    async def test_reset_password(self, test_client, admin_headers, colaborador_user):
        response = await test_client.patch(f"/api/usuarios/{colaborador_user.id}/password", headers=admin_headers,
                                           json={"newPassword": "reseteada-2025"})
        assert response.status_code == 200
        assert response.json()["message"] == "Password actualizado"

        login = await test_client.post("/api/auth/login", json={
            "email": "colab@trustcorreduria.com",
            "password": "reseteada-2025",
        })
        assert login.status_code == 200

    async def test_set_status(self, test_client, admin_headers, colaborador_user):
        response = await test_client.patch(f"/api/usuarios/{colaborador_user.id}/status", headers=admin_headers,
                                           json={"activo": False})
        assert response.status_code == 200
        assert response.json()["message"] == "Usuario desactivado"
        assert response.json()["user"]["activo"] is False

        login = await test_client.post("/api/auth/login", json={
            "email": "colab@trustcorreduria.com",
            "password": "colabpass123",
        })
        assert login.status_code == 401

    async def test_delete_is_soft(self, test_client, db_session, admin_headers, colaborador_user):
        response = await test_client.delete(f"/api/usuarios/{colaborador_user.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Usuario desactivado (soft delete)"

        db_session.expire_all()
        res = await db_session.execute(select(User).where(User.id == colaborador_user.id))
        user = res.scalars().first()
        assert user is not None
        assert user.activo is False
