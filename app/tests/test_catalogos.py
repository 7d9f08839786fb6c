import json

import pytest


@pytest.mark.integration
class TestVehicleCatalogs:

    async def test_marcas_are_distinct_trimmed_and_sorted(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/marcas")
        assert response.status_code == 200
        assert response.json() == ["HYUNDAI", "NISSAN", "TOYOTA"]

    async def test_modelos_match_make_substring(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/modelos", params={"marca": "toyo"})
        assert response.status_code == 200
        assert response.json() == ["HILUX", "TUNDRA"]

    async def test_modelos_requires_marca(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/modelos")
        assert response.status_code == 400

        response = await test_client.get("/api/catalogos/modelos", params={"marca": "  "})
        assert response.status_code == 400

    async def test_anios_descending(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/anios", params={"marca": "toyota", "modelo": " Tundra "})
        assert response.status_code == 200
        assert response.json() == [2021, 2019]

    async def test_anios_requires_both_params(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/anios", params={"marca": "TOYOTA"})
        assert response.status_code == 400


@pytest.mark.integration
class TestGeographyCatalogs:

    async def test_departamentos(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/departamentos")
        assert response.status_code == 200
        assert response.json() == [
            {"id": 1, "name": "Managua"},
            {"id": 18, "name": "Managua Oficina"},
            {"id": 2, "name": "Masaya"},
        ]

    async def test_departamentos_search_hides_excluded_ids(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/departamentos", params={"q": "mana"})
        assert response.json() == [{"id": 1, "name": "Managua"}]

    async def test_municipios_by_department_name(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/municipios", params={"departamento": "managua"})
        assert response.status_code == 200
        # Matches both "Managua" and "Managua Oficina"; names are distinct.
        assert response.json() == ["Ciudad Sandino", "Managua", "Tipitapa"]
        assert response.headers["cache-control"] == "public, max-age=300"

    async def test_municipios_by_department_id_and_query(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/municipios", params={"departamento_id": 2})
        assert response.json() == ["Nindirí"]

        response = await test_client.get("/api/catalogos/municipios", params={"departamento_id": 1, "q": "tipi"})
        assert response.json() == ["Tipitapa"]

    async def test_municipios_requires_department(self, test_client, catalog_data):
        response = await test_client.get("/api/catalogos/municipios")
        assert response.status_code == 400


@pytest.mark.integration
class TestCatalogCache:

    async def test_results_are_cached(self, test_client, catalog_data, fake_redis):
        response = await test_client.get("/api/catalogos/marcas")
        assert response.status_code == 200

        keys = [k for k in fake_redis.store if k.startswith("catalog:marcas:")]
        assert len(keys) == 1
        assert json.loads(fake_redis.store[keys[0]]) == ["HYUNDAI", "NISSAN", "TOYOTA"]

    async def test_cached_value_is_served(self, test_client, catalog_data, fake_redis):
        await test_client.get("/api/catalogos/marcas")
        key = next(k for k in fake_redis.store if k.startswith("catalog:marcas:"))
        fake_redis.store[key] = json.dumps(["SOLO-CACHE"]).encode()

        response = await test_client.get("/api/catalogos/marcas")
        assert response.json() == ["SOLO-CACHE"]
