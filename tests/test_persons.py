"""Legajos - Person and Source Record Tests"""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.factories import PersonFactory, SourceFactory, persist


@pytest.mark.asyncio
class TestPersons:
    """Test person CRUD."""

    async def test_create_person(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/persons",
            json={
                "identityNumber": "30111222",
                "firstName": " Juan ",
                "lastName": "Pérez",
                "birthdate": "1980-02-29",
                "notes": "",
            },
            headers=operator_headers,
        )
        assert response.status_code == 201
        person = response.json()["person"]
        assert person["firstName"] == "Juan"
        assert person["identityNumber"] == "30111222"
        assert person["notes"] is None
        assert person["nationality"] == "ARGENTINA"
        assert person["records"] == []

    async def test_duplicate_identity_number(self, client: AsyncClient, db_session, operator_headers):
        await persist(db_session, PersonFactory.create(identity_number="30111222"))

        response = await client.post(
            "/api/persons",
            json={"identityNumber": "30111222", "firstName": "Otro", "lastName": "Nombre"},
            headers=operator_headers,
        )
        assert response.status_code == 409
        assert response.json()["message"] == "El documento ya está registrado"

    async def test_update_person(self, client: AsyncClient, db_session, operator_headers):
        person = await persist(db_session, PersonFactory.create(identity_number="111"))
        response = await client.patch(
            f"/api/persons/{person.id}",
            json={"notes": "Visto en Rosario", "firstName": ""},
            headers=operator_headers,
        )
        assert response.status_code == 200
        data = response.json()["person"]
        assert data["notes"] == "Visto en Rosario"
        assert data["firstName"] == person.first_name

    async def test_update_identity_conflict(self, client: AsyncClient, db_session, operator_headers):
        first, second = await persist(
            db_session,
            PersonFactory.create(identity_number="111"),
            PersonFactory.create(identity_number="222"),
        )
        response = await client.patch(
            f"/api/persons/{second.id}", json={"identityNumber": "111"}, headers=operator_headers
        )
        assert response.status_code == 409

    async def test_get_unknown_person(self, client: AsyncClient, consultant_headers):
        response = await client.get(f"/api/persons/{uuid4()}", headers=consultant_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "NotFound", "message": "Persona no encontrada"}

    async def test_consultant_cannot_create(self, client: AsyncClient, consultant_headers):
        response = await client.post(
            "/api/persons", json={"firstName": "A", "lastName": "B"}, headers=consultant_headers
        )
        assert response.status_code == 403


@pytest.mark.asyncio
class TestSourceRecords:
    """Test information collected from sources."""

    async def test_add_record(self, client: AsyncClient, db_session, operator_user, operator_headers):
        person, source = await persist(
            db_session, PersonFactory.create(), SourceFactory.create(name="Registro Civil")
        )
        person_id, source_id, operator_id = person.id, source.id, operator_user.id

        response = await client.post(
            f"/api/persons/{person_id}/sources",
            json={
                "sourceId": str(source_id),
                "collectedAt": "2024-03-01T13:00:00-03:00",
                "rawPayload": {"domicilio": "Calle 1"},
                "summary": "Domicilio actualizado",
            },
            headers=operator_headers,
        )
        assert response.status_code == 201
        record = response.json()["record"]
        assert record["personId"] == str(person_id)
        assert record["collectedById"] == str(operator_id)
        assert record["collectedAt"].startswith("2024-03-01T16:00:00")
        assert record["rawPayload"] == {"domicilio": "Calle 1"}

        detail = await client.get(f"/api/persons/{person_id}", headers=operator_headers)
        records = detail.json()["person"]["records"]
        assert len(records) == 1
        assert records[0]["source"]["name"] == "Registro Civil"
        assert records[0]["collectedBy"]["email"] == "operator@example.com"

    async def test_list_limits_records(self, client: AsyncClient, db_session, operator_headers):
        person, source = await persist(db_session, PersonFactory.create(), SourceFactory.create())
        person_id, source_id = person.id, source.id
        for day in range(1, 8):
            response = await client.post(
                f"/api/persons/{person_id}/sources",
                json={"sourceId": str(source_id), "collectedAt": f"2024-01-0{day}T00:00:00"},
                headers=operator_headers,
            )
            assert response.status_code == 201

        listed = await client.get("/api/persons", headers=operator_headers)
        records = listed.json()["persons"][0]["records"]
        assert len(records) == 5
        assert records[0]["collectedAt"].startswith("2024-01-07")

        detail = await client.get(f"/api/persons/{person_id}", headers=operator_headers)
        assert len(detail.json()["person"]["records"]) == 7

    async def test_unknown_source(self, client: AsyncClient, db_session, operator_headers):
        person = await persist(db_session, PersonFactory.create())
        response = await client.post(
            f"/api/persons/{person.id}/sources",
            json={"sourceId": str(uuid4())},
            headers=operator_headers,
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Fuente no encontrada"

    async def test_unknown_person(self, client: AsyncClient, db_session, operator_headers):
        source = await persist(db_session, SourceFactory.create())
        response = await client.post(
            f"/api/persons/{uuid4()}/sources",
            json={"sourceId": str(source.id)},
            headers=operator_headers,
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Persona no encontrada"
