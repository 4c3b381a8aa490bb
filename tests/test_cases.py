"""Legajos - Case Tests

Covers the case/person upsert, reward rules, contact normalization and
listing order.
"""

import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

import pytest
from httpx import AsyncClient

from api.schemas.cases import PersonaInput
from core.database.models import EstadoRequerimiento, MediaKind, Person, Recompensa
from tests.factories import CaseFactory, MediaFactory, PersonFactory, persist


def case_payload(**overrides) -> dict:
    payload = {
        "numeroCausa": "FSM 123/2024",
        "caratula": "Pérez, Juan s/ homicidio",
        "delito": "Homicidio",
        "jurisdiccion": "FEDERAL",
        "fuerzaAsignada": "PFA",
        "persona": {"firstName": "Juan", "lastName": "Pérez"},
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
class TestCreateCase:
    """Test case creation with its embedded person."""

    async def test_create_with_defaults(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases",
            json={"persona": {"firstName": "Juan", "lastName": "Pérez"}},
            headers=operator_headers,
        )
        assert response.status_code == 201
        case = response.json()["case"]
        assert case["estadoRequerimiento"] == "CAPTURA_VIGENTE"
        assert case["jurisdiccion"] == "SIN_DATO"
        assert case["fuerzaAsignada"] == "S/D"
        assert case["recompensa"] == "SIN_DATO"
        assert case["rewardAmount"] is None
        assert case["rewardAmountStatus"] is None
        assert case["photos"] == [] and case["documents"] == []
        assert case["persona"]["firstName"] == "Juan"
        assert case["persona"]["nationality"] == "ARGENTINA"

    async def test_reward_amount_required(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases", json=case_payload(recompensa="SI"), headers=operator_headers
        )
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "ValidationError"
        assert any(d["message"] == "Indica el monto de la recompensa" for d in data["details"])

    async def test_reward_amount_unknown(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases",
            json=case_payload(recompensa="SI", rewardAmountStatus="UNKNOWN"),
            headers=operator_headers,
        )
        assert response.status_code == 201
        case = response.json()["case"]
        assert case["rewardAmount"] is None
        assert case["rewardAmountStatus"] == "UNKNOWN"

    async def test_reward_amount_known(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases",
            json=case_payload(recompensa="SI", rewardAmount=1500000.5),
            headers=operator_headers,
        )
        assert response.status_code == 201
        case = response.json()["case"]
        assert case["rewardAmount"] == "1500000.50"
        assert case["rewardAmountStatus"] == "KNOWN"

    async def test_reward_amount_ignored_without_reward(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases",
            json=case_payload(recompensa="NO", rewardAmount="1000"),
            headers=operator_headers,
        )
        assert response.status_code == 201
        assert response.json()["case"]["rewardAmount"] is None

    async def test_reward_amount_precision(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases",
            json=case_payload(recompensa="SI", rewardAmount="10.123"),
            headers=operator_headers,
        )
        assert response.status_code == 400
        detail = response.json()["details"][0]
        assert detail["path"] == "rewardAmount"
        assert detail["message"] == "Monto inválido (máx 2 decimales)"

    async def test_other_nationality_required(self, client: AsyncClient, operator_headers):
        payload = case_payload()
        payload["persona"]["nationality"] = "OTRO"
        response = await client.post("/api/cases", json=payload, headers=operator_headers)
        assert response.status_code == 400
        assert any(d["message"] == "Especifica la nacionalidad" for d in response.json()["details"])

    async def test_person_names_required(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases", json=case_payload(persona={"firstName": "Juan"}), headers=operator_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Nombre y apellido son obligatorios"

    async def test_unknown_person_id(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases",
            json=case_payload(persona={"personId": str(uuid4())}),
            headers=operator_headers,
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Persona no encontrada"

    async def test_reuses_person_by_identity_number(self, client: AsyncClient, db_session, operator_headers):
        person = await persist(db_session, PersonFactory.create(identity_number="30111222"))
        person_id = str(person.id)

        response = await client.post(
            "/api/cases",
            json=case_payload(
                persona={"firstName": "Juan Carlos", "lastName": "Pérez", "identityNumber": "30111222"}
            ),
            headers=operator_headers,
        )
        assert response.status_code == 201
        persona = response.json()["case"]["persona"]
        assert persona["id"] == person_id
        assert persona["firstName"] == "Juan Carlos"

    async def test_consultant_cannot_create(self, client: AsyncClient, consultant_headers):
        response = await client.post("/api/cases", json=case_payload(), headers=consultant_headers)
        assert response.status_code == 403


@pytest.mark.asyncio
class TestPersonContacts:
    """Test contact lists, mirrors and legacy single-value fields."""

    async def test_lists_are_cleaned_in_order(self, client: AsyncClient, operator_headers):
        persona = {
            "firstName": "Juan",
            "lastName": "Pérez",
            "emails": [{"value": " Juan@Mail.com "}, {"value": ""}, {"value": "otro@mail.com"}],
            "phones": [{"value": "11-5555-0000"}, {"value": "   "}],
            "socialNetworks": [
                {"network": "Instagram", "handle": "@juanp"},
                {"network": "X", "handle": ""},
            ],
            "addresses": [
                {"street": "Av. Siempreviva", "streetNumber": "742"},
                {"street": "Mitre", "province": "Santa Fe", "isPrincipal": True},
                {"street": "", "locality": ""},
            ],
        }
        response = await client.post(
            "/api/cases", json=case_payload(persona=persona), headers=operator_headers
        )
        assert response.status_code == 201
        data = response.json()["case"]["persona"]
        assert data["emails"] == [{"value": "juan@mail.com"}, {"value": "otro@mail.com"}]
        assert data["email"] == "juan@mail.com"
        assert data["phones"] == [{"value": "11-5555-0000"}]
        assert data["phone"] == "11-5555-0000"
        assert data["socialNetworks"] == [{"network": "Instagram", "handle": "@juanp"}]
        assert [a["street"] for a in data["addresses"]] == ["Av. Siempreviva", "Mitre"]
        # Mirrors follow the principal address
        assert data["street"] == "Mitre"
        assert data["province"] == "Santa Fe"

    async def test_legacy_single_values(self, client: AsyncClient, operator_headers):
        persona = {
            "firstName": "Juan",
            "lastName": "Pérez",
            "email": "legacy@mail.com",
            "phone": "4444-1111",
            "street": "Belgrano",
            "streetNumber": "100",
            "locality": "Rosario",
        }
        response = await client.post(
            "/api/cases", json=case_payload(persona=persona), headers=operator_headers
        )
        data = response.json()["case"]["persona"]
        assert data["emails"] == [{"value": "legacy@mail.com"}]
        assert data["phones"] == [{"value": "4444-1111"}]
        assert len(data["addresses"]) == 1
        assert data["addresses"][0]["isPrincipal"] is True
        assert data["street"] == "Belgrano"
        assert data["locality"] == "Rosario"

    async def test_list_wins_over_legacy_value(self, client: AsyncClient, operator_headers):
        persona = {
            "firstName": "Juan",
            "lastName": "Pérez",
            "email": "legacy@mail.com",
            "emails": [{"value": "lista@mail.com"}],
        }
        response = await client.post(
            "/api/cases", json=case_payload(persona=persona), headers=operator_headers
        )
        assert response.json()["case"]["persona"]["emails"] == [{"value": "lista@mail.com"}]

    async def test_additional_info(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/cases",
            json=case_payload(
                additionalInfo=[
                    {"label": "Alias", "value": "El Tano"},
                    {"label": "Tatuajes", "value": ""},
                ]
            ),
            headers=operator_headers,
        )
        assert response.json()["case"]["additionalInfo"] == [{"label": "Alias", "value": "El Tano"}]

    async def test_age_is_computed(self, client: AsyncClient, operator_headers):
        persona = {"firstName": "Juan", "lastName": "Pérez", "birthdate": "2000-01-01"}
        response = await client.post(
            "/api/cases", json=case_payload(persona=persona), headers=operator_headers
        )
        data = response.json()["case"]["persona"]
        assert data["birthdate"] == "2000-01-01"
        assert data["age"] >= 24


@pytest.mark.asyncio
class TestListAndGetCases:
    async def test_list_order(self, client: AsyncClient, db_session, consultant_headers):
        await persist(
            db_session,
            CaseFactory.create(caratula="sin prioridad", creado_en=datetime(2024, 1, 3)),
            CaseFactory.create(caratula="prioridad baja", priority_value=1, creado_en=datetime(2024, 1, 1)),
            CaseFactory.create(caratula="prioridad alta", priority_value=5, creado_en=datetime(2024, 1, 2)),
            CaseFactory.create(caratula="sin prioridad vieja", creado_en=datetime(2023, 6, 1)),
        )

        response = await client.get("/api/cases", headers=consultant_headers)
        assert response.status_code == 200
        assert [c["caratula"] for c in response.json()["cases"]] == [
            "prioridad alta",
            "prioridad baja",
            "sin prioridad",
            "sin prioridad vieja",
        ]

    async def test_filter_by_estado(self, client: AsyncClient, db_session, consultant_headers):
        await persist(
            db_session,
            CaseFactory.create(caratula="vigente"),
            CaseFactory.create(caratula="detenido", estado=EstadoRequerimiento.DETENIDO),
        )
        response = await client.get("/api/cases?estado=DETENIDO", headers=consultant_headers)
        assert [c["caratula"] for c in response.json()["cases"]] == ["detenido"]

    async def test_filter_rejects_unknown_estado(self, client: AsyncClient, consultant_headers):
        response = await client.get("/api/cases?estado=PERDIDO", headers=consultant_headers)
        assert response.status_code == 400

    async def test_get_case(self, client: AsyncClient, db_session, consultant_headers):
        person = PersonFactory.create(
            first_name="María",
            addresses=[{"street": "San Martín", "street_number": "50", "is_principal": True}],
        )
        case = CaseFactory.create(
            person=person, recompensa=Recompensa.SI, reward_amount=Decimal("2500.00")
        )
        await persist(db_session, person, case)

        response = await client.get(f"/api/cases/{case.id}", headers=consultant_headers)
        assert response.status_code == 200
        data = response.json()["case"]
        assert data["rewardAmount"] == "2500.00"
        assert data["persona"]["firstName"] == "María"
        assert data["persona"]["street"] == "San Martín"

    async def test_get_unknown_case(self, client: AsyncClient, consultant_headers):
        response = await client.get(f"/api/cases/{uuid4()}", headers=consultant_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "NotFound", "message": "Caso no encontrado"}

    async def test_list_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/cases")
        assert response.status_code == 401


@pytest.mark.asyncio
class TestUpdateCase:
    async def _create(self, client: AsyncClient, headers: dict, **overrides) -> dict:
        response = await client.post("/api/cases", json=case_payload(**overrides), headers=headers)
        assert response.status_code == 201
        return response.json()["case"]

    async def test_empty_update_rejected(self, client: AsyncClient, operator_headers):
        case = await self._create(client, operator_headers)
        response = await client.patch(f"/api/cases/{case['id']}", json={}, headers=operator_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No hay cambios para aplicar"

    async def test_update_fields(self, client: AsyncClient, operator_headers):
        case = await self._create(client, operator_headers)
        response = await client.patch(
            f"/api/cases/{case['id']}",
            json={"estadoRequerimiento": "DETENIDO", "delito": "", "priorityValue": 3},
            headers=operator_headers,
        )
        assert response.status_code == 200
        updated = response.json()["case"]
        assert updated["estadoRequerimiento"] == "DETENIDO"
        assert updated["delito"] is None
        assert updated["priorityValue"] == 3
        assert updated["caratula"] == case["caratula"]
        assert updated["persona"]["id"] == case["persona"]["id"]

    async def test_update_persona_keeps_person(self, client: AsyncClient, operator_headers):
        case = await self._create(client, operator_headers)
        response = await client.patch(
            f"/api/cases/{case['id']}",
            json={"persona": {"phones": [{"value": "351-000"}], "notes": "Prófugo"}},
            headers=operator_headers,
        )
        assert response.status_code == 200
        persona = response.json()["case"]["persona"]
        assert persona["id"] == case["persona"]["id"]
        assert persona["firstName"] == "Juan"
        assert persona["phone"] == "351-000"
        assert persona["notes"] == "Prófugo"

    async def test_switch_to_other_person(self, client: AsyncClient, db_session, operator_headers):
        other = await persist(db_session, PersonFactory.create(first_name="Pedro"))
        other_id = str(other.id)
        case = await self._create(client, operator_headers)

        response = await client.patch(
            f"/api/cases/{case['id']}",
            json={"persona": {"personId": other_id}},
            headers=operator_headers,
        )
        persona = response.json()["case"]["persona"]
        assert persona["id"] == other_id
        assert persona["firstName"] == "Pedro"

    async def test_turning_reward_off_clears_amount(self, client: AsyncClient, operator_headers):
        case = await self._create(client, operator_headers, recompensa="SI", rewardAmount="500")
        assert case["rewardAmount"] == "500.00"

        response = await client.patch(
            f"/api/cases/{case['id']}", json={"recompensa": "NO"}, headers=operator_headers
        )
        updated = response.json()["case"]
        assert updated["recompensa"] == "NO"
        assert updated["rewardAmount"] is None
        assert updated["rewardAmountStatus"] is None

    async def test_mark_amount_unknown(self, client: AsyncClient, operator_headers):
        case = await self._create(client, operator_headers, recompensa="SI", rewardAmount="500")
        response = await client.patch(
            f"/api/cases/{case['id']}",
            json={"recompensa": "SI", "rewardAmountStatus": "UNKNOWN"},
            headers=operator_headers,
        )
        updated = response.json()["case"]
        assert updated["rewardAmount"] is None
        assert updated["rewardAmountStatus"] == "UNKNOWN"

    async def test_mark_amount_unknown_alone(self, client: AsyncClient, operator_headers):
        case = await self._create(client, operator_headers, recompensa="SI", rewardAmount="500")
        response = await client.patch(
            f"/api/cases/{case['id']}",
            json={"rewardAmountStatus": "UNKNOWN"},
            headers=operator_headers,
        )
        assert response.status_code == 200
        updated = response.json()["case"]
        assert updated["recompensa"] == "SI"
        assert updated["rewardAmount"] is None
        assert updated["rewardAmountStatus"] == "UNKNOWN"

    async def test_unknown_status_without_reward_is_no_change(self, client: AsyncClient, operator_headers):
        case = await self._create(client, operator_headers)
        response = await client.patch(
            f"/api/cases/{case['id']}",
            json={"rewardAmountStatus": "UNKNOWN"},
            headers=operator_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "No hay cambios para aplicar"

    async def test_update_unknown_case(self, client: AsyncClient, operator_headers):
        response = await client.patch(
            f"/api/cases/{uuid4()}", json={"delito": "Robo"}, headers=operator_headers
        )
        assert response.status_code == 404


@pytest.mark.asyncio
class TestDeleteCase:
    async def test_delete_removes_case_and_files(self, client: AsyncClient, operator_headers, storage):
        created = await client.post("/api/cases", json=case_payload(), headers=operator_headers)
        case_id = created.json()["case"]["id"]
        upload = await client.post(
            f"/api/cases/{case_id}/documents",
            files={"file": ("acta.pdf", b"%PDF-1.4 acta", "application/pdf")},
            headers=operator_headers,
        )
        assert upload.status_code == 201
        relative_path = upload.json()["document"]["url"].removeprefix("/uploads/")
        assert os.path.isfile(storage.absolute(relative_path))

        response = await client.delete(f"/api/cases/{case_id}", headers=operator_headers)
        assert response.status_code == 204
        assert not os.path.isfile(storage.absolute(relative_path))

        missing = await client.get(f"/api/cases/{case_id}", headers=operator_headers)
        assert missing.status_code == 404

    async def test_missing_files_are_ignored(self, client: AsyncClient, db_session, operator_headers):
        case = await persist(db_session, CaseFactory.create())
        case_id = case.id
        await persist(
            db_session,
            MediaFactory.create(case_id, is_primary=True),
            MediaFactory.create(case_id, kind=MediaKind.DOCUMENT),
        )

        response = await client.delete(f"/api/cases/{case_id}", headers=operator_headers)
        assert response.status_code == 204

    async def test_person_survives_case_deletion(self, client: AsyncClient, operator_headers):
        created = await client.post("/api/cases", json=case_payload(), headers=operator_headers)
        case = created.json()["case"]
        await client.delete(f"/api/cases/{case['id']}", headers=operator_headers)

        response = await client.get(f"/api/persons/{case['persona']['id']}", headers=operator_headers)
        assert response.status_code == 200


@pytest.mark.unit
class TestPersonaColumnWidths:
    """Persona length limits must fit the person table."""

    @pytest.mark.parametrize(
        "field",
        ["first_name", "last_name", "identity_number", "document_name", "other_nationality"],
    )
    def test_schema_limit_fits_column(self, field):
        limit = next(
            m.max_length for m in PersonaInput.model_fields[field].metadata if hasattr(m, "max_length")
        )
        assert Person.__table__.c[field].type.length == limit

    @pytest.mark.parametrize("field", ["document_name", "other_nationality"])
    def test_migration_matches_model(self, field):
        migration = Path(__file__).parent.parent / "migrations" / "versions" / "001_initial_schema.py"
        length = Person.__table__.c[field].type.length
        assert f"sa.Column('{field}', sa.String({length})" in migration.read_text(encoding="utf-8")
