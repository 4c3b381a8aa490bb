"""Legajos - Normalization and Formatting Unit Tests"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from core.contacts import (
    clean_text,
    legacy_address,
    parse_value_entries,
    principal_address,
    sanitize_additional_info,
    sanitize_addresses,
    sanitize_emails,
    sanitize_social_networks,
)
from core.database.models import Case, Recompensa
from core.export import EntryNames, bundle_file_name
from core.formatting import (
    case_file_base_name,
    compute_age,
    estado_label,
    format_enum,
    reward_summary,
)
from core.security import (
    document_validator,
    generate_storage_name,
    guess_extension,
    photo_validator,
    safe_join,
    sanitize_archive_name,
)


@pytest.mark.unit
class TestContacts:
    """Sanitizers for the person's contact sub-documents."""

    def test_clean_text(self):
        assert clean_text("  hola  ") == "hola"
        assert clean_text("   ") is None
        assert clean_text(None) is None
        assert clean_text("abcdef", 3) == "abc"

    def test_none_means_not_provided(self):
        assert sanitize_emails(None) is None
        assert sanitize_addresses(None) is None
        assert sanitize_emails([]) == []

    def test_emails_lowercased_and_filtered(self):
        assert sanitize_emails([{"value": " A@B.COM "}, {"value": ""}, "c@d.com"]) == [
            {"value": "a@b.com"},
            {"value": "c@d.com"},
        ]

    def test_social_networks_need_both_parts(self):
        result = sanitize_social_networks(
            [{"network": "Instagram", "handle": "@x"}, {"network": "X"}, {"handle": "@y"}]
        )
        assert result == [{"network": "Instagram", "handle": "@x"}]

    def test_addresses_drop_blank_rows(self):
        result = sanitize_addresses([{"street": " "}, {"locality": "Rosario", "is_principal": 1}])
        assert result == [
            {
                "street": None,
                "street_number": None,
                "province": None,
                "locality": "Rosario",
                "reference": None,
                "is_principal": True,
            }
        ]

    def test_additional_info_truncated(self):
        result = sanitize_additional_info([{"label": "L" * 200, "value": "v"}, {"label": "x", "value": ""}])
        assert len(result) == 1
        assert len(result[0]["label"]) == 120

    def test_legacy_address(self):
        assert legacy_address() == []
        assert legacy_address(street="Mitre")[0]["is_principal"] is True

    def test_principal_address(self):
        first = {"street": "A", "is_principal": False}
        second = {"street": "B", "is_principal": True}
        assert principal_address([first, second]) is second
        assert principal_address([first]) is first
        assert principal_address([]) is None

    def test_parse_tolerates_malformed_storage(self):
        assert parse_value_entries("not a list", 50) == []
        assert parse_value_entries([{"value": "1"}, 3, None, "2"], 50) == [{"value": "1"}, {"value": "2"}]


@pytest.mark.unit
class TestFormatting:
    def test_compute_age(self):
        today = date(2024, 6, 15)
        assert compute_age(date(2000, 6, 15), today) == 24
        assert compute_age(date(2000, 6, 16), today) == 23
        assert compute_age(date(2030, 1, 1), today) == 0
        assert compute_age(None, today) is None

    def test_case_file_base_name(self):
        assert case_file_base_name("José Pérez") == "LEGAJO JOSE PEREZ"
        assert case_file_base_name("  O'Brien,  Ana ") == "LEGAJO O BRIEN ANA"
        assert case_file_base_name("") == "LEGAJO SIN PERSONA"
        assert case_file_base_name(None) == "LEGAJO SIN PERSONA"

    def test_labels(self):
        assert estado_label("CAPTURA_VIGENTE") == "Captura vigente"
        assert estado_label(None) == "—"
        assert format_enum("SIN_DATO") == "SIN DATO"

    def test_reward_summary(self):
        assert reward_summary(Case(recompensa=Recompensa.NO)) == "No"
        assert reward_summary(Case(recompensa=Recompensa.SI)) == "Monto no confirmado"
        assert reward_summary(Case(recompensa=Recompensa.SI, reward_amount=Decimal("10"))) == "10.00"


@pytest.mark.unit
class TestArchiveNames:
    def test_entry_names_suffix_collisions(self):
        names = EntryNames()
        assert names.reserve("root/foto.png") == "root/foto.png"
        assert names.reserve("root/foto.png") == "root/foto_1.png"
        assert names.reserve("root/foto.png") == "root/foto_2.png"
        assert names.reserve("LEGAJO.zip") == "LEGAJO.zip"
        assert names.reserve("LEGAJO.zip") == "LEGAJO_1.zip"
        assert names.reserve("README") == "README"
        assert names.reserve("README") == "README_1"

    def test_bundle_file_name(self):
        now = datetime(2024, 5, 1, 12, 30, 5)
        assert bundle_file_name(None, now) == "CASOS_TODOS_2024-05-01T12-30-05.zip"
        assert bundle_file_name("DETENIDO", now) == "CASOS_DETENIDO_2024-05-01T12-30-05.zip"

    def test_sanitize_archive_name(self):
        assert sanitize_archive_name("Acta Número 1.pdf") == "Acta_Numero_1.pdf"
        assert sanitize_archive_name("../../etc/passwd") == "passwd"
        assert sanitize_archive_name("__a  b__.txt") == "a_b_.txt"


@pytest.mark.unit
class TestUploadSecurity:
    def test_photo_validator(self):
        assert photo_validator.validate("a.png", "image/png", 10) == (True, None)
        assert photo_validator.validate("a.pdf", "application/pdf", 10)[0] is False
        assert photo_validator.validate("a.png", None, 10)[0] is False
        assert photo_validator.validate("a.png", "image/png", photo_validator.max_size + 1)[0] is False

    def test_document_validator(self):
        assert document_validator.validate("a.pdf", "application/pdf", 10) == (True, None)
        assert document_validator.validate("a.jpg", "image/jpeg", 10) == (True, None)
        assert document_validator.validate("a.zip", "application/zip", 10)[0] is False

    def test_extensions(self):
        assert guess_extension("Foto.JPG", "image/jpeg") == ".jpg"
        assert guess_extension("sin_extension", "image/png") == ".png"
        assert guess_extension(None, None) == ".bin"
        assert generate_storage_name("x.pdf").endswith(".pdf")
        assert generate_storage_name("x.pdf") != generate_storage_name("x.pdf")

    def test_safe_join(self, tmp_path):
        assert safe_join(str(tmp_path), "cases/a.png").startswith(str(tmp_path))
        with pytest.raises(ValueError):
            safe_join(str(tmp_path), "../fuera.txt")
