"""Tests for the stylist closure encoding of closed date reasons."""

import json
import logging

import pytest

from app.utils.closed_dates import (
    ENCODED_STYLIST_FLAG,
    STYLIST_REASON_META,
    DecodedReason,
    Err,
    Ok,
    decode_stylist_reason,
    encode_stylist_reason,
    normalize_closed_date_record,
    parse_stylist_reason,
)


class TestEncode:
    def test_envelope_fields(self):
        payload = json.loads(encode_stylist_reason("Congé", "stylist-42"))
        assert payload["type"] == STYLIST_REASON_META
        assert payload["version"] == 1
        assert payload["stylistId"] == "stylist-42"
        assert payload["label"] == "Congé"
        assert payload["encodedAt"].endswith("Z")

    def test_missing_reason_becomes_empty_label(self):
        payload = json.loads(encode_stylist_reason(None, "stylist-42"))
        assert payload["label"] == ""

    def test_keeps_accents_unescaped(self):
        assert "Congé" in encode_stylist_reason("Congé", "stylist-42")


class TestDecode:
    @pytest.mark.parametrize("text", ["Congé", "", "Formation {interne}", "  espaces  "])
    def test_round_trip(self, text):
        decoded = decode_stylist_reason(encode_stylist_reason(text, "stylist-42"))
        assert decoded == DecodedReason(stylist_id="stylist-42", label=text)

    def test_round_trip_without_reason(self):
        decoded = decode_stylist_reason(encode_stylist_reason(None, "stylist-42"))
        assert decoded == DecodedReason(stylist_id="stylist-42", label="")

    @pytest.mark.parametrize("value", ["Vacances d'été", "Fermé", "[1, 2]", "{ouvert"])
    def test_plain_text_is_not_a_payload(self, value):
        assert decode_stylist_reason(value) is None

    @pytest.mark.parametrize("value", [None, 42, {"stylistId": "x"}, ""])
    def test_non_string_values(self, value):
        assert decode_stylist_reason(value) is None

    def test_unterminated_json_returns_none(self):
        assert decode_stylist_reason("{not valid json") is None

    def test_invalid_json_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="app.utils.closed_dates"):
            assert decode_stylist_reason("{not valid json}") is None
        assert "Could not parse closed date reason" in caplog.text

    def test_surrounding_whitespace_is_ignored(self):
        value = "  " + encode_stylist_reason("Congé", "stylist-42") + "\n"
        assert decode_stylist_reason(value).stylist_id == "stylist-42"

    def test_accepts_payload_without_type_tag(self):
        decoded = decode_stylist_reason('{"stylistId": "stylist-7", "label": "Malade"}')
        assert decoded == DecodedReason(stylist_id="stylist-7", label="Malade")

    def test_accepts_type_tag_without_stylist(self):
        decoded = decode_stylist_reason(json.dumps({"type": STYLIST_REASON_META, "label": "x"}))
        assert decoded == DecodedReason(stylist_id=None, label="x")

    def test_rejects_unrelated_objects(self):
        assert decode_stylist_reason('{"note": "travaux"}') is None
        assert decode_stylist_reason("{}") is None

    def test_deeply_nested_json_returns_none(self, caplog):
        value = '{"a":' + "[" * 100000 + "]" * 100000 + "}"
        with caplog.at_level(logging.WARNING, logger="app.utils.closed_dates"):
            assert decode_stylist_reason(value) is None
        assert "Could not parse closed date reason" in caplog.text

    @pytest.mark.parametrize("stylist_id", [[], {}, ["stylist-1"], True, 3])
    def test_any_non_empty_stylist_marks_a_payload(self, stylist_id):
        decoded = decode_stylist_reason(json.dumps({"stylistId": stylist_id, "label": "Congé"}))
        assert decoded == DecodedReason(stylist_id=None, label="Congé")

    @pytest.mark.parametrize("stylist_id", [None, False, 0, 0.0, ""])
    def test_empty_stylist_without_type_tag_is_rejected(self, stylist_id):
        assert decode_stylist_reason(json.dumps({"stylistId": stylist_id, "label": "Congé"})) is None

    def test_nan_stylist_is_rejected(self):
        assert decode_stylist_reason('{"stylistId": NaN, "label": "Congé"}') is None

    def test_coerces_wrong_field_types(self):
        decoded = decode_stylist_reason(
            json.dumps({"type": STYLIST_REASON_META, "stylistId": 12, "label": ["a"]})
        )
        assert decoded == DecodedReason(stylist_id=None, label="")


class TestParse:
    def test_ok_carries_payload(self):
        result = parse_stylist_reason(encode_stylist_reason("Congé", "stylist-42"))
        assert isinstance(result, Ok)
        assert result.payload.version == 1

    def test_err_explains_plain_text(self):
        assert parse_stylist_reason("Fermé") == Err("plain text")


class TestNormalize:
    def test_recovers_stylist_from_reason(self):
        record = {"id": "1", "reason": encode_stylist_reason("Congé", "stylist-42"), "stylist_id": None}
        normalized = normalize_closed_date_record(record)
        assert normalized["reason"] == "Congé"
        assert normalized["stylist_id"] == "stylist-42"
        assert normalized[ENCODED_STYLIST_FLAG] is True

    def test_native_stylist_wins(self):
        record = {"reason": encode_stylist_reason("Congé", "stylist-42"), "stylist_id": "stylist-99"}
        normalized = normalize_closed_date_record(record)
        assert normalized["stylist_id"] == "stylist-99"
        assert normalized["reason"] == "Congé"

    def test_plain_reason_untouched(self):
        record = {"reason": "Vacances d'été", "stylist_id": None}
        assert normalize_closed_date_record(record) == record

    def test_none_passes_through(self):
        assert normalize_closed_date_record(None) is None

    def test_does_not_mutate_input(self):
        reason = encode_stylist_reason("Congé", "stylist-42")
        record = {"reason": reason}
        normalized = normalize_closed_date_record(record)
        assert record == {"reason": reason}
        assert normalized is not record

    def test_idempotent(self):
        record = {"id": "1", "reason": encode_stylist_reason("Congé", "stylist-42"), "stylist_id": None}
        once = normalize_closed_date_record(record)
        assert normalize_closed_date_record(once) == once

    def test_empty_label_gives_empty_reason(self):
        normalized = normalize_closed_date_record({"reason": encode_stylist_reason(None, "stylist-42")})
        assert normalized["reason"] == ""
        assert normalized["stylist_id"] == "stylist-42"

    def test_payload_shaped_label_unwraps_one_level_per_pass(self):
        # A label that is itself an envelope is only decoded on the next pass,
        # so normalization is idempotent for plain labels only.
        inner = encode_stylist_reason("Congé", "stylist-1")
        record = {"reason": encode_stylist_reason(inner, "stylist-2"), "stylist_id": None}

        once = normalize_closed_date_record(record)
        twice = normalize_closed_date_record(once)

        assert once["reason"] == inner
        assert once["stylist_id"] == "stylist-2"
        assert twice["reason"] == "Congé"
        assert twice["stylist_id"] == "stylist-2"
        assert normalize_closed_date_record(twice) == twice
