import math

import pytest

from flight_telemetry.log_store import LogStore
from flight_telemetry.parsing import (
    LiveReadingError,
    gps_datetime,
    in_altitude_band,
    is_valid_reading,
    normalize_direction,
    parse_float,
    parse_float_or_zero,
    parse_live_reading,
    parse_log_line,
    parse_log_text,
    parse_sounding_text,
)

SOUNDING_HEADER = "h(mAMSL) T(°C) Spd(kt) RH(%) Dir(°) p(hPa) Dew(°C)"


class TestParseFloat:
    def test_leading_literal(self):
        assert parse_float("12.5m") == 12.5
        assert parse_float("  -3e2 ") == -300.0
        assert parse_float(".5") == 0.5
        assert parse_float(7) == 7.0

    def test_not_a_number(self):
        assert math.isnan(parse_float("abc"))
        assert math.isnan(parse_float(""))
        assert math.isnan(parse_float(None))
        assert math.isnan(parse_float(True))

    def test_or_zero(self):
        assert parse_float_or_zero("x") == 0.0
        assert parse_float_or_zero("4.25") == 4.25


class TestLogParsing:
    def test_full_record(self):
        record = parse_log_line(
            '{"Runtime": "12.5", "Baro_Alt_m": "300.2", "VAR_Kal_m_s": "1.1", "meanACC_Kal_m_s2": "0.02", '
            '"HDG_deg": "270", "GS_kt": "5", "Envelope_Temp_Deg": "80", "varioVar_m_s": "0.3", '
            '"Date": "2025-05-04", "Time": "10:11:12"}'
        )
        assert record.runtime == 12.5
        assert record.baro_altitude == 300.2
        assert record.heading == 270.0
        assert record.humidity_proxy == 0.3
        assert record.to_reading().timestamp == "2025-05-04 10:11:12"

    def test_other_fields_default_to_zero(self):
        record = parse_log_line('{"Runtime": 1, "Baro_Alt_m": 2, "GS_kt": "fast"}')
        assert record.ground_speed == 0.0
        assert record.vertical_speed == 0.0
        assert record.date == ""

    @pytest.mark.parametrize("line", [
        '{"Runtime": "n/a", "Baro_Alt_m": "100"}',
        '{"Runtime": "1", "Baro_Alt_m": ""}',
        '{"Baro_Alt_m": "100"}',
        'not json at all',
        '[1, 2, 3]',
    ])
    def test_malformed_records_dropped(self, line):
        assert parse_log_line(line) is None

    def test_text_skips_blank_lines(self):
        text = '{"Runtime": 2, "Baro_Alt_m": 1}\n\n   \n{"Runtime": 1, "Baro_Alt_m": 1}\n'
        assert [r.runtime for r in parse_log_text(text)] == [2.0, 1.0]

    def test_store_sorted_and_stable(self):
        text = "\n".join([
            '{"Runtime": 3, "Baro_Alt_m": 1, "Time": "a"}',
            '{"Runtime": 1, "Baro_Alt_m": 1, "Time": "b"}',
            '{"Runtime": "bad", "Baro_Alt_m": 1, "Time": "x"}',
            '{"Runtime": 3, "Baro_Alt_m": 1, "Time": "c"}',
            '{"Runtime": 2, "Baro_Alt_m": 1, "Time": "d"}',
        ])
        store = LogStore.empty().with_log_text(text)
        assert [r.runtime for r in store.records] == [1.0, 2.0, 3.0, 3.0]
        assert [r.time for r in store.records] == ["b", "d", "a", "c"]
        assert all(not math.isnan(r.runtime) and not math.isnan(r.baro_altitude) for r in store.records)
        assert store.start_runtime == 1.0


class TestSoundingParsing:
    def test_headers_mapped_and_direction_rotated(self):
        text = f"{SOUNDING_HEADER}\n500 12.0 10 60 270 950 4.0\n"
        (sample,) = parse_sounding_text(text)
        assert sample.altitude == 500.0
        assert sample.temperature == 12.0
        assert sample.speed == 10.0
        assert sample.humidity == 60.0
        assert sample.direction == 90.0
        assert sample.pressure == 950.0
        assert sample.dew_point == 4.0

    @pytest.mark.parametrize("wind_from, heading", [
        (0, 180.0), (90, 270.0), (180, 0.0), (359, 179.0), (-200, 340.0), (540, 0.0),
    ])
    def test_direction_in_range(self, wind_from, heading):
        assert normalize_direction(wind_from) == heading
        assert 0.0 <= normalize_direction(wind_from) < 360.0

    def test_column_count_mismatch_dropped(self):
        text = f"{SOUNDING_HEADER}\n500 12.0 10 60 270 950\n600 11.0 12 55 260 940 3.0\n"
        samples = parse_sounding_text(text)
        assert [s.altitude for s in samples] == [600.0]

    def test_altitude_band(self):
        text = f"{SOUNDING_HEADER}\n-10 1 1 1 1 1 1\n0 1 1 1 1 1 1\n1500 1 1 1 1 1 1\n1501 1 1 1 1 1 1\n"
        assert [s.altitude for s in parse_sounding_text(text)] == [0.0, 1500.0]

    def test_non_numeric_field_keeps_raw_text(self):
        # Legacy behaviour: the row is kept and the column holds its text
        text = f"{SOUNDING_HEADER}\n800 n/a 10 60 calm 920 2.0\n"
        (sample,) = parse_sounding_text(text)
        assert sample.temperature == "n/a"
        assert sample.direction == "calm"
        assert sample.speed == 10.0

    def test_non_numeric_altitude_dropped(self):
        text = f"{SOUNDING_HEADER}\nhigh 1 1 1 1 1 1\n"
        assert parse_sounding_text(text) == []

    def test_unknown_header_passes_through(self):
        text = "h(mAMSL) Cloud Dir(°)\n300 low 10\n"
        (sample,) = parse_sounding_text(text)
        assert sample.get("Cloud") == "low"
        assert sample.get("direction") == 190.0

    def test_empty_text(self):
        assert parse_sounding_text("") == []


class TestLiveParsing:
    PAYLOAD = (
        '{"calt": "523.4", "cvario": "-0.8", "cacc": "0.012", "gpsAngle": "181.5", "gpsSpeed": "4.4", '
        '"tbt": "17.2", "lbc": "63", "gpsYear": "25", "gpsMon": "5", "gpsDay": "04", '
        '"gpsStd": "9", "gpsMin": "3", "gpsSek": "7"}'
    )

    def test_fields(self):
        reading = parse_live_reading(self.PAYLOAD)
        assert reading.altitude == 523.4
        assert reading.vertical_speed == -0.8
        assert reading.acceleration == 0.012
        assert reading.direction == 181.5
        assert reading.speed == 4.4
        assert reading.temperature == 17.2
        assert reading.humidity == 63.0
        assert reading.timestamp == "2025-05-04 09:03:07"
        assert is_valid_reading(reading)

    def test_non_numeric_fields_read_as_zero(self):
        reading = parse_live_reading('{"calt": "12", "cvario": "--", "tbt": null}')
        assert reading.vertical_speed == 0.0
        assert reading.temperature == 0.0

    def test_out_of_band_altitude_is_not_valid(self):
        assert not is_valid_reading(parse_live_reading('{"calt": "2000"}'))
        assert not is_valid_reading(parse_live_reading('{"calt": "-1"}'))

    @pytest.mark.parametrize("body", ["<html>", "[1]", ""])
    def test_malformed_payload_raises(self, body):
        with pytest.raises(LiveReadingError):
            parse_live_reading(body)

    def test_gps_datetime_pads_subfields(self):
        assert gps_datetime({"gpsYear": "5", "gpsMon": "1", "gpsDay": "2",
                             "gpsStd": "3", "gpsMin": "4", "gpsSek": "5"}) == "2005-01-02 03:04:05"


def test_altitude_gate_bounds():
    assert in_altitude_band(0)
    assert in_altitude_band(1500)
    assert not in_altitude_band(1500.01)
    assert not in_altitude_band(float("nan"))
    assert not in_altitude_band("500")
