import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from pimonitor_telemetry.codec import RECORD_PREFIX, decode_record, encode_record, extract_field
from pimonitor_telemetry.models import MemoryInfo, TelemetryRecord


def _record() -> TelemetryRecord:
    return TelemetryRecord.build(
        timestamp_ns=1_700_000_000_123_456_789,
        uptime_sec=12345.67,
        temp_c=48.31,
        usage_pct=23.4,
        memory=MemoryInfo(total_kb=948000, free_kb=120000, available_kb=600000),
    )


class EncodeTests(unittest.TestCase):
    def test_exact_wire_shape(self):
        line = encode_record(_record())
        self.assertEqual(
            line,
            '{"timestamp":1700000000.123456789,"uptime_sec":12345.67,'
            '"cpu":{"temp_c":48.31,"usage_pct":23.4},'
            '"memory":{"total_kb":948000,"free_kb":120000,"available_kb":600000,"used_pct":36.7}}\n',
        )
        self.assertTrue(line.startswith(RECORD_PREFIX))
        self.assertEqual(line.count("\n"), 1)

    def test_nanoseconds_are_zero_padded(self):
        rec = TelemetryRecord.build(5_000_000_042, 1.0, 40.0, 1.0, MemoryInfo())
        self.assertTrue(encode_record(rec).startswith('{"timestamp":5.000000042,'))

    def test_sentinels_serialize(self):
        rec = TelemetryRecord.build(1_000_000_000, 0.0, -1.0, -1.0, MemoryInfo())
        data = json.loads(encode_record(rec))
        self.assertEqual(data["cpu"]["temp_c"], -1.0)
        self.assertEqual(data["cpu"]["usage_pct"], -1.0)
        self.assertEqual(data["memory"]["used_pct"], 0.0)


class DecodeTests(unittest.TestCase):
    def test_round_trip(self):
        original = _record()
        decoded = decode_record(encode_record(original))
        self.assertEqual(decoded.timestamp_sec, 1_700_000_000)
        self.assertEqual(decoded.timestamp_nsec, 123_456_789)
        self.assertAlmostEqual(decoded.uptime_sec, original.uptime_sec, places=2)
        self.assertAlmostEqual(decoded.temp_c, original.temp_c, places=2)
        self.assertAlmostEqual(decoded.usage_pct, original.usage_pct, places=1)
        self.assertEqual(decoded.memory, original.memory)
        self.assertAlmostEqual(decoded.used_pct, original.used_pct, places=1)

    def test_truncated_line_falls_back_to_field_scan(self):
        line = encode_record(_record())
        cut = line[: line.index('"memory"')]
        decoded = decode_record(cut)
        self.assertEqual(decoded.timestamp_sec, 1_700_000_000)
        self.assertAlmostEqual(decoded.usage_pct, 23.4)
        self.assertAlmostEqual(decoded.temp_c, 48.31)
        self.assertEqual(decoded.total_kb, 0)
        self.assertEqual(decoded.available_kb, 0)
        self.assertEqual(decoded.used_pct, 0.0)

    def test_missing_keys_in_valid_json_read_as_zero(self):
        decoded = decode_record('{"timestamp":1.0,"uptime_sec":5.0,"cpu":{"temp_c":40.5,"usage_pct":12.0}}')
        self.assertEqual(decoded.timestamp_sec, 1)
        self.assertEqual(decoded.uptime_sec, 5.0)
        self.assertEqual(decoded.total_kb, 0)
        self.assertEqual(decoded.used_pct, 0.0)

    def test_flat_keys_are_accepted(self):
        decoded = decode_record('{"timestamp":2.5,"total_kb":2048,"usage_pct":7.5}')
        self.assertEqual(decoded.timestamp_sec, 2)
        self.assertEqual(decoded.timestamp_nsec, 500_000_000)
        self.assertEqual(decoded.total_kb, 2048)
        self.assertEqual(decoded.usage_pct, 7.5)

    def test_non_numeric_values_read_as_zero(self):
        decoded = decode_record('{"timestamp":1.0,"uptime_sec":"soon","cpu":{"temp_c":null}}')
        self.assertEqual(decoded.uptime_sec, 0.0)
        self.assertEqual(decoded.temp_c, 0.0)

    def test_special_number_strings_read_as_zero(self):
        decoded = decode_record('{"timestamp":1.0,"memory":{"total_kb":"NaN","free_kb":"sNaN","available_kb":"-Infinity"}}')
        self.assertEqual(decoded.memory, MemoryInfo())
        decoded = decode_record('{"timestamp":"Infinity","uptime_sec":5.0}')
        self.assertEqual((decoded.timestamp_sec, decoded.timestamp_nsec), (0, 0))
        self.assertEqual(decoded.uptime_sec, 5.0)

    def test_out_of_range_values_read_as_zero(self):
        decoded = decode_record('{"timestamp":1.0,"uptime_sec":1e999')
        self.assertEqual(decoded.uptime_sec, 0.0)
        decoded = decode_record('{"timestamp":1.0,"uptime_sec":1e999,"memory":{"total_kb":1e999999999}}')
        self.assertEqual(decoded.uptime_sec, 0.0)
        self.assertEqual(decoded.total_kb, 0)

    def test_negative_timestamp_reads_as_zero(self):
        decoded = decode_record('{"timestamp":-1.5,"uptime_sec":5.0}')
        self.assertEqual((decoded.timestamp_sec, decoded.timestamp_nsec), (0, 0))


class ExtractFieldTests(unittest.TestCase):
    def test_value_after_key(self):
        line = '{"timestamp":1.0,"cpu":{"temp_c":-1.00,"usage_pct":55.5}'
        self.assertEqual(extract_field(line, "temp_c"), -1.0)
        self.assertEqual(extract_field(line, "usage_pct"), 55.5)

    def test_absent_key(self):
        self.assertEqual(extract_field('{"timestamp":1.0', "free_kb"), 0.0)

    def test_key_without_number(self):
        self.assertEqual(extract_field('{"timestamp":1.0,"free_kb":', "free_kb"), 0.0)


if __name__ == "__main__":
    unittest.main()
