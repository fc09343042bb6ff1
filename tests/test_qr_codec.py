import base64
import json
import unittest
from datetime import datetime, timezone

from hojaverde.qr.codec import (
    QRCodeData,
    create_qr_code_data,
    extract_qr_info,
    format_qr_code_info,
    generate_detailed_qr_code,
    generate_qr_code,
    get_product_id_from_qr,
    is_valid_qr_code,
    parse_detailed_qr_code,
    parse_qr_code,
    validate_qr_code_with_message,
)


def encode_payload(payload) -> str:
    return "HV-DATA-" + base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


class SimpleCodeTest(unittest.TestCase):
    def test_generated_code_shape(self):
        code = generate_qr_code(42)
        self.assertRegex(code, r"^HV-42-\d{13}-[0-9a-f]{8}$")

    def test_generated_codes_are_unique(self):
        codes = {generate_qr_code(7) for _ in range(200)}
        self.assertEqual(len(codes), 200)

    def test_parse_generated_code(self):
        code = generate_qr_code(42)
        parsed = parse_qr_code(code)
        self.assertEqual(parsed.product_id, 42)
        self.assertEqual(parsed.timestamp, int(code.split("-")[2]))

    def test_parse_accepts_extra_segments(self):
        parsed = parse_qr_code("HV-1-1700000000000-demo-extra")
        self.assertEqual(parsed, (1, 1700000000000))

    def test_parse_rejects_malformed(self):
        for code in [
            "",
            "HV-1-1700000000000",
            "XX-1-1700000000000-abcd",
            "hv-1-1700000000000-abcd",
            "HV-abc-1700000000000-abcd",
            "HV-1-later-abcd",
            "HV--1700000000000-abcd",
            "HV-DATA-eyJ9",
        ]:
            with self.subTest(code=code):
                self.assertIsNone(parse_qr_code(code))

    def test_parse_never_raises_on_non_string(self):
        self.assertIsNone(parse_qr_code(None))
        self.assertIsNone(parse_qr_code(12345))


class DetailedCodeTest(unittest.TestCase):
    def test_detailed_code_carries_metadata(self):
        code = generate_detailed_qr_code(5, "Café de altura", "Finca La Esperanza")
        self.assertTrue(code.startswith("HV-DATA-"))

        data = parse_detailed_qr_code(code)
        self.assertEqual(data.product_id, 5)
        self.assertEqual(data.product_name, "Café de altura")
        self.assertEqual(data.farm_name, "Finca La Esperanza")
        self.assertGreater(data.timestamp, 0)

    def test_payload_uses_camel_case_keys(self):
        code = generate_detailed_qr_code(5, "Miel", "Apiario Sol")
        raw = json.loads(base64.b64decode(code[len("HV-DATA-"):]))
        self.assertEqual(set(raw), {"productId", "productName", "farmName", "timestamp"})

    def test_parses_externally_encoded_payload(self):
        code = encode_payload({"productId": 9, "timestamp": 1700000000000, "farmName": "Granja"})
        data = parse_detailed_qr_code(code)
        self.assertEqual(data.product_id, 9)
        self.assertEqual(data.farm_name, "Granja")
        self.assertIsNone(data.product_name)

    def test_rejects_missing_or_zero_fields(self):
        for payload in [
            {"timestamp": 1700000000000},
            {"productId": 9},
            {"productId": 0, "timestamp": 1700000000000},
            {"productId": 9, "timestamp": 0},
        ]:
            with self.subTest(payload=payload):
                self.assertIsNone(parse_detailed_qr_code(encode_payload(payload)))

    def test_rejects_garbage(self):
        not_json = "HV-DATA-" + base64.b64encode(b"not json").decode("ascii")
        for code in ["HV-DATA-", "HV-DATA-%%%%", not_json, "HV-1-1700000000000-abcd"]:
            with self.subTest(code=code):
                self.assertIsNone(parse_detailed_qr_code(code))

    def test_create_qr_code_data(self):
        data = create_qr_code_data(3, "Quinua", "Chimborazo")
        self.assertIsInstance(data, QRCodeData)
        self.assertEqual((data.product_id, data.product_name, data.farm_name), (3, "Quinua", "Chimborazo"))


class ValidationTest(unittest.TestCase):
    def test_is_valid_accepts_both_formats(self):
        self.assertTrue(is_valid_qr_code(generate_qr_code(1)))
        self.assertTrue(is_valid_qr_code(generate_detailed_qr_code(1, "Papa", "Finca")))
        self.assertFalse(is_valid_qr_code("HV-nope"))
        self.assertFalse(is_valid_qr_code(""))
        self.assertFalse(is_valid_qr_code(None))

    def test_product_id_from_either_format(self):
        self.assertEqual(get_product_id_from_qr("HV-12-1700000000000-abcd1234"), 12)
        self.assertEqual(get_product_id_from_qr(generate_detailed_qr_code(34, "Papa", "Finca")), 34)
        self.assertIsNone(get_product_id_from_qr("something else"))

    def test_messages(self):
        self.assertEqual(validate_qr_code_with_message(""), (False, "Empty QR code"))
        self.assertEqual(validate_qr_code_with_message("   "), (False, "Empty QR code"))
        self.assertEqual(validate_qr_code_with_message("ABC-1-2-3"), (False, "Not a Hoja Verde QR code"))
        self.assertEqual(validate_qr_code_with_message("HV-x"), (False, "Invalid QR code format"))
        self.assertEqual(
            validate_qr_code_with_message("HV-1-1700000000000-demo"),
            (True, "Valid QR code"),
        )


class InfoTest(unittest.TestCase):
    def test_simple_code_info(self):
        info = format_qr_code_info("HV-1-1700000000000-demo")
        self.assertEqual(info.product_id, 1)
        self.assertFalse(info.is_detailed)
        self.assertEqual(info.timestamp, datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc))
        self.assertIsNone(info.farm_name)
        self.assertEqual(info.display_code, "HV-1-1700000000000-d...")

    def test_short_code_is_not_truncated(self):
        info = format_qr_code_info("HV-1-17-demo")
        self.assertEqual(info.display_code, "HV-1-17-demo")

    def test_detailed_code_info(self):
        code = encode_payload({
            "productId": 8, "productName": "Cacao", "farmName": "Hacienda", "timestamp": 1700000000000,
        })
        result = extract_qr_info(code)
        self.assertTrue(result.is_valid)
        self.assertEqual(result.message, "Valid QR code")
        self.assertTrue(result.data.is_detailed)
        self.assertEqual(result.data.product_id, 8)
        self.assertEqual(result.data.product_name, "Cacao")
        self.assertEqual(result.data.farm_name, "Hacienda")
        self.assertTrue(result.data.display_code.endswith("..."))

    def test_invalid_code_info(self):
        result = extract_qr_info("not-a-code")
        self.assertFalse(result.is_valid)
        self.assertEqual(result.message, "Not a Hoja Verde QR code")
        self.assertIsNone(result.data)


if __name__ == "__main__":
    unittest.main()
