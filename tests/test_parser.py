import json
import unittest
from pathlib import Path

from contract_model import ParseError, parse_input
from contract_model.parser import parse_json_text

from tests._util import Product, tmp_dir, tmp_json


class ParseJsonTextTests(unittest.TestCase):
    def test_object_root(self):
        self.assertEqual(parse_json_text('{"a": [1, 2.5, null, true]}'), {"a": [1, 2.5, None, True]})

    def test_bytes_input(self):
        self.assertEqual(parse_json_text('{"s": "é"}'.encode("utf-8")), {"s": "é"})

    def test_empty_input(self):
        with self.assertRaisesRegex(ParseError, "^Empty JSON string$"):
            parse_json_text("")
        with self.assertRaisesRegex(ParseError, "Empty JSON string"):
            parse_json_text(b"  \n")

    def test_malformed(self):
        with self.assertRaisesRegex(ParseError, "Invalid JSON"):
            parse_json_text('{"a": }')

    def test_non_object_root(self):
        for text in ("[]", "1", '"x"', "null"):
            with self.subTest(text=text):
                with self.assertRaisesRegex(ParseError, "JSON root must be an object"):
                    parse_json_text(text)

    def test_wrong_argument_type(self):
        with self.assertRaises(TypeError):
            parse_json_text(42)

    def test_parse_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            parse_json_text("")


class ParseInputTests(unittest.TestCase):
    def test_mapping_is_copied(self):
        src = {"id": 1}
        out = parse_input(src)
        self.assertEqual(out, src)
        self.assertIsNot(out, src)

    def test_json_literal(self):
        self.assertEqual(parse_input('{"id": 1}'), {"id": 1})

    def test_path_object(self):
        path = tmp_json({"id": 2, "name": "n", "price": 1})
        try:
            self.assertEqual(Product.from_dict(parse_input(path)).id, 2)
        finally:
            path.unlink()

    def test_path_string(self):
        with tmp_dir() as d:
            target = d / "input.json"
            target.write_text(json.dumps({"k": "v"}), encoding="utf-8")
            self.assertEqual(parse_input(str(target)), {"k": "v"})

    def test_missing_file_string_is_parsed_as_json(self):
        with self.assertRaisesRegex(ParseError, "Invalid JSON"):
            parse_input("no/such/file.json")

    def test_unusable_path_string_is_parsed_as_json(self):
        for text in ("x" * 10000, "bad\x00name", '  "quoted"  '):
            with self.subTest(length=len(text)):
                with self.assertRaises(ParseError):
                    parse_input(text)

    def test_unsupported_type(self):
        with self.assertRaises(TypeError):
            parse_input(3.14)

    def test_path_with_bad_content(self):
        with tmp_dir() as d:
            target = Path(d) / "bad.json"
            target.write_text("[]", encoding="utf-8")
            with self.assertRaisesRegex(ParseError, "root must be an object"):
                parse_input(target)


if __name__ == "__main__":
    unittest.main()
