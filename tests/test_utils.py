import datetime as dt
import json
import unittest
from typing import List

import numpy as np
import pandas as pd

from contract_model import ValidationError, utils
from contract_model.errors import SchemaError


class TypeHelperTests(unittest.TestCase):
    def test_type_name(self):
        self.assertEqual(utils._type_name(int), "int")
        self.assertEqual(utils._type_name(List[int]), "List[int]")

    def test_safe_isinstance(self):
        self.assertTrue(utils._is_instance(1, int))
        self.assertFalse(utils._is_instance(1, List[int]))  # would raise TypeError
        self.assertFalse(utils._is_instance(1, "int"))


class JsonSafeTests(unittest.TestCase):
    def test_primitives_untouched(self):
        for value in (None, True, 1, 1.5, "s"):
            self.assertIs(utils._json_safe(value), value)

    def test_containers(self):
        self.assertEqual(
            utils._json_safe({"a": (1, 2), 3: {4}}),
            {"a": [1, 2], "3": [4]},
        )

    def test_leaves(self):
        self.assertEqual(utils._json_safe(dt.date(2024, 1, 2)), "2024-01-02")
        self.assertEqual(utils._json_safe(dt.time(1, 2)), "01:02:00")
        self.assertEqual(utils._json_safe(np.int64(3)), 3)
        self.assertEqual(utils._json_safe(b"ab"), "ab")
        self.assertEqual(utils._json_safe(pd.DataFrame({"x": [1, 2]})), [{"x": 1}, {"x": 2}])

    def test_dumps_is_compact(self):
        self.assertEqual(utils._dumps({"a": [1, (2, 3)]}), '{"a":[1,[2,3]]}')


class ValidationErrorTests(unittest.TestCase):
    def test_str_is_json_tree(self):
        exc = ValidationError({"id": "Missing required field", "tags.0": ["a", "b"]})
        self.assertEqual(json.loads(str(exc)), exc.errors)
        self.assertEqual(str(exc), json.dumps(exc.errors, indent=2))

    def test_hierarchy(self):
        exc = ValidationError({"x": "y"})
        self.assertIsInstance(exc, SchemaError)
        self.assertIsInstance(exc, ValueError)
        self.assertIsInstance(exc, TypeError)


if __name__ == "__main__":
    unittest.main()
