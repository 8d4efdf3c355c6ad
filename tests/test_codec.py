import datetime as dt
import json
import unittest
import uuid
from typing import Dict, List, Set, Tuple

import numpy as np
import pandas as pd

from contract_model import Config, DataModel, Field, ParseError, ValidationError
from contract_model.codec import from_json_text, from_value_tree, to_json_text, to_value_tree

from tests._util import Catalog, Inventory, Node, Product, Stamped, product_data


class ValueTreeTests(unittest.TestCase):
    def test_to_dict_declared_fields_in_order(self):
        p = Product(**product_data(tags=["a"]))
        self.assertEqual(
            p.to_dict(),
            {"id": 1, "name": "Widget", "price": 9.99, "tags": ["a"], "description": None},
        )
        self.assertEqual(list(p.to_dict()), ["id", "name", "price", "tags", "description"])

    def test_nested_records_become_mappings(self):
        inv = Inventory(products=[product_data()], counts={"a": 1})
        tree = to_value_tree(inv)
        self.assertIsInstance(tree["products"][0], dict)
        self.assertEqual(tree["products"][0]["id"], 1)
        self.assertEqual(tree["counts"], {"a": 1})

    def test_container_types_are_preserved(self):
        class Mixed(DataModel):
            pair: Tuple[int, str]
            bag: Set[int]

        tree = Mixed(pair=[1, "a"], bag=[1, 2]).to_dict()
        self.assertEqual(tree, {"pair": (1, "a"), "bag": {1, 2}})

    def test_opaque_values_pass_through(self):
        class Tagged(DataModel):
            uid: uuid.UUID

        uid = uuid.uuid4()
        self.assertIs(Tagged(uid=uid).to_dict()["uid"], uid)

    def test_dict_serializer_applies_by_exact_type(self):
        s = Stamped(at=dt.datetime(2024, 2, 3, 4, 5))
        self.assertEqual(s.to_dict(), {"at": "2024-02-03"})

    def test_model_deserializer_table(self):
        self.assertEqual(Stamped(at=[2024, 2, 3]).at, dt.datetime(2024, 2, 3))

    def test_nested_record_uses_its_own_serializer(self):
        class Wrapper(DataModel):
            inner: Stamped
            when: dt.datetime

        w = Wrapper(inner={"at": "2024-01-01T00:00:00"}, when="2024-01-01T00:00:00")
        tree = w.to_dict()
        self.assertEqual(tree["inner"], {"at": "2024-01-01"})
        self.assertEqual(tree["when"], dt.datetime(2024, 1, 1))

    def test_serializer_keyed_by_record_type(self):
        class Point(DataModel):
            x: int
            y: int

        class Shape(DataModel):
            __model_config__ = Config(
                dict_serializer={Point: lambda p: f"{p.x},{p.y}"},
                json_serializer={Point: lambda p: [p.x, p.y]},
            )
            origin: Point
            corners: List[Point] = Field(default_factory=list)

        shape = Shape(origin={"x": 1, "y": 2}, corners=[{"x": 3, "y": "4"}])
        self.assertEqual(shape.to_dict(), {"origin": "1,2", "corners": ["3,4"]})
        self.assertEqual(shape.to_json(), '{"origin":[1,2],"corners":[[3,4]]}')

    def test_record_serializer_returning_not_implemented_falls_through(self):
        class Point(DataModel):
            x: int

        class Holder(DataModel):
            __model_config__ = Config(dict_serializer={Point: lambda p: NotImplemented})
            point: Point

        self.assertEqual(Holder(point={"x": "5"}).to_dict(), {"point": {"x": 5}})

    def test_round_trip_canonicalises_values(self):
        raw = {"id": "3", "name": "Gear", "price": "4", "tags": ["x"], "description": None}
        tree = to_value_tree(from_value_tree(Product, raw))
        self.assertEqual(tree, {"id": 3, "name": "Gear", "price": 4.0, "tags": ["x"], "description": None})
        self.assertEqual(to_value_tree(from_value_tree(Product, tree)), tree)

    def test_from_value_tree_requires_mapping(self):
        with self.assertRaises(TypeError):
            from_value_tree(Product, [("id", 1)])


class JsonTextTests(unittest.TestCase):
    def test_to_json_is_compact(self):
        class Small(DataModel):
            id: int

        self.assertEqual(Small(id=100).to_json(), '{"id":100}')

    def test_from_json(self):
        p = Product.from_json('{"id": 1, "name": "Widget", "price": "9.99"}')
        self.assertEqual(p.price, 9.99)

    def test_from_json_bytes(self):
        self.assertEqual(Product.from_json(json.dumps(product_data()).encode()).id, 1)

    def test_json_round_trip(self):
        inv = Inventory(products=[product_data(), product_data(id=2)], counts={"x": 3})
        self.assertEqual(Inventory.from_json(inv.to_json()), inv)

    def test_self_referential_round_trip(self):
        tree = Node(value=1, children=[{"value": 2}])
        self.assertEqual(Node.from_json(tree.to_json()), tree)

    def test_json_serializer_table(self):
        s = Stamped(at=dt.datetime(2024, 2, 3, 4, 5))
        self.assertEqual(json.loads(s.to_json()), {"at": int(dt.datetime(2024, 2, 3, 4, 5).timestamp())})

    def test_non_json_leaves_are_rendered(self):
        class Leaves(DataModel):
            when: dt.datetime
            day: dt.date
            uid: uuid.UUID
            pair: Tuple[int, int]
            keys: Dict[int, str]
            unique: Set[int]

        uid = uuid.UUID(int=1)
        obj = Leaves(
            when=dt.datetime(2024, 1, 2, 3, 4, 5),
            day="2024-01-02",
            uid=uid,
            pair=(1, 2),
            keys={1: "a"},
            unique={7},
        )
        self.assertEqual(
            json.loads(obj.to_json()),
            {
                "when": "2024-01-02T03:04:05",
                "day": "2024-01-02",
                "uid": str(uid),
                "pair": [1, 2],
                "keys": {"1": "a"},
                "unique": [7],
            },
        )

    def test_unicode_is_preserved(self):
        class Text(DataModel):
            s: str

        self.assertEqual(Text(s="héllo").to_json(), '{"s":"héllo"}')

    def test_from_json_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            Catalog.from_json('{"data": {"p": {"id": "x", "name": "n", "price": 1}}}')
        self.assertEqual(ctx.exception.errors, {"data.p.id": "Expected type int, got str"})

    def test_from_json_parse_errors(self):
        for text, message in [
            ("", "Empty JSON string"),
            ("   ", "Empty JSON string"),
            ("{not json", "Invalid JSON"),
            ("[1, 2]", "JSON root must be an object"),
        ]:
            with self.subTest(text=text):
                with self.assertRaisesRegex(ParseError, message):
                    Product.from_json(text)


class PandasTests(unittest.TestCase):
    def test_dataframe_field(self):
        class Frame(DataModel):
            df: pd.DataFrame

        frame = Frame(df=[{"a": 1, "b": "x"}, {"a": 2, "b": "y"}])
        self.assertIsInstance(frame.df, pd.DataFrame)
        self.assertEqual(list(frame.df.columns), ["a", "b"])
        self.assertEqual(json.loads(frame.to_json()), {"df": [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]})

    def test_existing_dataframe_is_kept(self):
        class Frame(DataModel):
            df: pd.DataFrame

        df = pd.DataFrame({"a": [1]})
        self.assertIs(Frame(df=df).df, df)
        self.assertIs(Frame(df=df).to_dict()["df"], df)

    def test_series_timestamp_and_numpy_leaves(self):
        class Stats(DataModel):
            series: pd.Series
            at: pd.Timestamp
            mean: np.float64

        stats = Stats(series=pd.Series([1, 2]), at=pd.Timestamp("2024-01-02"), mean=np.float64(1.5))
        self.assertEqual(
            json.loads(stats.to_json()),
            {"series": [1, 2], "at": "2024-01-02T00:00:00", "mean": 1.5},
        )

    def test_json_helper_functions(self):
        p = Product(**product_data())
        self.assertEqual(from_json_text(Product, to_json_text(p)), p)


if __name__ == "__main__":
    unittest.main()
