import typing
import unittest
from collections import deque
from typing import Any, Deque, Dict, FrozenSet, List, Optional, Set, Tuple, Union

from contract_model import ContainerKind, compile_type_schema
from contract_model.type_schema import _cache_key, clear_type_cache

from tests._util import Node, Product


class LeafNodeTests(unittest.TestCase):
    def test_plain_type(self):
        node = compile_type_schema(int)
        self.assertIs(node.declared_type, int)
        self.assertIsNone(node.origin)
        self.assertIs(node.container_kind, ContainerKind.NONE)
        self.assertEqual(node.args, ())
        self.assertFalse(node.is_optional)
        self.assertEqual(node.display_repr, "int")

    def test_any_marker(self):
        self.assertTrue(compile_type_schema(Any).is_any)

    def test_record_type_is_a_leaf(self):
        node = compile_type_schema(Product)
        self.assertTrue(node.is_record_type)
        self.assertIs(node.container_kind, ContainerKind.NONE)

    def test_annotated_compiles_to_inner_type(self):
        node = compile_type_schema(typing.Annotated[int, "meta"])
        self.assertIs(node, compile_type_schema(int))


class ContainerNodeTests(unittest.TestCase):
    def test_list(self):
        node = compile_type_schema(List[int])
        self.assertIs(node.container_kind, ContainerKind.LIST)
        self.assertIs(node.origin, list)
        self.assertEqual([a.declared_type for a in node.args], [int])

    def test_builtin_generic_alias_normalises_to_same_family(self):
        self.assertIs(compile_type_schema(list[int]).container_kind, ContainerKind.LIST)
        self.assertIs(compile_type_schema(tuple[int, str]).container_kind, ContainerKind.TUPLE)
        self.assertIs(compile_type_schema(Tuple[int, str]).container_kind, ContainerKind.TUPLE)

    def test_dict_requires_two_args(self):
        node = compile_type_schema(Dict[str, int])
        self.assertIs(node.container_kind, ContainerKind.DICT)
        self.assertEqual(len(node.args), 2)

    def test_bare_generic_degrades_to_opaque(self):
        node = compile_type_schema(typing.Dict)
        self.assertIs(node.container_kind, ContainerKind.NONE)
        self.assertEqual(node.args, ())
        self.assertIs(node.origin, dict)

    def test_fixed_and_variadic_tuples(self):
        fixed = compile_type_schema(Tuple[int, str, float])
        self.assertEqual(len(fixed.args), 3)
        self.assertFalse(fixed.variadic)
        variadic = compile_type_schema(Tuple[int, ...])
        self.assertEqual(len(variadic.args), 1)
        self.assertTrue(variadic.variadic)

    def test_set(self):
        self.assertIs(compile_type_schema(Set[str]).container_kind, ContainerKind.SET)

    def test_unrecognised_generic_keeps_origin(self):
        node = compile_type_schema(Deque[int])
        self.assertIs(node.container_kind, ContainerKind.NONE)
        self.assertIs(node.origin, deque)
        self.assertIs(compile_type_schema(FrozenSet[int]).origin, frozenset)

    def test_inner_record_type(self):
        self.assertIs(compile_type_schema(List[Product]).inner_record_type, Product)
        self.assertIs(compile_type_schema(Dict[str, Product]).inner_record_type, Product)
        self.assertIsNone(compile_type_schema(List[int]).inner_record_type)


class UnionNodeTests(unittest.TestCase):
    def test_optional(self):
        node = compile_type_schema(Optional[int])
        self.assertIs(node.container_kind, ContainerKind.UNION)
        self.assertTrue(node.is_optional)

    def test_pep604_union(self):
        node = compile_type_schema(int | None)
        self.assertIs(node.container_kind, ContainerKind.UNION)
        self.assertTrue(node.is_optional)

    def test_plain_union_is_not_optional(self):
        self.assertFalse(compile_type_schema(Union[int, str]).is_optional)

    def test_union_keeps_declaration_order(self):
        a = compile_type_schema(Union[int, str])
        b = compile_type_schema(Union[str, int])
        self.assertIsNot(a, b)
        self.assertEqual([x.declared_type for x in a.args], [int, str])
        self.assertEqual([x.declared_type for x in b.args], [str, int])

    def test_single_record_alternative_is_recorded(self):
        self.assertIs(compile_type_schema(Optional[Node]).inner_record_type, Node)
        self.assertIsNone(compile_type_schema(Union[Node, Product]).inner_record_type)


class CacheTests(unittest.TestCase):
    def test_same_type_returns_same_node(self):
        self.assertIs(compile_type_schema(List[int]), compile_type_schema(List[int]))
        self.assertIs(compile_type_schema(Dict[str, List[int]]).args[1], compile_type_schema(List[int]))

    def test_clear_type_cache_forces_recompilation(self):
        before = compile_type_schema(Set[bytes])
        clear_type_cache()
        after = compile_type_schema(Set[bytes])
        self.assertIsNot(before, after)
        self.assertIs(after.container_kind, ContainerKind.SET)
        self.assertIs(compile_type_schema(Set[bytes]), after)

    def test_cache_key_is_order_preserving(self):
        self.assertNotEqual(_cache_key(Union[int, str]), _cache_key(Union[str, int]))
        self.assertEqual(_cache_key(List[int]), _cache_key(List[int]))


if __name__ == "__main__":
    unittest.main()
