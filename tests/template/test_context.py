"""Тесты стека контекстов и разрешения имён."""

from collections import OrderedDict

import pytest

from stache.template.context import MISSING, ContextStack, Frame, lookup_key
from tests.infrastructure.views import NestedObjectsView, PersonRow, PrivateFieldsView, SectionMethodView


class TestLookupKey:
    """Поиск ключа внутри одного значения."""

    def test_mapping_membership(self):
        frame = {"zero": 0, "no": False, "none": None}

        assert lookup_key(frame, "zero") == 0
        assert lookup_key(frame, "no") is False
        assert lookup_key(frame, "none") is None
        assert lookup_key(frame, "absent") is MISSING

    def test_any_mapping_type(self):
        assert lookup_key(OrderedDict(a=1), "a") == 1

    def test_scalars_have_no_keys(self):
        assert lookup_key("abc", "upper") is MISSING
        assert lookup_key(42, "real") is MISSING
        assert lookup_key(None, "x") is MISSING

    def test_sequence_index(self):
        items = ["x", "y"]

        assert lookup_key(items, "0") == "x"
        assert lookup_key(items, "-1") == "y"
        assert lookup_key(items, "5") is MISSING
        assert lookup_key(items, "first") is MISSING
        assert lookup_key(items, "count") is MISSING

    def test_named_tuple_fields(self):
        row = PersonRow("Ann", "Oslo")

        assert lookup_key(row, "name") == "Ann"
        assert lookup_key(row, "1") == "Oslo"
        assert lookup_key(row, "index") is MISSING
        assert lookup_key(row, "_fields") is MISSING

    def test_object_attribute(self):
        view = NestedObjectsView()

        assert lookup_key(view.person, "name") == "Ann"

    def test_method_is_called(self):
        view = NestedObjectsView()

        assert lookup_key(view.person, "greeting") == "Hi, Ann"

    def test_method_with_required_arguments_not_called(self):
        """Такой метод возвращается как есть и служит лямбдой секции."""
        view = SectionMethodView()

        method = lookup_key(view, "bolder")

        assert callable(method)
        assert method("x", str.upper) == "<b>X</b>"

    def test_method_with_defaults_is_called(self):
        assert lookup_key(SectionMethodView(), "label") == "#Tater"

    def test_private_attributes_hidden(self):
        view = PrivateFieldsView()

        assert lookup_key(view, "public") == "visible"
        assert lookup_key(view, "_secret") is MISSING
        assert lookup_key(view, "__class__") is MISSING


class TestContextStack:
    """Разрешение имён в стеке фреймов."""

    def test_missing_marker(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"
        assert MISSING is not None

    def test_falsy_values_are_found(self):
        stack = ContextStack.from_view({"zero": 0, "no": False})

        assert stack.resolve("zero") == 0
        assert stack.resolve("no") is False
        assert stack.resolve("absent") is MISSING

    def test_search_from_top(self):
        stack = ContextStack.from_view({"a": 1, "b": 2})
        stack.push({"a": 3})

        assert stack.resolve("a") == 3
        assert stack.resolve("b") == 2

    def test_dotted_name(self):
        stack = ContextStack.from_view({"a": {"b": {"c": 1}}})

        assert stack.resolve("a.b.c") == 1
        assert stack.resolve("a.b.x") is MISSING
        assert stack.resolve("a.x.c") is MISSING

    def test_dotted_name_does_not_fall_back(self):
        """Остальные сегменты ищутся только внутри найденного значения."""
        stack = ContextStack.from_view({"a": {"b": 1}})
        stack.push({"a": {}})

        assert stack.resolve("a.b") is MISSING

    def test_dotted_name_through_objects(self):
        stack = ContextStack.from_view(NestedObjectsView())

        assert stack.resolve("person.address.city") == "Oslo"
        assert stack.resolve("people.1.name") == "Eve"

    def test_implicit_iterator(self):
        stack = ContextStack.from_view({"x": 1})
        stack.push("item")

        assert stack.resolve(".") == "item"

    def test_alias(self):
        stack = ContextStack.from_view({"num": "root"})
        stack.push(5, alias="num")

        assert stack.resolve("num") == 5
        assert stack.resolve(".") == 5

    def test_pushed_restores_depth(self):
        stack = ContextStack.from_view({})

        with stack.pushed({"a": 1}):
            assert len(stack) == 2
            assert stack.resolve("a") == 1
        assert len(stack) == 1
        assert stack.resolve("a") is MISSING

    def test_pushed_pops_on_error(self):
        stack = ContextStack.from_view({})

        with pytest.raises(RuntimeError):
            with stack.pushed({"a": 1}):
                raise RuntimeError("boom")
        assert len(stack) == 1

    def test_copy_is_independent(self):
        stack = ContextStack.from_view({"a": 1})
        copy = stack.copy()
        copy.push({"a": 2})

        assert stack.resolve("a") == 1
        assert copy.resolve("a") == 2

    def test_frames(self):
        stack = ContextStack([Frame({"a": 1}), Frame(2, alias="n")])

        assert stack.top() == 2
        assert stack.pop() == Frame(2, alias="n")
        assert stack.top() == {"a": 1}

    def test_iterator_materialized_once(self):
        gen = (n for n in (1, 2))
        stack = ContextStack.from_view({"g": gen})

        first = stack.resolve("g")

        assert first == (1, 2)
        assert stack.resolve("g") is first
        assert stack.copy().resolve("g") is first

    def test_iterator_in_dotted_name(self):
        stack = ContextStack.from_view({"a": {"g": iter(["x", "y"])}})

        assert stack.resolve("a.g.1") == "y"
        assert stack.resolve("a.g") == ("x", "y")
