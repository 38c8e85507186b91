"""Tests for callable fingerprints."""

import functools
import hashlib
import logging
import re

from tickloop.core.identity import fetch_callable_unique_id

HEX32 = re.compile(r"^[0-9a-f]{32}$")


class Widget:
    def refresh(self):
        return "refresh"

    def redraw(self):
        return "redraw"

    @classmethod
    def build(cls):
        return cls()

    @staticmethod
    def helper():
        return "helper"


class Handler:
    def __call__(self):
        return "called"


def module_function():
    return "module"


class TestFunctions:
    """Tests for plain functions and lambdas."""

    def test_same_function_is_stable(self):
        """Test the same function always gets the same id."""
        assert fetch_callable_unique_id(module_function) == fetch_callable_unique_id(module_function)
        assert HEX32.match(fetch_callable_unique_id(module_function))

    def test_same_source_span_collides(self):
        """Test lambdas created at one source location share an id."""
        made = [lambda: i for i in range(2)]
        assert fetch_callable_unique_id(made[0]) == fetch_callable_unique_id(made[1])

    def test_different_spans_differ(self):
        """Test functions defined at different locations differ."""
        first = lambda: 1  # noqa: E731
        second = lambda: 2  # noqa: E731
        assert fetch_callable_unique_id(first) != fetch_callable_unique_id(second)

    def test_staticmethod_is_a_function(self):
        """Test a static method reference hashes like a function."""
        assert fetch_callable_unique_id(Widget.helper) == fetch_callable_unique_id(Widget.helper)


class TestNames:
    """Tests for names and builtins."""

    def test_string_hashes_the_name(self):
        """Test a name string hashes to the md5 of the name."""
        assert fetch_callable_unique_id("strlen") == hashlib.md5(b"strlen").hexdigest()

    def test_builtin_hashes_qualified_name(self):
        """Test builtins hash their module-qualified name."""
        assert fetch_callable_unique_id(len) == hashlib.md5(b"builtins.len").hexdigest()

    def test_class_hashes_qualified_name(self):
        """Test a class used as a callable hashes its name."""
        expected = hashlib.md5(f"{__name__}.Widget".encode()).hexdigest()
        assert fetch_callable_unique_id(Widget) == expected


class TestMethods:
    """Tests for bound methods."""

    def test_same_instance_same_method(self):
        """Test two bound method objects for one instance match."""
        widget = Widget()
        first, second = widget.refresh, widget.refresh
        assert first is not second
        assert fetch_callable_unique_id(first) == fetch_callable_unique_id(second)

    def test_distinct_instances_differ(self):
        """Test the same method on two instances never collides."""
        a, b = Widget(), Widget()
        assert fetch_callable_unique_id(a.refresh) != fetch_callable_unique_id(b.refresh)

    def test_distinct_methods_differ(self):
        """Test two methods of one instance differ."""
        widget = Widget()
        assert fetch_callable_unique_id(widget.refresh) != fetch_callable_unique_id(widget.redraw)

    def test_classmethod_ignores_instance(self):
        """Test a classmethod hashes the class and method name."""
        expected = hashlib.md5(f"{__name__}.Widget@build".encode()).hexdigest()
        assert fetch_callable_unique_id(Widget.build) == expected
        assert fetch_callable_unique_id(Widget().build) == expected

    def test_callable_instance(self):
        """Test objects with __call__ hash per instance."""
        a, b = Handler(), Handler()
        assert fetch_callable_unique_id(a) == fetch_callable_unique_id(a)
        assert fetch_callable_unique_id(a) != fetch_callable_unique_id(b)

    def test_builtin_method_of_instance(self):
        """Test builtin methods bound to an object hash per instance."""
        a, b = [], []
        assert fetch_callable_unique_id(a.append) == fetch_callable_unique_id(a.append)
        assert fetch_callable_unique_id(a.append) != fetch_callable_unique_id(b.append)


class TestUnstableIdentity:
    """Tests for callables without a reproducible identity."""

    def test_partial_gets_random_id(self, caplog):
        """Test partials get a fresh id each time and log a warning."""
        p = functools.partial(module_function)
        with caplog.at_level(logging.WARNING, logger="tickloop"):
            first = fetch_callable_unique_id(p)
            second = fetch_callable_unique_id(p)

        assert first != second
        assert HEX32.match(first)
        assert "will not coalesce" in caplog.text
