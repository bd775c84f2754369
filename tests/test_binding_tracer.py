import os
import sys
from textwrap import dedent

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from sql_command_checker.binding_tracer import (
    BindingTracer,
    LineDistancePolicy,
    UnresolvedBindingError,
)
from sql_command_checker.models import Position
from sql_command_checker.source_model import SourceModel


def _sites(source):
    model = SourceModel(dedent(source))
    return model, model.construction_sites("Command")


def _value(model, write):
    return model.segment(write.value)


def test_nearest_write_selection():
    model, (first, second) = _sites(
        """\
        def handler():
            query = "SELECT * FROM users;"
            cmd = Command(query)
            query = "UPDATE bad_table SET id=1;"
            cmd = Command(query)
        """
    )
    tracer = BindingTracer(model)
    w1 = tracer.resolve_variable("query", first.line, first.scope)
    w2 = tracer.resolve_variable("query", second.line, second.scope)
    assert w1.kind == "declaration"
    assert _value(model, w1) == '"SELECT * FROM users;"'
    assert w2.kind == "assignment"
    assert _value(model, w2) == '"UPDATE bad_table SET id=1;"'
    assert w2.position == Position(4, 13)


def test_tie_goes_to_declaration():
    model, (site,) = _sites(
        """\
        def handler():
            query = "SELECT 1"
            pass
            cmd = Command(query)
            pass
            query = "SELECT 2"
        """
    )
    write = BindingTracer(model).resolve_variable("query", site.line, site.scope)
    assert write.kind == "declaration"
    assert write.line == 2


def test_later_reassignment_can_win():
    model, (site,) = _sites(
        """\
        def handler():
            query = "SELECT 1"
            pass
            pass
            cmd = Command(query)
            query = "SELECT 2"
        """
    )
    write = BindingTracer(model).resolve_variable("query", site.line, site.scope)
    assert _value(model, write) == '"SELECT 2"'


def test_closest_of_several_reassignments():
    model, (site,) = _sites(
        """\
        def handler():
            query: str = "SELECT 1"
            query = "SELECT 2"
            query = "SELECT 3"
            pass
            cmd = Command(query)
        """
    )
    tracer = BindingTracer(model)
    binding = tracer.binding("query", site.line, site.scope)
    assert binding.declaration.line == 2
    assert [w.line for w in binding.reassignments] == [3, 4]
    assert _value(model, tracer.resolve_variable("query", site.line, site.scope)) == '"SELECT 3"'


def test_module_level_declaration_is_visible():
    model, (site,) = _sites(
        """\
        QUERY = "SELECT 1"


        def handler():
            return Command(QUERY)
        """
    )
    write = BindingTracer(model).resolve_variable("QUERY", site.line, site.scope)
    assert write.position == Position(1, 9)


def test_unknown_name_raises():
    model, (site,) = _sites(
        """\
        def handler(query):
            return Command(query)
        """
    )
    with pytest.raises(UnresolvedBindingError):
        BindingTracer(model).resolve_variable("query", site.line, site.scope)


def test_pluggable_policy():
    class DeclarationOnly(LineDistancePolicy):
        def accept(self, declaration, best, reference_line):
            return False

    model, (_, second) = _sites(
        """\
        def handler():
            query = "SELECT 1"
            cmd = Command(query)
            query = "SELECT 2"
            cmd = Command(query)
        """
    )
    write = BindingTracer(model, DeclarationOnly()).resolve_variable("query", second.line, second.scope)
    assert write.kind == "declaration"


def test_module_write_does_not_compete_with_local():
    model, (site,) = _sites(
        """\
        def handler():
            query = "SELECT * FROM users"
            cmd = Command(query)


        query = "SELECT * FROM missing"
        """
    )
    binding = BindingTracer(model).binding("query", site.line, site.scope)
    assert binding.reassignments == ()
    assert _value(model, binding.declaration) == '"SELECT * FROM users"'


def test_module_write_used_when_function_has_none():
    model, (site,) = _sites(
        """\
        QUERY = "SELECT * FROM users"


        def handler():
            cmd = Command(QUERY)
        """
    )
    write = BindingTracer(model).resolve_variable("QUERY", site.line, site.scope)
    assert write.kind == "declaration"
    assert write.line == 1
