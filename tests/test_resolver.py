import os
import sys
from textwrap import dedent

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from sql_command_checker.models import Found, NotFound, Position, Unresolved
from sql_command_checker.resolver import (
    LiteralArg,
    NoArgNoAssignment,
    NoArgPropertyAssignment,
    OtherArg,
    StatementResolver,
    VariableArg,
)
from sql_command_checker.source_model import SourceModel


def _resolve_all(source, **kwargs):
    model = SourceModel(dedent(source))
    resolver = StatementResolver(model, **kwargs)
    sites = model.construction_sites("Command")
    return resolver, sites, [resolver.resolve(s) for s in sites]


def test_literal_round_trip():
    resolver, (site,), (resolved,) = _resolve_all(
        """\
        def handler():
            cmd = Command("SELECT 1")
        """
    )
    assert isinstance(resolver.classify(site), LiteralArg)
    assert resolved == Found("SELECT 1", site.position)
    assert site.position == Position(2, 11)


def test_literal_parameters_neutralized():
    _, _, (resolved,) = _resolve_all('Command("SELECT * FROM t WHERE id = @id")\n')
    assert resolved.text == "SELECT * FROM t WHERE id = NULL"


def test_variable_argument_uses_tracer():
    resolver, sites, resolved = _resolve_all(
        """\
        def handler():
            query = "SELECT * FROM users;"
            cmd = Command(query)
            query = "UPDATE bad_table SET id=1;"
            cmd = Command(query)
        """
    )
    assert isinstance(resolver.classify(sites[0]), VariableArg)
    assert resolved[0] == Found("SELECT * FROM users;", Position(2, 13))
    assert resolved[1] == Found("UPDATE bad_table SET id=1;", Position(4, 13))


def test_no_argument_without_assignment_is_not_found():
    resolver, (site,), (resolved,) = _resolve_all(
        """\
        def handler():
            cmd = Command()
            cmd.execute()
        """
    )
    assert isinstance(resolver.classify(site), NoArgNoAssignment)
    assert resolved == NotFound(site.position)


def test_unbound_command_without_argument_is_not_found():
    _, (site,), (resolved,) = _resolve_all("Command()\n")
    assert resolved == NotFound(site.position)


def test_property_assignment_literal():
    resolver, (site,), (resolved,) = _resolve_all(
        """\
        def handler():
            cmd = Command()
            cmd.Command_Text = "SELECT @a"
        """
    )
    assert isinstance(resolver.classify(site), NoArgPropertyAssignment)
    assert resolved == Found("SELECT NULL", Position(3, 24))


def test_property_assignment_inside_with_block():
    _, _, (resolved,) = _resolve_all(
        """\
        def handler():
            with Command() as cmd:
                cmd.command_text = "SELECT 1"
        """
    )
    assert resolved == Found("SELECT 1", Position(3, 28))


def test_property_assignment_in_branches_uses_first():
    _, _, (resolved,) = _resolve_all(
        """\
        def handler(flag):
            cmd = Command()
            if flag:
                cmd.command_text = "SELECT 1"
            else:
                cmd.command_text = "SELECT 2"
        """
    )
    assert resolved == Found("SELECT 1", Position(4, 28))


def test_property_assignment_inside_try_block():
    _, _, (resolved,) = _resolve_all(
        """\
        def handler():
            cmd = Command()
            try:
                cmd.command_text = "SELECT * FROM missing"
            finally:
                pass
        """
    )
    assert resolved == Found("SELECT * FROM missing", Position(4, 28))


def test_property_assignment_through_attribute():
    resolver, (site,), (resolved,) = _resolve_all(
        """\
        class Repo:
            def load(self):
                self.cmd = Command()
                self.other.command_text = "SELECT 9"
                self.cmd.command_text = "SELECT 1"
        """
    )
    assert isinstance(resolver.classify(site), NoArgPropertyAssignment)
    assert resolved == Found("SELECT 1", Position(5, 33))


def test_property_assignment_other_receiver_is_not_found():
    _, (site,), (resolved,) = _resolve_all(
        """\
        def handler():
            cmd = Command()
            other.command_text = "SELECT 1"
        """
    )
    assert resolved == NotFound(site.position)


def test_property_assignment_variable_uses_assignment_line():
    _, _, (resolved,) = _resolve_all(
        """\
        def handler():
            query = "SELECT 1"
            cmd = Command()
            pass
            pass
            pass
            query = "SELECT 2"
            cmd.command_text = query
        """
    )
    # distance is measured from the property assignment (line 8), not line 3
    assert resolved == Found("SELECT 2", Position(7, 13))


def test_custom_text_property_keyword():
    _, _, (resolved,) = _resolve_all(
        'Command(sql="SELECT 1")\n',
        text_property="sql",
    )
    assert resolved.text == "SELECT 1"


def test_dynamic_statements_are_unresolved():
    resolver, sites, resolved = _resolve_all(
        """\
        def handler(table, query):
            Command(f"SELECT * FROM {table}")
            Command(query)
            built = make_query()
            Command(built)
        """
    )
    assert isinstance(resolver.classify(sites[0]), OtherArg)
    assert all(isinstance(r, Unresolved) for r in resolved)


def test_literal_escapes_are_decoded():
    _, _, resolved = _resolve_all(
        r"""
        Command("SELECT * FROM \"Users\"")
        Command('SELECT *\nFROM users')
        Command("SELECT 'it''s'")
        """
    )
    assert [r.text for r in resolved] == [
        'SELECT * FROM "Users"',
        "SELECT *\nFROM users",
        "SELECT 'it''s'",
    ]


def test_concatenated_literal_drops_comments():
    _, (site,), (resolved,) = _resolve_all(
        """\
        def handler():
            cmd = Command(
                "SELECT * "  # columns
                "FROM users"
            )
        """
    )
    assert resolved == Found("SELECT * FROM users", site.position)


def test_variable_literal_escapes_are_decoded():
    _, _, (resolved,) = _resolve_all(
        r"""
        def handler():
            query = "SELECT \"id\" FROM users"
            Command(query)
        """
    )
    assert resolved.text == 'SELECT "id" FROM users'
