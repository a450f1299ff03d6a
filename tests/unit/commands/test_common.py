import pytest
import typer

from pouch_admin.commands.common import (
    format_money,
    parse_field_assignment,
    parse_move,
    parse_provider_assignment,
)


class TestParseFieldAssignment:
    def test_valid(self):
        assert parse_field_assignment("2.limit=20") == (2, "limit", "20")

    def test_value_may_contain_equals(self):
        assert parse_field_assignment("0.pattern=a=b") == (0, "pattern", "a=b")

    def test_empty_value(self):
        assert parse_field_assignment("0.pattern=") == (0, "pattern", "")

    @pytest.mark.parametrize("text", ["limit=20", "x.limit=20", "1.limit", "1.=3"])
    def test_invalid(self, text):
        with pytest.raises(typer.BadParameter):
            parse_field_assignment(text)


def test_parse_provider_assignment():
    assert parse_provider_assignment("api_key=sk-1") == ("api_key", "sk-1")
    with pytest.raises(typer.BadParameter):
        parse_provider_assignment("api_key")


def test_parse_move():
    assert parse_move("3:up") == (3, "up")
    assert parse_move("0:DOWN") == (0, "down")
    with pytest.raises(typer.BadParameter):
        parse_move("3:left")
    with pytest.raises(typer.BadParameter):
        parse_move("up")


def test_format_money():
    assert format_money(5) == "$5.00"
