"""Unit tests for Console prompts."""

import io

import pytest

from safeboot_wizard.errors import AmbiguousInput
from safeboot_wizard.lib.prompt import Console


def _console(*answers):
    remaining = list(answers)

    def fake_input(prompt):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    out = io.StringIO()
    return Console(input_fn=fake_input, out=out), out


@pytest.mark.unit
class TestConsole:
    @pytest.mark.parametrize(
        "answer,expected",
        [
            ("y", True),
            ("  y  ", True),
            ("Y", False),
            ("yes", False),
            ("n", False),
            ("", False),
        ],
    )
    def test_confirm_only_accepts_literal_y(self, answer, expected):
        console, _ = _console(answer)
        assert console.confirm("Reboot now?") is expected

    def test_confirm_fails_closed_on_eof(self):
        console, out = _console()
        assert console.confirm("Reboot now?") is False
        assert out.getvalue() == "\n"

    def test_choose_returns_known_answer(self):
        console, _ = _console("n")
        assert console.choose("PIN?", ["y", "n"]) == "n"

    def test_choose_raises_on_unknown_answer(self):
        console, _ = _console("xyz")
        with pytest.raises(AmbiguousInput) as exc:
            console.choose("PIN?", ["y", "n"])
        assert exc.value.answer == "xyz"
        assert exc.value.choices == ("y", "n")

    def test_say_appends_newline(self):
        console, out = _console()
        console.say("hello")
        console.say("world\n")
        assert out.getvalue() == "hello\nworld\n"
