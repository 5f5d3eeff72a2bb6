"""
Tests for jamforge.prompts
==========================

questionary is patched, so these tests check what is asked and how
answers and cancellations are handled.
"""

from unittest.mock import patch

import pytest
import typer

from jamforge.prompts import prompt_confirm, prompt_select, prompt_text, regex_validator


class TestRegexValidator:
    """Tests for regex_validator."""

    def test_accepts_match(self) -> None:
        assert regex_validator("^[0-9]+$")("8080") is True

    def test_rejects_with_message(self) -> None:
        assert regex_validator("^[0-9]+$")("http") == "Input must match pattern: ^[0-9]+$"

    def test_unanchored_search(self) -> None:
        """Unanchored patterns match anywhere in the answer."""
        assert regex_validator("[0-9]")("port 80") is True


class TestPrompts:
    """Tests for the questionary wrappers."""

    def test_text_returns_answer(self) -> None:
        with patch("jamforge.prompts.questionary.text") as mock_text:
            mock_text.return_value.ask.return_value = "Jane"
            assert prompt_text("Author?", "Your Name") == "Jane"

        assert mock_text.call_args.kwargs["default"] == "Your Name"
        assert mock_text.call_args.kwargs["validate"] is None

    def test_text_with_regex_validates(self) -> None:
        with patch("jamforge.prompts.questionary.text") as mock_text:
            mock_text.return_value.ask.return_value = "80"
            prompt_text("Port?", regex="^[0-9]+$")

        validate = mock_text.call_args.kwargs["validate"]
        assert validate("80") is True
        assert isinstance(validate("x"), str)

    def test_select_preselects_default(self) -> None:
        with patch("jamforge.prompts.questionary.select") as mock_select:
            mock_select.return_value.ask.return_value = "MIT"
            prompt_select("License?", ["Apache-2.0", "MIT"], "MIT")

        assert mock_select.call_args.kwargs["default"] == "MIT"

    def test_select_falls_back_to_first_choice(self) -> None:
        """A default outside the choices pre-selects the first choice."""
        with patch("jamforge.prompts.questionary.select") as mock_select:
            mock_select.return_value.ask.return_value = "Apache-2.0"
            prompt_select("License?", ["Apache-2.0", "MIT"], "GPL-3.0-only")

        assert mock_select.call_args.kwargs["default"] == "Apache-2.0"

    def test_confirm(self) -> None:
        with patch("jamforge.prompts.questionary.confirm") as mock_confirm:
            mock_confirm.return_value.ask.return_value = True
            assert prompt_confirm("Tests?", default=False) is True

        mock_confirm.assert_called_once_with("Tests?", default=False)

    @pytest.mark.parametrize(
        ("factory", "call"),
        [
            ("text", lambda: prompt_text("?")),
            ("select", lambda: prompt_select("?", ["a"])),
            ("confirm", lambda: prompt_confirm("?")),
        ],
    )
    def test_cancel_aborts(self, factory: str, call) -> None:
        """Ctrl-C (a None answer) aborts the command."""
        with patch(f"jamforge.prompts.questionary.{factory}") as mock_prompt:
            mock_prompt.return_value.ask.return_value = None
            with pytest.raises(typer.Abort):
                call()
