"""
Tests for console output helpers.
"""

import json
from unittest.mock import patch

import click

from pixelz.utils.console import align_output, colorize_json, prompt_for_missing


class TestAlignOutput:

    def test_values_line_up(self, capsys):
        align_output([("Token ID:", "1"), ("Metadata Gateway URL:", "http://gw/x")])

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].index("1") == lines[1].index("http://gw/x")

    def test_empty(self, capsys):
        align_output([])
        assert capsys.readouterr().out == ""


class TestColorizeJson:

    def test_same_text_once_styles_removed(self):
        data = {"name": "Test", "image": "ipfs://bafyabc/x.png", "attributes": ["a", 1], "extra": None}

        assert click.unstyle(colorize_json(data)) == json.dumps(data, indent=2)

    def test_keys_are_styled(self):
        assert colorize_json({"name": "Test"}) != json.dumps({"name": "Test"}, indent=2)


class TestPromptForMissing:

    def test_only_prompts_for_missing(self):
        with patch("click.prompt", return_value="typed") as mock_prompt:
            answers = prompt_for_missing(
                {"name": "Given", "description": None},
                {"name": "Name?", "description": "Description?"},
            )

        assert answers == {"name": "Given", "description": "typed"}
        mock_prompt.assert_called_once_with("Description?", default="", show_default=False)
