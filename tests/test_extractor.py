"""Unit tests for how.extractor."""

import json
import time

import pytest

from how.extractor import (
    CommandCategory,
    CommandExtractor,
    categorize_command,
    extract_commands,
    is_command_safe,
)


def _block(body: str, language: str = "bash") -> str:
    return f"```{language}\n{body}\n```"


# ---------------------------------------------------------------------------
# Code-block fallback
# ---------------------------------------------------------------------------


class TestCodeBlockFallback:
    def test_prompt_prefix_comment_and_unsafe_line(self):
        result = extract_commands(_block("$ ls -la\n# comment\n\nrm -rf /tmp/x"))

        assert [c.command for c in result.commands] == ["ls -la", "rm -rf /tmp/x"]
        first, second = result.commands
        assert (first.order, first.safe, first.category) == (1, True, CommandCategory.FILE)
        assert (second.order, second.safe, second.category) == (
            2,
            False,
            CommandCategory.GENERAL,
        )
        assert first.description == ""
        assert result.workflows == []

    @pytest.mark.parametrize("language", ["bash", "sh", "shell", "", "BASH"])
    def test_shell_languages_accepted(self, language):
        result = extract_commands(_block("pwd", language))
        assert [c.command for c in result.commands] == ["pwd"]

    @pytest.mark.parametrize("language", ["go", "python", "json", "zsh"])
    def test_other_languages_ignored(self, language):
        result = extract_commands(_block("go build ./...", language))
        assert result.commands == []

    def test_orders_continue_across_blocks(self):
        text = _block("ls") + "\nthen\n" + _block("git status\ngit diff", "sh")
        result = extract_commands(text)

        assert [c.order for c in result.commands] == [1, 2, 3]
        assert result.commands[1].category == CommandCategory.GIT

    def test_repeated_prompt_prefixes_stripped(self):
        result = extract_commands(_block("> $ echo hi"))
        assert result.commands[0].command == "echo hi"

    def test_bare_prompt_sigil_skipped(self):
        result = extract_commands(_block("$ \nls"))
        assert [c.command for c in result.commands] == ["ls"]

    def test_crlf_line_endings(self):
        result = extract_commands("```bash\r\nls\r\npwd\r\n```")
        assert [c.command for c in result.commands] == ["ls", "pwd"]

    def test_unterminated_fence_yields_nothing(self):
        assert extract_commands("```bash\nls -la").commands == []

    def test_many_unclosed_fences_stay_fast(self):
        start = time.monotonic()
        result = extract_commands("```a\n" * 20000)
        assert time.monotonic() - start < 2.0
        assert result.commands == []

    def test_fence_after_closed_block_without_closer_ignored(self):
        text = _block("ls") + "\n" + "```bash\nrm -rf /"
        assert [c.command for c in extract_commands(text).commands] == ["ls"]

    def test_no_code_is_empty_result(self):
        result = extract_commands("Just prose.")
        assert result.count() == 0
        assert not result.has_commands()


# ---------------------------------------------------------------------------
# Structured block
# ---------------------------------------------------------------------------


class TestStructuredBlock:
    def test_structured_block_wins_over_code(self):
        text = (
            _block("ls")
            + '\n<structured_commands>{"commands":[{"command":"pwd","order":1,"safe":true}]}'
            "</structured_commands>"
        )
        result = extract_commands(text)

        assert [c.command for c in result.commands] == ["pwd"]
        assert result.commands[0].safe is True

    def test_defaults_for_missing_fields(self):
        payload = {
            "commands": [{"command": "ls"}, {"command": "df -h", "description": None}],
        }
        text = f"<structured_commands>\n{json.dumps(payload)}\n</structured_commands>"
        result = extract_commands(text)

        assert [c.order for c in result.commands] == [1, 2]
        assert all(c.safe is False for c in result.commands)
        assert result.commands[1].description == ""
        assert result.commands[1].category == CommandCategory.SYSTEM
        assert result.workflows == []

    def test_orders_kept_verbatim(self):
        payload = {"commands": [{"command": "a", "order": 3}, {"command": "b", "order": 7}]}
        result = extract_commands(f"<structured_commands>{json.dumps(payload)}</structured_commands>")
        assert [c.order for c in result.commands] == [3, 7]

    def test_workflows_and_extra_fields(self):
        payload = {
            "commands": [],
            "workflows": [
                {
                    "name": "Create app",
                    "description": "scaffold",
                    "steps": [
                        {"command": "mkdir app", "required": True, "category": "file"},
                        {"command": "cd app", "safe": True, "order": 2},
                    ],
                }
            ],
            "extra": "ignored",
        }
        result = extract_commands(f"<structured_commands>{json.dumps(payload)}</structured_commands>")

        assert len(result.workflows) == 1
        steps = result.workflows[0].steps
        assert [s.command for s in steps] == ["mkdir app", "cd app"]
        assert [s.order for s in steps] == [1, 2]
        assert result.count() == 2
        assert [c.command for c in result.all_commands()] == ["mkdir app", "cd app"]

    def test_unsafe_first_token_overrides_claimed_safety(self):
        payload = {"commands": [{"command": "sudo reboot", "safe": True}]}
        result = extract_commands(f"<structured_commands>{json.dumps(payload)}</structured_commands>")
        assert result.commands[0].safe is False

    def test_prompt_prefix_stripped_from_structured_command(self):
        payload = {"commands": [{"command": "$ ls"}]}
        result = extract_commands(f"<structured_commands>{json.dumps(payload)}</structured_commands>")
        assert result.commands[0].command == "ls"

    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            "{",
            '{"commands": "nope"}',
            '{"commands": [{"command": ""}]}',
            '{"commands": [{"description": "missing command"}]}',
            "[]",
        ],
    )
    def test_invalid_payload_falls_back_to_code_blocks(self, body):
        text = f"<structured_commands>{body}</structured_commands>\n" + _block("whoami")
        result = extract_commands(text)
        assert [c.command for c in result.commands] == ["whoami"]

    def test_round_trip_preserves_commands(self):
        original = extract_commands(_block("ls -la\nrm -rf build\ngit log"))
        embedded = f"Some prose.\n<structured_commands>{original.to_json()}</structured_commands>\nBye"
        assert extract_commands(embedded).commands == original.commands


# ---------------------------------------------------------------------------
# Classification and serialisation
# ---------------------------------------------------------------------------


class TestClassification:
    @pytest.mark.parametrize("token", ["rm", "sudo", "chmod", "mv", "dd", "mkfs", "fdisk"])
    def test_unsafe_tokens(self, token):
        assert is_command_safe(f"{token} something") is False

    @pytest.mark.parametrize("command", ["ls", "rmdir x", "echo rm", "  git push"])
    def test_safe_commands(self, command):
        assert is_command_safe(command) is True

    def test_empty_command_is_not_safe(self):
        assert is_command_safe("   ") is False

    @pytest.mark.parametrize(
        ("command", "category"),
        [
            ("grep -r x", CommandCategory.FILE),
            ("curl http://x", CommandCategory.NETWORK),
            ("free -m", CommandCategory.SYSTEM),
            ("git status", CommandCategory.GIT),
            ("pip install x", CommandCategory.PACKAGE),
            ("go test ./...", CommandCategory.BUILD),
            ("docker ps", CommandCategory.GENERAL),
        ],
    )
    def test_categories(self, command, category):
        assert categorize_command(command) == category


class TestSerialisation:
    def test_to_json_uses_wire_schema(self):
        result = extract_commands(_block("ls"))
        data = json.loads(result.to_json())

        assert data == {
            "commands": [{"command": "ls", "description": "", "order": 1, "safe": True}],
            "workflows": [],
        }

    def test_compact_json_is_single_line(self):
        result = extract_commands(_block("ls\npwd"))
        compact = result.to_json_compact()

        assert "\n" not in compact
        assert json.loads(compact) == json.loads(result.to_json())

    def test_extractor_reusable(self):
        extractor = CommandExtractor()
        text = _block("ls")
        assert extractor.extract(text) == extractor.extract(text)
