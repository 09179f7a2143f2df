"""Tests for review prompt construction."""

from adolens_core.models import ChangeRecord, LineChange, ReviewSettings
from adolens_core.prompt import ADDITIONS_LIMIT, FULL_FILE_LIMIT, build_prompt


def _settings(**kwargs):
    return ReviewSettings(api_key="k", **kwargs)


class TestFullFilePrompt:
    RECORD = ChangeRecord(
        filename="/src/a.ts",
        original_content="const a = 1;",
        new_content="const a = 2;",
        change_type="edit",
    )

    def test_contains_both_versions(self):
        prompt = build_prompt(self.RECORD, _settings())
        assert "FILE: /src/a.ts" in prompt
        assert "CHANGE TYPE: edit" in prompt
        assert "ORIGINAL CODE:\n```\nconst a = 1;\n```" in prompt
        assert "NEW CODE:\n```\nconst a = 2;\n```" in prompt

    def test_truncates_each_version(self):
        record = ChangeRecord(filename="f", original_content="o" * (FULL_FILE_LIMIT + 10), new_content="n" * 30000)
        prompt = build_prompt(record, _settings())
        assert "o" * FULL_FILE_LIMIT + "\n```" in prompt
        assert "o" * (FULL_FILE_LIMIT + 1) not in prompt
        assert "n" * (FULL_FILE_LIMIT + 1) not in prompt


class TestAdditionsPrompt:
    def test_uses_additions_when_present(self):
        record = ChangeRecord(
            filename="a.ts",
            content="+ x\n  y",
            additions=(LineChange(1, "x = 1"), LineChange(3, "z = 2")),
        )
        prompt = build_prompt(record, _settings())
        assert "LINES ADDED: 2" in prompt
        assert "```\nx = 1\nz = 2\n```" in prompt

    def test_uses_content_without_additions(self):
        record = ChangeRecord(filename="Selected Code", content="def f(): pass")
        prompt = build_prompt(record, _settings())
        assert "LINES ADDED: 0" in prompt
        assert "def f(): pass" in prompt

    def test_truncates_content(self):
        record = ChangeRecord(filename="a", content="c" * (ADDITIONS_LIMIT + 100))
        prompt = build_prompt(record, _settings())
        assert "c" * ADDITIONS_LIMIT in prompt
        assert "c" * (ADDITIONS_LIMIT + 1) not in prompt


class TestRequirements:
    RECORD = ChangeRecord(filename="a", content="x")

    def test_quick_depth(self):
        assert "Focus only on critical issues. Be brief." in build_prompt(self.RECORD, _settings(depth="quick"))

    def test_unknown_depth_uses_standard(self):
        prompt = build_prompt(self.RECORD, _settings(depth="bogus"))
        assert "Provide a balanced review covering important issues." in prompt

    def test_focus_areas_listed(self):
        prompt = build_prompt(self.RECORD, _settings(focus_areas=frozenset({"security", "tests"})))
        assert "security vulnerabilities" in prompt
        assert "test coverage concerns" in prompt
        assert "code style and best practices" not in prompt

    def test_checklists_and_schema(self):
        prompt = build_prompt(self.RECORD, _settings())
        assert "Unused exports" in prompt
        assert "Unfinished TODOs" in prompt
        assert "PR-SPECIFIC CHECKS" in prompt
        assert '"riskLevel"' in prompt
        assert "no markdown or extra text" in prompt

    def test_deterministic(self):
        assert build_prompt(self.RECORD, _settings()) == build_prompt(self.RECORD, _settings())
