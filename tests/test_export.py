"""Tests for exporting the graph as a change request."""

import pytest
import yaml

from svo_editor import CombinationEditor, ExportError
from svo_editor.batch import execute_change_request, load_change_request


class TestExport:

    def test_export_dict(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        data = ed.export_dict()
        assert data["session"]["name"] == "svo-editor export"
        ops = [c["operation"] for c in data["changes"]]
        assert ops == ["add_word"] * 5 + ["add_combination"]
        assert data["changes"][-1] == {
            "operation": "add_combination",
            "subject": "cat",
            "verb": "eats",
            "object": "fish",
        }

    def test_round_trip(self, editor_with_words, tmp_path):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combinations_batch(eats.id, [cat.id, dog.id], [fish.id])
        path = tmp_path / "export.yaml"
        ed.export_yaml(path)

        with CombinationEditor() as fresh:
            result = execute_change_request(fresh, load_change_request(path))
            assert result.failure_count == 0
            assert [c.sentence for c in fresh.list_combinations()] == [
                c.sentence for c in ed.list_combinations()
            ]

    def test_yaml_keeps_unicode(self, editor, tmp_path):
        editor.create_word("äiti", "SUBJECT")
        path = tmp_path / "export.yaml"
        editor.export_yaml(path)
        text = path.read_text(encoding="utf-8")
        assert "äiti" in text
        assert yaml.safe_load(text)["changes"][0]["text"] == "äiti"

    def test_ambiguous_texts_rejected(self, editor):
        editor.create_word("cat", "SUBJECT")
        editor.create_word("cat", "SUBJECT")
        with pytest.raises(ExportError, match="Ambiguous"):
            editor.export_dict()

    def test_role_change_on_used_word_rejected(self, editor_with_words, tmp_path):
        ed, cat, eats, fish, *_ = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.update_word(cat.id, role="OBJECT")
        with pytest.raises(ExportError, match="wrong role") as exc:
            ed.export_yaml(tmp_path / "export.yaml")
        assert "subject 'cat' is OBJECT" in str(exc.value)
        assert not (tmp_path / "export.yaml").exists()

    def test_role_restored_exports_and_replays(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.update_word(cat.id, role="OBJECT")
        ed.update_word(cat.id, role="SUBJECT")

        with CombinationEditor() as fresh:
            result = execute_change_request(
                fresh, load_change_request(ed.export_dict())
            )
            assert result.failure_count == 0
            assert len(fresh.list_combinations()) == 1
