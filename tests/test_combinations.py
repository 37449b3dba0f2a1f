"""Tests for single combination create, list and delete."""

import pytest

from svo_editor import (
    CombinationExistsError,
    DuplicateEntityError,
    EntityNotFoundError,
)


class TestCreateCombination:

    def test_create_combination(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        combo = ed.create_combination(cat.id, eats.id, fish.id)
        assert combo.id > 0
        assert combo.triple == (cat.id, eats.id, fish.id)
        assert combo.sentence == "cat eats fish"
        assert combo.created_at

    def test_duplicate_raises_and_keeps_count(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        with pytest.raises(CombinationExistsError) as exc:
            ed.create_combination(cat.id, eats.id, fish.id)
        assert str(exc.value) == "Combination already exists: cat eats fish"
        assert exc.value.texts == ("cat", "eats", "fish")
        assert isinstance(exc.value, DuplicateEntityError)
        assert len(ed.list_combinations()) == 1

    def test_same_words_other_triple_allowed(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.create_combination(cat.id, eats.id, meat.id)
        ed.create_combination(dog.id, eats.id, fish.id)
        assert len(ed.list_combinations()) == 3

    def test_missing_subject_reported(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        with pytest.raises(EntityNotFoundError) as exc:
            ed.create_combination(99, eats.id, fish.id)
        assert exc.value.entity_type == "subject"
        assert str(exc.value) == "Subject word not found with ID: 99"

    def test_missing_verb_reported(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        with pytest.raises(EntityNotFoundError) as exc:
            ed.create_combination(cat.id, 99, fish.id)
        assert str(exc.value) == "Verb word not found with ID: 99"

    def test_missing_object_reported(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        with pytest.raises(EntityNotFoundError) as exc:
            ed.create_combination(cat.id, eats.id, 99)
        assert str(exc.value) == "Object word not found with ID: 99"

    def test_first_missing_word_wins(self, editor_with_words):
        ed, *_ = editor_with_words
        with pytest.raises(EntityNotFoundError) as exc:
            ed.create_combination(97, 98, 99)
        assert exc.value.entity_type == "subject"
        assert exc.value.entity_id == 97

        with pytest.raises(EntityNotFoundError) as exc:
            ed.create_combination(1, 98, 99)
        assert exc.value.entity_type == "verb"

    def test_failed_create_leaves_store_unchanged(self, editor_with_words):
        ed, cat, eats, *_ = editor_with_words
        with pytest.raises(EntityNotFoundError):
            ed.create_combination(cat.id, eats.id, 99)
        assert ed.list_combinations() == []


class TestListCombinations:

    def test_list_all_in_id_order(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        c1 = ed.create_combination(dog.id, eats.id, meat.id)
        c2 = ed.create_combination(cat.id, eats.id, fish.id)
        assert [c.id for c in ed.list_combinations()] == [c1.id, c2.id]

    def test_filter_by_verb(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        likes = ed.create_word("likes", "VERB")
        ed.create_combination(cat.id, eats.id, fish.id)
        liked = ed.create_combination(dog.id, likes.id, meat.id)
        assert ed.list_combinations(likes.id) == [liked]
        assert len(ed.list_combinations(eats.id)) == 1

    def test_filter_by_unknown_verb_is_empty(self, editor_with_words):
        ed, *_ = editor_with_words
        assert ed.list_combinations(99) == []

    def test_get_combination(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        combo = ed.create_combination(cat.id, eats.id, fish.id)
        assert ed.get_combination(combo.id) == combo

    def test_get_missing_combination(self, editor):
        with pytest.raises(EntityNotFoundError) as exc:
            editor.get_combination(5)
        assert str(exc.value) == "Allowed combination not found with ID: 5"

    def test_to_dict(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        combo = ed.create_combination(cat.id, eats.id, fish.id)
        data = combo.to_dict()
        assert data["subject"] == {"id": cat.id, "text": "cat"}
        assert data["verb"] == {"id": eats.id, "text": "eats"}
        assert data["object"] == {"id": fish.id, "text": "fish"}
        assert data["sentence"] == "cat eats fish"


class TestDeleteCombination:

    def test_delete_by_id(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        combo = ed.create_combination(cat.id, eats.id, fish.id)
        ed.delete_combination(combo.id)
        assert ed.list_combinations() == []
        assert not ed.validate_sentence(cat.id, eats.id, fish.id).valid

    def test_delete_missing_id(self, editor):
        with pytest.raises(EntityNotFoundError) as exc:
            editor.delete_combination(3)
        assert exc.value.entity_type == "combination"

    def test_recreate_after_delete(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        first = ed.create_combination(cat.id, eats.id, fish.id)
        ed.delete_combination(first.id)
        second = ed.create_combination(cat.id, eats.id, fish.id)
        assert second.id != first.id


class TestDeleteByVerb:

    def test_deletes_only_that_verb(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        likes = ed.create_word("likes", "VERB")
        ed.create_combinations_batch(eats.id, [cat.id, dog.id], [fish.id, meat.id])
        kept = ed.create_combination(cat.id, likes.id, meat.id)

        assert ed.delete_combinations_by_verb(eats.id) == 4
        assert ed.list_combinations() == [kept]

    def test_verb_without_combinations(self, editor_with_words):
        ed, cat, eats, *_ = editor_with_words
        assert ed.delete_combinations_by_verb(eats.id) == 0

    def test_missing_verb(self, editor):
        with pytest.raises(EntityNotFoundError) as exc:
            editor.delete_combinations_by_verb(42)
        assert str(exc.value) == "Verb word not found with ID: 42"

    def test_verb_word_survives(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.delete_combinations_by_verb(eats.id)
        assert ed.get_word(eats.id).text == "eats"
