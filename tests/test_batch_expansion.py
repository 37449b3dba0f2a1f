"""Tests for expanding a verb over subject and object sets."""

import pytest

from svo_editor import EntityNotFoundError, ValidationError


class TestBatchExpansion:

    def test_creates_cartesian_product(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        outcome = ed.create_combinations_batch(
            eats.id, [cat.id, dog.id], [fish.id, meat.id]
        )
        assert outcome.created == 4
        assert [c.triple for c in outcome.combinations] == [
            (cat.id, eats.id, fish.id),
            (cat.id, eats.id, meat.id),
            (dog.id, eats.id, fish.id),
            (dog.id, eats.id, meat.id),
        ]
        assert len(ed.list_combinations()) == 4

    def test_existing_triples_skipped(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        outcome = ed.create_combinations_batch(
            eats.id, [cat.id, dog.id], [fish.id, meat.id]
        )
        assert outcome.created == 3
        assert outcome.existing == ((cat.id, eats.id, fish.id),)
        assert (cat.id, eats.id, fish.id) not in [
            c.triple for c in outcome.combinations
        ]
        assert len(ed.list_combinations()) == 4

    def test_second_run_creates_nothing(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combinations_batch(eats.id, [cat.id, dog.id], [fish.id, meat.id])
        outcome = ed.create_combinations_batch(
            eats.id, [cat.id, dog.id], [fish.id, meat.id]
        )
        assert outcome.created == 0
        assert outcome.combinations == ()
        assert len(outcome.existing) == 4
        assert len(ed.list_combinations()) == 4

    def test_unresolved_ids_skipped(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        outcome = ed.create_combinations_batch(
            eats.id, [cat.id, 98], [fish.id, 99]
        )
        assert outcome.created == 1
        assert outcome.combinations[0].triple == (cat.id, eats.id, fish.id)
        assert outcome.skipped_subject_ids == (98,)
        assert outcome.skipped_object_ids == (99,)

    def test_all_ids_unresolved(self, editor_with_words):
        ed, cat, eats, *_ = editor_with_words
        outcome = ed.create_combinations_batch(eats.id, [98], [99])
        assert outcome.created == 0
        assert ed.list_combinations() == []

    def test_missing_verb(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        with pytest.raises(EntityNotFoundError) as exc:
            ed.create_combinations_batch(99, [cat.id], [fish.id])
        assert str(exc.value) == "Verb word not found with ID: 99"
        assert ed.list_combinations() == []

    def test_duplicate_input_ids_collapse(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        outcome = ed.create_combinations_batch(
            eats.id, [cat.id, cat.id], [fish.id, fish.id]
        )
        assert outcome.created == 1
        assert len(ed.list_combinations()) == 1

    @pytest.mark.parametrize("subjects,objects", [([], [3]), ([1], [])])
    def test_empty_id_list_rejected(self, editor_with_words, subjects, objects):
        ed, cat, eats, *_ = editor_with_words
        with pytest.raises(ValidationError):
            ed.create_combinations_batch(eats.id, subjects, objects)

    def test_outcome_to_dict(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        data = ed.create_combinations_batch(eats.id, [cat.id], [fish.id, 77]).to_dict()
        assert data["created"] == 1
        assert data["combinations"][0]["sentence"] == "cat eats fish"
        assert data["skipped_object_ids"] == [77]

    def test_records_history_per_created_edge(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.create_combinations_batch(eats.id, [cat.id, dog.id], [fish.id, meat.id])
        created = ed.get_history(entity_type="combination", operation="CREATE")
        assert len(created) == 4
