"""Tests for exercise suggestion aggregation."""


class TestSuggestions:

    def test_empty_graph(self, editor_with_words):
        ed, *_ = editor_with_words
        result = ed.get_suggestions()
        assert result.verbs == ()
        assert result.subjects == ()
        assert result.objects == ()

    def test_per_verb_sets(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.create_combination(dog.id, eats.id, meat.id)

        result = ed.get_suggestions()
        assert len(result.verbs) == 1
        verb = result.verbs[0]
        assert verb.id == eats.id
        assert verb.text == "eats"
        assert verb.compatible_subject_ids == (cat.id, dog.id)
        assert verb.compatible_object_ids == (fish.id, meat.id)

    def test_listing_does_not_imply_allowed(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.create_combination(dog.id, eats.id, meat.id)

        verb = ed.get_suggestions().verbs[0]
        assert cat.id in verb.compatible_subject_ids
        assert meat.id in verb.compatible_object_ids
        assert not ed.validate_sentence(cat.id, eats.id, meat.id).valid

    def test_word_lists_are_union_over_verbs(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        likes = ed.create_word("likes", "VERB")
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.create_combination(dog.id, likes.id, meat.id)

        result = ed.get_suggestions()
        assert [v.id for v in result.verbs] == [eats.id, likes.id]
        assert [s.text for s in result.subjects] == ["cat", "dog"]
        assert [o.text for o in result.objects] == ["fish", "meat"]

    def test_unused_words_not_listed(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        result = ed.get_suggestions()
        assert [s.id for s in result.subjects] == [cat.id]
        assert [o.id for o in result.objects] == [fish.id]

    def test_verb_filter(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        likes = ed.create_word("likes", "VERB")
        ed.create_combination(cat.id, eats.id, fish.id)
        ed.create_combination(dog.id, likes.id, meat.id)

        result = ed.get_suggestions(verb_id=likes.id)
        assert [v.id for v in result.verbs] == [likes.id]
        assert [s.id for s in result.subjects] == [dog.id]

    def test_limit_is_accepted(self, editor_with_words):
        ed, cat, eats, fish, dog, meat = editor_with_words
        ed.create_combinations_batch(eats.id, [cat.id, dog.id], [fish.id, meat.id])
        assert ed.get_suggestions(1) == ed.get_suggestions()

    def test_to_dict_keys(self, editor_with_words):
        ed, cat, eats, fish, *_ = editor_with_words
        ed.create_combination(cat.id, eats.id, fish.id)
        data = ed.get_suggestions().to_dict()
        assert data["verbs"] == [{
            "id": eats.id,
            "text": "eats",
            "compatible_subject_ids": [cat.id],
            "compatible_object_ids": [fish.id],
        }]
        assert data["subjects"] == [{"id": cat.id, "text": "cat"}]
