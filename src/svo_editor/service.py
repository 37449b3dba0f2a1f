"""Store-agnostic operations: fetch from the stores, decide, persist."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from svo_editor import engine
from svo_editor.exceptions import EntityNotFoundError, ValidationError
from svo_editor.models import (
    BatchOutcome,
    CombinationModel,
    SentenceCheck,
    SuggestionResult,
    WordModel,
    WordReference,
    WordRole,
)
from svo_editor.stores import CombinationStore, WordStore

logger = logging.getLogger(__name__)


def normalize_role(role: str | WordRole) -> str:
    """Return the canonical role name, accepting any letter case."""
    value = role.value if isinstance(role, WordRole) else str(role).strip().upper()
    try:
        return WordRole(value).value
    except ValueError:
        raise ValidationError(
            f"Invalid role: {role!r} (expected SUBJECT, VERB or OBJECT)"
        ) from None


def normalize_text(text: str) -> str:
    """Strip surrounding whitespace; blank text is rejected."""
    if text is None or not str(text).strip():
        raise ValidationError("Text cannot be empty")
    return str(text).strip()


class CombinationService:
    """Words and allowed combinations over any pair of stores.

    The service does not manage transactions. Callers that need the
    read-then-write steps to be atomic wrap calls in their own transaction
    (see :class:`svo_editor.editor.CombinationEditor`).
    """

    def __init__(
        self,
        words: WordStore,
        combinations: CombinationStore,
        *,
        messages: engine.Messages = engine.DEFAULT_MESSAGES,
    ) -> None:
        self.words = words
        self.combinations = combinations
        self.messages = messages

    # ------------------------------------------------------------------
    # Words
    # ------------------------------------------------------------------

    def create_word(self, text: str, role: str | WordRole) -> WordModel:
        word = self.words.insert_word(normalize_text(text), normalize_role(role))
        logger.info(f"Created {word.role} word {word.id}: {word.text!r}")
        return word

    def update_word(
        self,
        word_id: int,
        *,
        text: str | None = None,
        role: str | WordRole | None = None,
    ) -> WordModel:
        current = self.get_word(word_id)
        new_text = normalize_text(text) if text is not None else current.text
        new_role = normalize_role(role) if role is not None else current.role
        if new_role != current.role:
            in_use = self.combinations.count_by_word(word_id)
            if in_use:
                logger.warning(
                    f"Word {word_id} changes role {current.role} -> {new_role} "
                    f"while used by {in_use} combination(s)"
                )
        return self.words.update_word(word_id, new_text, new_role)

    def get_word(self, word_id: int) -> WordModel:
        word = self.words.resolve_word(word_id)
        if word is None:
            raise EntityNotFoundError("word", word_id)
        return word

    def list_words(self, role: str | WordRole | None = None) -> list[WordModel]:
        if role is None:
            return self.words.find_words()
        return self.words.find_words_by_role(normalize_role(role))

    def find_words(
        self, text: str, role: str | WordRole | None = None
    ) -> list[WordModel]:
        return self.words.find_words(
            text=text.strip(),
            role=normalize_role(role) if role is not None else None,
        )

    def delete_word(self, word_id: int) -> list[CombinationModel]:
        """Delete a word and every combination that references it.

        Returns the combinations removed along with the word.
        """
        if not self.words.word_exists(word_id):
            raise EntityNotFoundError("word", word_id)
        removed = self.combinations.find_by_word(word_id)
        self.words.delete_word(word_id)
        logger.info(
            f"Deleted word {word_id} and {len(removed)} combination(s)"
        )
        return removed

    # ------------------------------------------------------------------
    # Combinations
    # ------------------------------------------------------------------

    def list_combinations(self, verb_id: int | None = None) -> list[CombinationModel]:
        if verb_id is not None:
            return self.combinations.find_by_verb(verb_id)
        return self.combinations.find_all()

    def get_combination(self, combination_id: int) -> CombinationModel:
        combo = self.combinations.get(combination_id)
        if combo is None:
            raise EntityNotFoundError("combination", combination_id)
        return combo

    def create_combination(
        self, subject_id: int, verb_id: int, object_id: int
    ) -> CombinationModel:
        staged = engine.prepare_combination(
            subject_id, verb_id, object_id,
            resolve_word=self.words.resolve_word,
            find_combination=self.combinations.find_by_triple,
        )
        combo = self.combinations.save(staged)
        logger.info(f"Created combination {combo.id}: {combo.sentence!r}")
        return combo

    def create_combinations_batch(
        self,
        verb_id: int,
        subject_ids: Iterable[int],
        object_ids: Iterable[int],
    ) -> BatchOutcome:
        subject_ids = list(subject_ids)
        object_ids = list(object_ids)
        if not subject_ids:
            raise ValidationError("At least one subject ID is required")
        if not object_ids:
            raise ValidationError("At least one object ID is required")

        plan = engine.plan_batch(
            verb_id, subject_ids, object_ids,
            resolve_word=self.words.resolve_word,
            resolve_words=self.words.resolve_words,
            find_by_verb=self.combinations.find_by_verb,
        )
        created = self.combinations.save_all(plan.staged)
        logger.info(
            f"Verb {verb_id}: created {len(created)} combination(s), "
            f"{len(plan.existing)} already existed"
        )
        return BatchOutcome(
            combinations=tuple(created),
            skipped_subject_ids=plan.skipped_subject_ids,
            skipped_object_ids=plan.skipped_object_ids,
            existing=plan.existing,
        )

    def delete_combination(self, combination_id: int) -> CombinationModel:
        """Delete one combination and return what was removed."""
        combo = self.get_combination(combination_id)
        self.combinations.delete(combination_id)
        logger.info(f"Deleted combination {combination_id}")
        return combo

    def delete_combinations_by_verb(self, verb_id: int) -> list[CombinationModel]:
        """Delete every combination of a verb and return what was removed.

        A verb without combinations is not an error; a missing verb word is.
        """
        if not self.words.word_exists(verb_id):
            raise EntityNotFoundError("verb", verb_id)
        removed = self.combinations.find_by_verb(verb_id)
        count = self.combinations.delete_by_verb(verb_id)
        logger.info(f"Deleted {count} combination(s) of verb {verb_id}")
        return removed

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def get_suggestions(
        self, limit: int | None = None, *, verb_id: int | None = None
    ) -> SuggestionResult:
        """Verb adjacency for building exercises.

        ``limit`` is accepted for API compatibility and currently ignored.
        ``verb_id`` restricts the aggregation to one verb.
        """
        index = engine.aggregate_suggestions(self.list_combinations(verb_id))
        subjects = self.words.resolve_words(index.subject_ids)
        objects = self.words.resolve_words(index.object_ids)
        return SuggestionResult(
            verbs=index.verbs,
            subjects=tuple(WordReference.of(subjects[i]) for i in sorted(subjects)),
            objects=tuple(WordReference.of(objects[i]) for i in sorted(objects)),
        )

    def validate_sentence(
        self, subject_id: int, verb_id: int, object_id: int
    ) -> SentenceCheck:
        return engine.check_sentence(
            subject_id, verb_id, object_id,
            find_combination=self.combinations.find_by_triple,
            resolve_word=self.words.resolve_word,
            messages=self.messages,
        )
