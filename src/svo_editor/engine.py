"""Combination engine: decisions over words and allowed triples.

Nothing in this module touches storage. Callers pass in lookup callables
(usually bound methods of a store) and persist whatever the engine hands
back. Every function here is free of side effects on a failing path.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from svo_editor.exceptions import CombinationExistsError, EntityNotFoundError
from svo_editor.models import (
    CombinationModel,
    NewCombination,
    SentenceCheck,
    VerbSuggestion,
    WordModel,
)

logger = logging.getLogger(__name__)

WordResolver = Callable[[int], "WordModel | None"]
BatchWordResolver = Callable[[Iterable[int]], Mapping[int, WordModel]]
TripleLookup = Callable[[int, int, int], "CombinationModel | None"]
VerbLookup = Callable[[int], Iterable[CombinationModel]]


@dataclass(frozen=True)
class Messages:
    """User-facing strings used when rendering a sentence check."""

    valid: str = "Oikein! Hyvä lause."
    invalid: str = "Väärin. Tuo lause ei ole sallittu."
    unknown_subject: str = "[Unknown Subject]"
    unknown_verb: str = "[Unknown Verb]"
    unknown_object: str = "[Unknown Object]"


DEFAULT_MESSAGES = Messages()


def render_sentence(subject: str, verb: str, object: str) -> str:
    """Join the three word texts into the sentence a learner would see."""
    return f"{subject} {verb} {object}"


def _unique(ids: Iterable[int]) -> list[int]:
    # first-seen order, duplicates collapse
    return list(dict.fromkeys(ids))


# ---------------------------------------------------------------------------
# Single combination
# ---------------------------------------------------------------------------

def prepare_combination(
    subject_id: int,
    verb_id: int,
    object_id: int,
    *,
    resolve_word: WordResolver,
    find_combination: TripleLookup,
) -> NewCombination:
    """Resolve a triple and check it is not already allowed.

    Words are resolved subject first, then verb, then object; the first
    missing one is the one reported.

    Raises:
        EntityNotFoundError: a word id does not resolve.
        CombinationExistsError: the exact triple already exists.
    """
    resolved: list[WordModel] = []
    for role, word_id in (
        ("subject", subject_id),
        ("verb", verb_id),
        ("object", object_id),
    ):
        word = resolve_word(word_id)
        if word is None:
            raise EntityNotFoundError(role, word_id)
        resolved.append(word)
    subject, verb, object_ = resolved

    if find_combination(subject_id, verb_id, object_id) is not None:
        raise CombinationExistsError(subject.text, verb.text, object_.text)

    return NewCombination(subject=subject, verb=verb, object=object_)


# ---------------------------------------------------------------------------
# Batch expansion
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BatchPlan:
    """Staged triples for a verb expansion plus everything that was skipped."""

    verb: WordModel
    staged: tuple[NewCombination, ...]
    skipped_subject_ids: tuple[int, ...] = ()
    skipped_object_ids: tuple[int, ...] = ()
    existing: tuple[tuple[int, int, int], ...] = field(default=())


def plan_batch(
    verb_id: int,
    subject_ids: Iterable[int],
    object_ids: Iterable[int],
    *,
    resolve_word: WordResolver,
    resolve_words: BatchWordResolver,
    find_by_verb: VerbLookup,
) -> BatchPlan:
    """Expand a verb over the cartesian product of subjects and objects.

    Subject and object ids are fetched together in one call. Ids that do
    not resolve are skipped, not raised, and listed on the returned plan.
    Triples that already exist are skipped too. Existing triples are read
    once for the whole verb rather than checked pair by pair; the outcome
    is the same as checking every pair on its own.

    Raises:
        EntityNotFoundError: the verb id does not resolve.
    """
    verb = resolve_word(verb_id)
    if verb is None:
        raise EntityNotFoundError("verb", verb_id)

    subjects = _unique(subject_ids)
    objects = _unique(object_ids)
    words = resolve_words(_unique([*subjects, *objects]))

    existing_pairs = {
        (combo.subject.id, combo.object.id) for combo in find_by_verb(verb.id)
    }

    staged: list[NewCombination] = []
    existing: list[tuple[int, int, int]] = []
    skipped_subjects = [sid for sid in subjects if sid not in words]
    skipped_objects = [oid for oid in objects if oid not in words]

    for sid in subjects:
        subject = words.get(sid)
        if subject is None:
            continue
        for oid in objects:
            object_ = words.get(oid)
            if object_ is None:
                continue
            if (sid, oid) in existing_pairs:
                existing.append((sid, verb.id, oid))
                continue
            staged.append(NewCombination(subject=subject, verb=verb, object=object_))

    if skipped_subjects or skipped_objects:
        logger.debug(
            f"Verb {verb.id}: unresolved subject ids {skipped_subjects}, "
            f"object ids {skipped_objects}"
        )
    if existing:
        logger.debug(f"Verb {verb.id}: {len(existing)} triple(s) already exist")

    return BatchPlan(
        verb=verb,
        staged=tuple(staged),
        skipped_subject_ids=tuple(skipped_subjects),
        skipped_object_ids=tuple(skipped_objects),
        existing=tuple(existing),
    )


# ---------------------------------------------------------------------------
# Suggestion aggregation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SuggestionIndex:
    """Per-verb adjacency plus the id sets that still need resolving."""

    verbs: tuple[VerbSuggestion, ...]
    subject_ids: frozenset[int]
    object_ids: frozenset[int]


def aggregate_suggestions(
    combinations: Iterable[CombinationModel],
) -> SuggestionIndex:
    """Group combinations by verb and collect distinct subjects and objects.

    Each verb lists every subject id and every object id seen in some
    combination with it. This over-approximates: listing subject A and
    object Y under verb V does not mean (A, V, Y) is allowed. Only
    :func:`check_sentence` answers that.

    Verbs and id lists are sorted by ascending id.
    """
    verb_words: dict[int, WordModel] = {}
    verb_subjects: dict[int, set[int]] = defaultdict(set)
    verb_objects: dict[int, set[int]] = defaultdict(set)
    all_subjects: set[int] = set()
    all_objects: set[int] = set()

    for combo in combinations:
        vid = combo.verb.id
        verb_words[vid] = combo.verb
        verb_subjects[vid].add(combo.subject.id)
        verb_objects[vid].add(combo.object.id)
        all_subjects.add(combo.subject.id)
        all_objects.add(combo.object.id)

    verbs = tuple(
        VerbSuggestion(
            id=vid,
            text=verb_words[vid].text,
            compatible_subject_ids=tuple(sorted(verb_subjects[vid])),
            compatible_object_ids=tuple(sorted(verb_objects[vid])),
        )
        for vid in sorted(verb_words)
    )
    return SuggestionIndex(
        verbs=verbs,
        subject_ids=frozenset(all_subjects),
        object_ids=frozenset(all_objects),
    )


# ---------------------------------------------------------------------------
# Sentence validation
# ---------------------------------------------------------------------------

def check_sentence(
    subject_id: int,
    verb_id: int,
    object_id: int,
    *,
    find_combination: TripleLookup,
    resolve_word: WordResolver,
    messages: Messages = DEFAULT_MESSAGES,
) -> SentenceCheck:
    """Tell whether a triple is allowed and render the attempted sentence.

    Missing words never raise; they render as placeholders.
    """
    combo = find_combination(subject_id, verb_id, object_id)
    if combo is not None:
        return SentenceCheck(
            valid=True,
            sentence=render_sentence(
                combo.subject.text, combo.verb.text, combo.object.text
            ),
            message=messages.valid,
        )

    texts = []
    for word_id, placeholder in (
        (subject_id, messages.unknown_subject),
        (verb_id, messages.unknown_verb),
        (object_id, messages.unknown_object),
    ):
        word = resolve_word(word_id)
        texts.append(word.text if word is not None else placeholder)

    return SentenceCheck(
        valid=False,
        sentence=render_sentence(*texts),
        message=messages.invalid,
    )
