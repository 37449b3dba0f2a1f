"""In-memory word and combination stores.

Words live in an arena keyed by integer id. Combinations are indexed by
their exact triple for O(1) existence checks and by verb for suggestion
and bulk-delete queries.
"""

from __future__ import annotations

import itertools
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime, timezone

from svo_editor.exceptions import CombinationExistsError, EntityNotFoundError
from svo_editor.models import CombinationModel, NewCombination, WordModel


def _now() -> str:
    # same shape as SQLite's strftime('%Y-%m-%dT%H:%M:%f')
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]


class InMemoryWordStore:
    """Word arena."""

    def __init__(self) -> None:
        self._words: dict[int, WordModel] = {}
        self._ids = itertools.count(1)
        self.combinations: InMemoryCombinationStore | None = None

    def resolve_word(self, word_id: int) -> WordModel | None:
        return self._words.get(word_id)

    def resolve_words(self, word_ids: Iterable[int]) -> dict[int, WordModel]:
        return {wid: self._words[wid] for wid in word_ids if wid in self._words}

    def find_words(
        self, *, text: str | None = None, role: str | None = None
    ) -> list[WordModel]:
        return [
            w for _, w in sorted(self._words.items())
            if (text is None or w.text == text)
            and (role is None or w.role == role)
        ]

    def find_words_by_role(self, role: str) -> list[WordModel]:
        return self.find_words(role=role)

    def word_exists(self, word_id: int) -> bool:
        return word_id in self._words

    def insert_word(self, text: str, role: str) -> WordModel:
        now = _now()
        word = WordModel(
            id=next(self._ids), text=text, role=role,
            created_at=now, updated_at=now,
        )
        self._words[word.id] = word
        return word

    def update_word(self, word_id: int, text: str, role: str) -> WordModel:
        if word_id not in self._words:
            raise EntityNotFoundError("word", word_id)
        word = replace(self._words[word_id], text=text, role=role, updated_at=_now())
        self._words[word_id] = word
        if self.combinations is not None:
            self.combinations.refresh_word(word)
        return word

    def delete_word(self, word_id: int) -> bool:
        if self._words.pop(word_id, None) is None:
            return False
        if self.combinations is not None:
            self.combinations.delete_by_word(word_id)
        return True


class InMemoryCombinationStore:
    """Combination set with a triple index and a verb index.

    Pass the word store to have word updates and deletions reflected in
    stored combinations, as a relational backend would.
    """

    def __init__(self, words: InMemoryWordStore | None = None) -> None:
        self._combinations: dict[int, CombinationModel] = {}
        self._by_triple: dict[tuple[int, int, int], int] = {}
        self._by_verb: dict[int, set[int]] = defaultdict(set)
        self._ids = itertools.count(1)
        if words is not None:
            words.combinations = self

    def get(self, combination_id: int) -> CombinationModel | None:
        return self._combinations.get(combination_id)

    def exists(self, combination_id: int) -> bool:
        return combination_id in self._combinations

    def find_by_triple(
        self, subject_id: int, verb_id: int, object_id: int
    ) -> CombinationModel | None:
        cid = self._by_triple.get((subject_id, verb_id, object_id))
        return self._combinations[cid] if cid is not None else None

    def find_by_verb(self, verb_id: int) -> list[CombinationModel]:
        return [self._combinations[cid] for cid in sorted(self._by_verb.get(verb_id, ()))]

    def find_by_word(self, word_id: int) -> list[CombinationModel]:
        return [
            c for _, c in sorted(self._combinations.items())
            if word_id in c.triple
        ]

    def count_by_word(self, word_id: int) -> int:
        return sum(1 for c in self._combinations.values() if word_id in c.triple)

    def find_all(self) -> list[CombinationModel]:
        return [c for _, c in sorted(self._combinations.items())]

    def save(self, combination: NewCombination) -> CombinationModel:
        if combination.triple in self._by_triple:
            raise CombinationExistsError(
                combination.subject.text,
                combination.verb.text,
                combination.object.text,
            )
        saved = CombinationModel(
            id=next(self._ids),
            subject=combination.subject,
            verb=combination.verb,
            object=combination.object,
            created_at=_now(),
        )
        self._index(saved)
        return saved

    def save_all(
        self, combinations: Sequence[NewCombination]
    ) -> list[CombinationModel]:
        triples = [c.triple for c in combinations]
        clash = next(
            (c for c in combinations if c.triple in self._by_triple), None
        )
        if clash is None and len(set(triples)) != len(triples):
            seen: set[tuple[int, int, int]] = set()
            for c in combinations:
                if c.triple in seen:
                    clash = c
                    break
                seen.add(c.triple)
        if clash is not None:
            # all-or-nothing, like a rolled back bulk insert
            raise CombinationExistsError(
                clash.subject.text, clash.verb.text, clash.object.text
            )
        return [self.save(c) for c in combinations]

    def delete(self, combination_id: int) -> bool:
        combo = self._combinations.pop(combination_id, None)
        if combo is None:
            return False
        del self._by_triple[combo.triple]
        self._by_verb[combo.verb.id].discard(combination_id)
        return True

    def delete_by_verb(self, verb_id: int) -> int:
        ids = list(self._by_verb.pop(verb_id, ()))
        for cid in ids:
            combo = self._combinations.pop(cid)
            del self._by_triple[combo.triple]
        return len(ids)

    def delete_by_word(self, word_id: int) -> int:
        ids = [c.id for c in self.find_by_word(word_id)]
        for cid in ids:
            self.delete(cid)
        return len(ids)

    def refresh_word(self, word: WordModel) -> None:
        """Swap an updated word into every combination that references it."""
        for combo in self.find_by_word(word.id):
            self._combinations[combo.id] = replace(
                combo,
                subject=word if combo.subject.id == word.id else combo.subject,
                verb=word if combo.verb.id == word.id else combo.verb,
                object=word if combo.object.id == word.id else combo.object,
            )

    def _index(self, combo: CombinationModel) -> None:
        self._combinations[combo.id] = combo
        self._by_triple[combo.triple] = combo.id
        self._by_verb[combo.verb.id].add(combo.id)
