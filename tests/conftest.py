"""Shared test fixtures for svo-editor."""

import pytest

from svo_editor import (
    CombinationEditor,
    CombinationService,
    InMemoryCombinationStore,
    InMemoryWordStore,
)


@pytest.fixture
def editor():
    """Create an in-memory editor for testing."""
    with CombinationEditor(":memory:") as ed:
        yield ed


@pytest.fixture
def editor_with_words(editor):
    """Editor with two subjects, one verb and two objects.

    Ids follow creation order: cat=1, eats=2, fish=3, dog=4, meat=5.
    """
    cat = editor.create_word("cat", "SUBJECT")
    eats = editor.create_word("eats", "VERB")
    fish = editor.create_word("fish", "OBJECT")
    dog = editor.create_word("dog", "SUBJECT")
    meat = editor.create_word("meat", "OBJECT")
    return editor, cat, eats, fish, dog, meat


@pytest.fixture
def memory_service():
    """Service over the in-memory stores."""
    words = InMemoryWordStore()
    combinations = InMemoryCombinationStore(words)
    return CombinationService(words, combinations)


@pytest.fixture(params=["sqlite", "memory"])
def service(request):
    """The same service over each store backend."""
    if request.param == "memory":
        words = InMemoryWordStore()
        yield CombinationService(words, InMemoryCombinationStore(words))
    else:
        with CombinationEditor(":memory:") as ed:
            yield ed._service
