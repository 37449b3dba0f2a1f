"""svo-editor: allowed Subject–Verb–Object sentence combinations."""

__version__ = "0.1.0"

from .editor import CombinationEditor as CombinationEditor
from .engine import Messages as Messages
from .exceptions import (
    SvoEditorError as SvoEditorError,
    ValidationError as ValidationError,
    EntityNotFoundError as EntityNotFoundError,
    DuplicateEntityError as DuplicateEntityError,
    CombinationExistsError as CombinationExistsError,
    ExportError as ExportError,
    DatabaseError as DatabaseError,
)
from .memory import (
    InMemoryCombinationStore as InMemoryCombinationStore,
    InMemoryWordStore as InMemoryWordStore,
)
from .models import (
    WordRole as WordRole,
    WordModel as WordModel,
    CombinationModel as CombinationModel,
    WordReference as WordReference,
    VerbSuggestion as VerbSuggestion,
    SuggestionResult as SuggestionResult,
    SentenceCheck as SentenceCheck,
    BatchOutcome as BatchOutcome,
    EditRecord as EditRecord,
    IntegrityFinding as IntegrityFinding,
)
from .service import CombinationService as CombinationService

__all__ = [
    # Entry points
    "CombinationEditor",
    "CombinationService",
    "Messages",
    # Stores
    "InMemoryWordStore",
    "InMemoryCombinationStore",
    # Models
    "WordRole",
    "WordModel",
    "CombinationModel",
    "WordReference",
    "VerbSuggestion",
    "SuggestionResult",
    "SentenceCheck",
    "BatchOutcome",
    "EditRecord",
    "IntegrityFinding",
    # Exceptions
    "SvoEditorError",
    "ValidationError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "CombinationExistsError",
    "ExportError",
    "DatabaseError",
]
