from ._adapters import DocumentAdapters
from ._builder import EntityCreator, SearchDocumentResponseBuilder
from ._document import (
    Document,
    DocumentFieldAdapter,
    Explanation,
    Failure,
    IndexedObjectInformation,
    MultiGetItem,
    NestedMetaData,
    SearchDocument,
    SeqNoPrimaryTerm,
)
from ._response import (
    CompletionOption,
    PhraseOption,
    SearchDocumentResponse,
    Suggest,
    SuggestEntry,
    Suggestion,
    SuggestionKind,
    TermOption,
    TotalHitsRelation,
)

__all__ = [
    "CompletionOption",
    "Document",
    "DocumentAdapters",
    "DocumentFieldAdapter",
    "EntityCreator",
    "Explanation",
    "Failure",
    "IndexedObjectInformation",
    "MultiGetItem",
    "NestedMetaData",
    "PhraseOption",
    "SearchDocument",
    "SearchDocumentResponse",
    "SearchDocumentResponseBuilder",
    "SeqNoPrimaryTerm",
    "Suggest",
    "SuggestEntry",
    "Suggestion",
    "SuggestionKind",
    "TermOption",
    "TotalHitsRelation",
]
