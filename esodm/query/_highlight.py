from __future__ import annotations

from typing import Any

from esodm.core import DataModel


class HighlightParameters(DataModel):
    """Highlight parameters shared by the top level and each field.

    Unset parameters are left out of the request.

    Attributes:
        boundary_chars: Characters that delimit boundaries.
        boundary_max_scan: How far to scan for boundary characters.
        boundary_scanner: Scanner, one of chars, sentence or word.
        boundary_scanner_locale: Locale used by the sentence scanner.
        force_source: Highlight from the source even if stored separately.
        fragmenter: Fragmenter, simple or span.
        fragment_size: Size of each fragment in characters.
        no_match_size: Text returned when nothing matches.
        number_of_fragments: Maximum number of fragments.
        order: Fragment order, "score" to sort by score.
        phrase_limit: Number of matching phrases considered.
        pre_tags: Tags inserted before highlighted text.
        post_tags: Tags inserted after highlighted text.
        require_field_match: Only highlight fields that matched.
        type: Highlighter type, unified, plain or fvh.
    """

    boundary_chars: str | None = None
    boundary_max_scan: int | None = None
    boundary_scanner: str | None = None
    boundary_scanner_locale: str | None = None
    force_source: bool | None = None
    fragmenter: str | None = None
    fragment_size: int | None = None
    no_match_size: int | None = None
    number_of_fragments: int | None = None
    order: str | None = None
    phrase_limit: int | None = None
    pre_tags: list[str] | None = None
    post_tags: list[str] | None = None
    require_field_match: bool | None = None
    type: str | None = None


class HighlightTopLevelParameters(HighlightParameters):
    """Parameters only valid on the top level.

    Attributes:
        encoder: Encoder, default or html.
        tags_schema: Tags schema, styled.
    """

    encoder: str | None = None
    tags_schema: str | None = None


class HighlightFieldParameters(HighlightParameters):
    """Parameters only valid on a field.

    Attributes:
        fragment_offset: Margin from which to start highlighting.
        matched_fields: Fields whose matches are combined into this one.
    """

    fragment_offset: int | None = None
    matched_fields: list[str] | None = None


class HighlightField(DataModel):
    name: str
    parameters: HighlightFieldParameters | None = None


class Highlight(DataModel):
    parameters: HighlightTopLevelParameters | None = None
    fields: list[HighlightField] = []

    @staticmethod
    def of(*names: str, **parameters: Any) -> Highlight:
        return Highlight(
            parameters=(
                HighlightTopLevelParameters(**parameters)
                if parameters
                else None
            ),
            fields=[HighlightField(name=name) for name in names],
        )


class HighlightQuery(DataModel):
    """Highlight specification.

    Attributes:
        highlight: Highlight definition.
        entity_type: Type used to resolve property names to field names.
    """

    highlight: Highlight
    entity_type: type | None = None
