from reportdeck.core.sections import (
    NUMBERED_TYPES,
    SectionType,
    insight_texts,
    is_numbered,
    portable_text_to_lines,
    report_sections,
    section_type,
)


def test_numbered_subset_is_the_chart_bearing_types():
    assert NUMBERED_TYPES == {"contentSection", "chartInsightsSection"}
    assert is_numbered(SectionType.CONTENT.value)
    assert not is_numbered("titleSection")
    assert not is_numbered(None)


def test_section_type_reads_discriminant():
    assert section_type({"_type": "timelineSection"}) == "timelineSection"
    assert section_type({"title": "x"}) is None
    assert section_type("titleSection") is None


def test_report_sections_handles_missing_lists():
    assert report_sections(None) == []
    assert report_sections({}) == []
    assert report_sections({"sections": None}) == []
    secs = [{"_type": "titleSection"}]
    assert report_sections({"sections": secs}) is secs


def test_portable_text_to_lines():
    blocks = [
        {"_type": "block", "children": [{"text": "Hello "}, {"text": "world"}]},
        {"_type": "image"},
        {"_type": "block", "children": []},
        {"_type": "block", "children": [{"text": "Second"}]},
    ]
    assert portable_text_to_lines(blocks) == ["Hello world", "Second"]
    assert portable_text_to_lines(None) == []
    assert portable_text_to_lines("text") == []


def test_insight_texts_accepts_strings_and_objects():
    assert insight_texts(["a", {"text": "b"}, {"other": 1}, 3]) == ["a", "b", ""]
    assert insight_texts(None) == []
