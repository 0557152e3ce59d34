from datetime import datetime

import pytest

from domains.naming.templates import (
    NamingTemplate,
    list_templates,
    resolve_journal,
    sanitize_for_filename,
)
from renamer.models.schemas import DocumentMetadata

INVALID = set('/<>:"|\\?*')


@pytest.fixture
def full_metadata() -> DocumentMetadata:
    return DocumentMetadata(
        title="Deep Learning for Genomics",
        author="Jane A. Smith",
        subject="Nature Communications",
        creation_date=datetime(2023, 5, 17, 9, 30),
    )


@pytest.mark.parametrize(
    "template, expected",
    [
        (NamingTemplate.AUTHOR_TITLE_JOURNAL_YEAR, "Smith_Deep_Learning_for_Genomics_Nature_Communications_2023.pdf"),
        (NamingTemplate.TITLE_AUTHOR_YEAR, "Deep_Learning_for_Genomics_Smith_2023.pdf"),
        (NamingTemplate.AUTHOR_YEAR_TITLE, "Smith_2023_Deep_Learning_for_Genomics.pdf"),
        (NamingTemplate.YEAR_AUTHOR_TITLE, "2023_Smith_Deep_Learning_for_Genomics.pdf"),
        (NamingTemplate.AUTHOR_TITLE_YEAR, "Smith_Deep_Learning_for_Genomics_2023.pdf"),
    ],
)
def test_every_template_orders_fields(full_metadata, template, expected):
    assert template.generate_filename(full_metadata) == expected


def test_missing_metadata_falls_back_to_unknown_fields():
    name = NamingTemplate.AUTHOR_TITLE_JOURNAL_YEAR.generate_filename(DocumentMetadata())
    assert name == "Unknown_Author_Unknown_Title_Unknown_Journal_Unknown_Year.pdf"


def test_generation_is_repeatable(full_metadata):
    for template in NamingTemplate:
        assert template.generate_filename(full_metadata) == template.generate_filename(full_metadata)


def test_source_extension_is_kept(full_metadata):
    name = NamingTemplate.AUTHOR_TITLE_YEAR.generate_filename(full_metadata, ".PDF")
    assert name == "Smith_Deep_Learning_for_Genomics_2023.PDF"
    assert NamingTemplate.AUTHOR_TITLE_YEAR.generate_filename(full_metadata, "pdf").endswith("_2023.pdf")


@pytest.mark.parametrize(
    "raw",
    [
        'a/b<c>d:e"f|g\\h?i*j',
        "Title: A Study / Review?",
        "   spaced    out   words  ",
        "x" * 500,
        "C:\\Users\\paper",
        "ümlaut – dash “quoted” title",
    ],
)
def test_sanitize_never_emits_invalid_characters(raw):
    result = sanitize_for_filename(raw)
    assert not INVALID & set(result)
    assert 0 < len(result) <= 100
    assert " " not in result


@pytest.mark.parametrize("raw", ["", "   ", "!!!", "...,;", '?*:"', "— …"])
def test_sanitize_empty_or_punctuation_only_is_unknown(raw):
    assert sanitize_for_filename(raw) == "Unknown"


def test_sanitize_strips_punctuation_around_words():
    assert sanitize_for_filename("Hello, World! (2nd ed.)") == "Hello_World_2nd_ed"
    assert sanitize_for_filename("Cats/Dogs") == "Cats_Dogs"


def test_sanitize_replaces_each_invalid_character_with_underscore():
    assert sanitize_for_filename("a//b") == "a__b"
    assert sanitize_for_filename("Title: A Study") == "Title_A_Study"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("C++ Programming", "C++_Programming"),
        ("$100 Genome", "$100_Genome"),
        ("x^2 + y = z", "x^2_+_y_=_z"),
    ],
)
def test_sanitize_keeps_symbols_that_are_not_punctuation(raw, expected):
    assert sanitize_for_filename(raw) == expected


def test_sanitize_truncates_each_field():
    long_title = " ".join(["word"] * 60)
    metadata = DocumentMetadata(title=long_title, author="Jane Smith", creation_date=datetime(2020, 1, 1))

    name = NamingTemplate.AUTHOR_TITLE_YEAR.generate_filename(metadata)

    title_part = name[len("Smith_"):-len("_2020.pdf")]
    assert len(title_part) == 100


def test_journal_prefers_subject():
    metadata = DocumentMetadata(subject="Cell Reports", producer="IEEE Xplore", title="Letters")
    assert resolve_journal(metadata) == "Cell_Reports"


def test_journal_from_producer_uses_hint_list_order():
    metadata = DocumentMetadata(producer="Springer Nature LaTeX")
    assert resolve_journal(metadata) == "Nature"

    metadata = DocumentMetadata(producer="acm sigconf template")
    assert resolve_journal(metadata) == "ACM"


def test_journal_from_title_takes_three_word_window():
    metadata = DocumentMetadata(title="Annual Review of Biochemistry")
    assert resolve_journal(metadata) == "Annual_Review_of"


def test_journal_window_is_clamped_at_title_edges():
    assert resolve_journal(DocumentMetadata(title="Proceedings of the Conference")) == "Proceedings_of"
    assert resolve_journal(DocumentMetadata(title="A Brief Review")) == "Brief_Review"
    assert resolve_journal(DocumentMetadata(title="Transactions")) == "Transactions"


def test_journal_unknown_when_nothing_matches():
    metadata = DocumentMetadata(title="Deep Learning for Genomics", producer="pdfTeX-1.40")
    assert resolve_journal(metadata) == "Unknown_Journal"


def test_template_descriptions_and_examples():
    assert NamingTemplate.AUTHOR_TITLE_JOURNAL_YEAR.description == "firstauthor_title_journal_year.pdf"
    assert NamingTemplate.YEAR_AUTHOR_TITLE.description == "year_firstauthor_title.pdf"
    assert NamingTemplate.AUTHOR_TITLE_JOURNAL_YEAR.example_output == "Smith_Machine_Learning_in_Biology_Nature_2023.pdf"
    assert NamingTemplate.TITLE_AUTHOR_YEAR.example_output == "Machine_Learning_in_Biology_Smith_2023.pdf"

    names = [entry["name"] for entry in list_templates()]
    assert names == [template.value for template in NamingTemplate]


def test_template_from_value():
    assert NamingTemplate.from_value("Author-Year-Title") is NamingTemplate.AUTHOR_YEAR_TITLE
    with pytest.raises(ValueError):
        NamingTemplate.from_value("journal_only")
