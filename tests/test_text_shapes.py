"""Tests for pageflow.text_shapes — bullet, entry and caption predicates."""

import pytest

from pageflow.text_shapes import (
    first_word_length,
    has_leader_dots,
    is_chinese,
    is_definition_entry,
    is_glossary_entry,
    is_glossary_entry_start,
    is_list_item_start,
    is_list_marker,
    is_new_section_title,
    is_reference_entry,
    is_table_caption,
    is_toc_entry_start,
    starts_with_bullet,
    starts_with_section_number,
)


class TestStartsWithBullet:
    @pytest.mark.parametrize(
        "text",
        ["• item", "- dash", "* star", "(a) letter", "(1) number", "(10) two digits",
         "a. letter", "1) paren", "12. Twelve", "一、中文"],
    )
    def test_bullets(self, text):
        assert starts_with_bullet(text)

    @pytest.mark.parametrize(
        "text", ["", "Plain sentence", "(PPBS) acronym", "1234. too long", "x"]
    )
    def test_not_bullets(self, text):
        assert not starts_with_bullet(text)


class TestListShapes:
    def test_list_item_start_roman(self):
        assert is_list_item_start("(iv) fourth")
        assert is_list_item_start("(2a) sub item")

    def test_list_item_start_plain(self):
        assert not is_list_item_start("Paragraph text")

    def test_list_marker_is_full_match(self):
        assert is_list_marker("(3)")
        assert is_list_marker("b.")
        assert is_list_marker(" • ")
        assert not is_list_marker("1. First item")


class TestEntryShapes:
    def test_glossary_entry(self):
        assert is_glossary_entry("DoD  Department of Defense")
        assert is_glossary_entry("ASD Assistant Secretary")
        assert not is_glossary_entry("ab")

    def test_glossary_entry_start(self):
        assert is_glossary_entry_start("USD(P) Under Secretary for Policy")
        assert is_glossary_entry_start("DoDI Instruction")
        assert not is_glossary_entry_start("the quick fox")
        assert not is_glossary_entry_start("ABC")

    def test_definition_entry(self):
        assert is_definition_entry("access control.  The process of limiting")
        assert is_definition_entry("DAA.  Defined in the glossary")
        assert not is_definition_entry("short")

    def test_reference_entry(self):
        assert is_reference_entry("DoD Directive 5000.01, The Defense Acquisition")
        assert is_reference_entry("Title 10, United States Code")
        assert is_reference_entry("10 U.S.C. 2302")
        assert not is_reference_entry("DoD 5000")


class TestStructureShapes:
    @pytest.mark.parametrize(
        "text",
        ["Table 1 Results", "Figure 12: Layout", "表 3 数据", "Source: survey", "NOTES: see"],
    )
    def test_captions(self, text):
        assert is_table_caption(text)

    def test_not_caption(self):
        assert not is_table_caption("The table below")
        assert not is_table_caption("")

    def test_section_titles(self):
        assert is_new_section_title("SECTION 3: RESPONSIBILITIES")
        assert is_new_section_title("Glossary")
        assert not is_new_section_title("In this section")

    def test_section_numbers(self):
        assert starts_with_section_number("3.1 Scope")
        assert starts_with_section_number("2. Purpose")
        assert starts_with_section_number("A.2 Terms")
        assert not starts_with_section_number("Scope 3.1")

    def test_toc_entry_start(self):
        assert is_toc_entry_start("1.2 Applicability")
        assert is_toc_entry_start("SECTION 2 RESPONSIBILITIES")
        assert not is_toc_entry_start("Responsibilities")

    def test_leader_dots(self):
        assert has_leader_dots("Purpose ........ 3")
        assert has_leader_dots("Purpose … 3")
        assert not has_leader_dots("Purpose... 3")


class TestHelpers:
    def test_is_chinese(self):
        assert is_chinese("中")
        assert not is_chinese("a")

    def test_first_word_length(self):
        assert first_word_length("hello world") == 5
        assert first_word_length("") == 0
        assert first_word_length("x" * 50, limit=20) == 20
