#!/usr/bin/env python3
"""
Tests for the run inputs: the keyword file and the narration length.
"""

import os
import tempfile
from unittest import mock

import pytest
from pydub.exceptions import CouldntDecodeError

from shortspipeline import Keyword, get_narration_duration, load_keywords, parse_keywords


def test_keywords_keep_file_order_and_drop_blank_lines():
    keywords = parse_keywords("rocket launch\n\n  galaxy  \n\t\ntelescope\n")

    assert keywords == [Keyword("rocket launch", 0), Keyword("galaxy", 1), Keyword("telescope", 2)]


def test_duplicate_keywords_are_distinct_entries():
    keywords = parse_keywords("ocean\nocean\n")
    assert [k.position for k in keywords] == [0, 1]
    assert len(set(keywords)) == 2


def test_load_keywords_reads_utf8_file():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "keywords.txt")
        with open(path, "w", encoding="utf-8") as f:
            f.write("café\r\nnebula\r\n")
        assert [str(k) for k in load_keywords(path)] == ["café", "nebula"]


def test_empty_keyword_file_gives_no_keywords():
    assert parse_keywords("") == []
    assert parse_keywords("\n \n") == []


def test_missing_narration_raises():
    with pytest.raises(FileNotFoundError):
        get_narration_duration("/nonexistent/narration.mp3")


def test_narration_length_comes_from_pydub():
    with tempfile.NamedTemporaryFile(suffix=".mp3") as audio:
        with mock.patch("shortspipeline.Narration.AudioSegment") as segment:
            segment.from_file.return_value.duration_seconds = 42.5
            assert get_narration_duration(audio.name) == 42.5


def test_narration_falls_back_to_ffprobe():
    with tempfile.NamedTemporaryFile(suffix=".mp3") as audio:
        with mock.patch("shortspipeline.Narration.AudioSegment") as segment, \
                mock.patch("shortspipeline.Narration.probe_duration", return_value=12.0) as probe:
            segment.from_file.side_effect = CouldntDecodeError("bad header")
            assert get_narration_duration(audio.name) == 12.0
            probe.assert_called_once_with(audio.name)


def test_undecodable_narration_is_a_value_error():
    with tempfile.NamedTemporaryFile(suffix=".mp3") as audio:
        with mock.patch("shortspipeline.Narration.AudioSegment") as segment, \
                mock.patch("shortspipeline.Narration.probe_duration", return_value=None):
            segment.from_file.side_effect = CouldntDecodeError("bad header")
            with pytest.raises(ValueError):
                get_narration_duration(audio.name)


if __name__ == "__main__":
    test_keywords_keep_file_order_and_drop_blank_lines()
    test_duplicate_keywords_are_distinct_entries()
    test_load_keywords_reads_utf8_file()
    test_empty_keyword_file_gives_no_keywords()
    test_missing_narration_raises()
    test_narration_length_comes_from_pydub()
    test_narration_falls_back_to_ffprobe()
    test_undecodable_narration_is_a_value_error()
    print("\n✅ Input tests passed!")
