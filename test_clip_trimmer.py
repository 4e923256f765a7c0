#!/usr/bin/env python3
"""
Tests for clip trimming: trim-length bounds, skip policy, ffmpeg command and
failure handling. ffmpeg itself is never executed.
"""

import os
import random
import tempfile
from unittest import mock

import ffmpeg

from shortspipeline import (
    CandidateSegment,
    DownloadedSegment,
    Keyword,
    Rendition,
    TranscodeError,
    draw_trim_duration,
    load_config,
    trim_segment,
    trim_segments,
)
from shortspipeline.ClipTrimmer import build_trim_stream

HD = Rendition(quality="hd", width=1920, height=1080, fps=25.0, url="https://cdn.test/v.mp4")


class FixedRandom(random.Random):
    """A random source that always returns the same value from random()."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def make_segment(segment_id, duration, keyword=None, directory="/samples"):
    keyword = keyword or Keyword("rocket", 0)
    candidate = CandidateSegment(id=segment_id, keyword=keyword, duration=duration, renditions=(HD,))
    return DownloadedSegment(candidate=candidate, rendition=HD, path=os.path.join(directory, f"{segment_id}.mp4"))


def test_trim_duration_stays_in_bounds():
    rng = random.Random(42)
    draws = [draw_trim_duration(rng, 1.0, 3.0) for _ in range(10000)]
    assert all(1.0 <= d < 3.0 for d in draws)
    assert min(draws) < 1.1 and max(draws) > 2.9


def test_trim_duration_never_rounds_up_to_the_upper_bound():
    assert draw_trim_duration(FixedRandom(0.9999999999), 1.0, 3.0) == 2.99
    assert draw_trim_duration(FixedRandom(0.0), 1.0, 3.0) == 1.0


def test_same_seed_gives_same_trim_lengths():
    first = [draw_trim_duration(random.Random(7), 1.0, 3.0) for _ in range(5)]
    second = [draw_trim_duration(random.Random(7), 1.0, 3.0) for _ in range(5)]
    assert first == second


def test_short_segments_are_skipped_without_transcoding():
    config = load_config(dotenv_path=None)
    with mock.patch("shortspipeline.ClipTrimmer.run_ffmpeg") as run:
        for duration in (1.0, 2.5, 3.0):
            assert trim_segment(make_segment(1, duration), "/trimmed", config, random.Random(0)) is None
        run.assert_not_called()


def test_trim_segment_produces_clip_in_bounds():
    config = load_config(dotenv_path=None)
    keyword = Keyword("galaxy", 4)
    with mock.patch("shortspipeline.ClipTrimmer.run_ffmpeg") as run:
        clip = trim_segment(make_segment(99, 3.5, keyword), "/trimmed", config, random.Random(3))

    assert clip is not None
    assert 1.0 <= clip.duration < 3.0
    assert clip.keyword == keyword
    assert clip.segment_id == 99
    assert clip.path == os.path.join("/trimmed", "trimmed_004_99.mp4")
    run.assert_called_once()
    assert run.call_args.kwargs["stage"] == "trim"


def test_transcode_failure_drops_the_clip():
    config = load_config(dotenv_path=None)
    with mock.patch("shortspipeline.ClipTrimmer.run_ffmpeg", side_effect=TranscodeError("boom", stage="trim")):
        assert trim_segment(make_segment(5, 10.0), "/trimmed", config, random.Random(0)) is None


def test_trim_command_normalizes_and_cuts_leading_portion():
    config = load_config(dotenv_path=None)
    args = ffmpeg.compile(build_trim_stream("/samples/in.mp4", "/trimmed/out.mp4", 2.5, config))

    assert args[args.index("-i") + 1] == "/samples/in.mp4"
    assert "-ss" not in args
    assert args[args.index("-t") + 1] == "2.50"
    assert "-an" in args
    assert args[args.index("-vcodec") + 1] == "libx264"
    filters = args[args.index("-filter_complex") + 1]
    for expected in ("scale=1920:1080:force_original_aspect_ratio=decrease", "pad=1920:1080", "setsar=1",
                     "fps=fps=23.976", "format=yuv420p"):
        assert expected in filters
    assert args[-2:] == ["/trimmed/out.mp4", "-y"]


def test_trim_segments_keeps_keyword_order_and_stops_at_target():
    with tempfile.TemporaryDirectory() as tmp:
        config = load_config(dotenv_path=None)
        rocket, galaxy = Keyword("rocket", 0), Keyword("galaxy", 1)
        downloads = {
            galaxy: [make_segment(3, 6.0, galaxy), make_segment(4, 9.0, galaxy)],
            rocket: [make_segment(1, 8.0, rocket), make_segment(2, 2.0, rocket)],
        }
        with mock.patch("shortspipeline.ClipTrimmer.run_ffmpeg"):
            clips = trim_segments(downloads, tmp, config, FixedRandom(0.5), target_duration=3.5)

        # Each clip is 2.0s; rocket #2 is too short, so galaxy #3 reaches 4.0s and #4 is never trimmed
        assert [c.segment_id for c in clips[rocket]] == [1]
        assert [c.segment_id for c in clips[galaxy]] == [3]


def test_trim_segments_trims_everything_when_early_stop_is_off():
    with tempfile.TemporaryDirectory() as tmp:
        config = load_config({"TRIM_ONLY_WHAT_IS_NEEDED": False}, dotenv_path=None)
        rocket = Keyword("rocket", 0)
        downloads = {rocket: [make_segment(i, 8.0, rocket) for i in range(4)]}
        with mock.patch("shortspipeline.ClipTrimmer.run_ffmpeg"):
            clips = trim_segments(downloads, tmp, config, FixedRandom(0.5), target_duration=1.0)

        assert [c.segment_id for c in clips[rocket]] == [0, 1, 2, 3]


if __name__ == "__main__":
    test_trim_duration_stays_in_bounds()
    test_trim_duration_never_rounds_up_to_the_upper_bound()
    test_same_seed_gives_same_trim_lengths()
    test_short_segments_are_skipped_without_transcoding()
    test_trim_segment_produces_clip_in_bounds()
    test_transcode_failure_drops_the_clip()
    test_trim_command_normalizes_and_cuts_leading_portion()
    test_trim_segments_keeps_keyword_order_and_stops_at_target()
    test_trim_segments_trims_everything_when_early_stop_is_off()
    print("\n✅ ClipTrimmer tests passed!")
