from __future__ import annotations

from app.sources.srt_parser import clean_line, looks_like_srt, normalize_transcript, parse_preserving_groups

SAMPLE_SRT = """1
00:00:01,000 --> 00:00:03,500
<i>DOCTOR: We need to operate</i>
right now.

2
00:00:04,000 --> 00:00:05,000
[siren wailing]

3
00:00:05,500 --> 00:00:07,000
♪ You're gonna be fine. ♪
"""


def test_clean_line_drops_cue_metadata_and_sound_cues() -> None:
  assert clean_line("12") == ""
  assert clean_line("00:00:01,000 --> 00:00:03,500") == ""
  assert clean_line("[door slams]") == ""
  assert clean_line("(laughing)") == ""
  assert clean_line("...") == ""


def test_clean_line_strips_markup_and_speaker_labels() -> None:
  assert clean_line("<b>HOUSE:</b> It's never lupus.") == "It's never lupus."
  assert clean_line("{\\an8}Wait (sighs) for me") == "Wait for me"
  assert clean_line("  Too    many   spaces  ") == "Too many spaces"


def test_parse_preserving_groups_joins_each_cue() -> None:
  assert parse_preserving_groups(SAMPLE_SRT) == "We need to operate right now.\n\nYou're gonna be fine."


def test_empty_input_yields_empty_text() -> None:
  assert parse_preserving_groups(None) == ""
  assert parse_preserving_groups("   \n") == ""


def test_windows_line_endings_are_handled() -> None:
  assert parse_preserving_groups(SAMPLE_SRT.replace("\n", "\r\n")) == "We need to operate right now.\n\nYou're gonna be fine."


def test_looks_like_srt() -> None:
  assert looks_like_srt(SAMPLE_SRT)
  assert not looks_like_srt("Just a transcript of people talking.")


def test_normalize_transcript_keeps_paragraphs() -> None:
  assert normalize_transcript("Hello   there.\n  How are you?\n\n\n  Fine.  ") == "Hello there. How are you?\n\nFine."
