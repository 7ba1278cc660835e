from __future__ import annotations

import pytest

from modbot.irc.framer import LineFramer

LINES = [
    ":bob!u@h PRIVMSG #c :hello there",
    "PING :irc.example.net",
    ":srv 376 modbot :End of /MOTD command.",
]
STREAM = "".join(f"{line}\r\n" for line in LINES).encode("utf-8")


def test_single_chunk_yields_all_lines_in_order():
    framer = LineFramer()
    assert framer.feed(STREAM) == LINES
    assert framer.pending == ""


@pytest.mark.parametrize("split", range(1, len(STREAM)))
def test_any_two_way_split_yields_same_lines(split: int):
    framer = LineFramer()
    out = framer.feed(STREAM[:split]) + framer.feed(STREAM[split:])
    assert out == LINES


def test_byte_at_a_time():
    framer = LineFramer()
    out: list[str] = []
    for i in range(len(STREAM)):
        out.extend(framer.feed(STREAM[i : i + 1]))
    assert out == LINES


def test_split_inside_terminator_emits_nothing_until_newline():
    framer = LineFramer()
    assert framer.feed(b"PING :a\r") == []
    assert framer.feed(b"\nPING :b\r\n") == ["PING :a", "PING :b"]


def test_partial_line_is_kept_not_truncated():
    framer = LineFramer()
    assert framer.feed(":bob PRIVMSG #c :hel") == []
    assert framer.pending == ":bob PRIVMSG #c :hel"
    assert framer.feed("lo\r\n") == [":bob PRIVMSG #c :hello"]


def test_multibyte_character_split_across_reads():
    data = ":bob PRIVMSG #c :héllo ☃\r\n".encode()
    cut = data.index("☃".encode()) + 1  # inside the 3-byte snowman
    framer = LineFramer()
    assert framer.feed(data[:cut]) == []
    assert framer.feed(data[cut:]) == [":bob PRIVMSG #c :héllo ☃"]


def test_blank_lines_discarded_and_lines_trimmed():
    framer = LineFramer()
    assert framer.feed("\r\n   \r\n  PING :x  \r\n\r\n") == ["PING :x"]


def test_invalid_utf8_does_not_raise():
    framer = LineFramer()
    assert framer.feed(b"PING :\xff\xfe\r\n") == ["PING :\ufffd\ufffd"]


def test_empty_chunk():
    assert LineFramer().feed(b"") == []


def test_reset_drops_pending_fragment():
    framer = LineFramer()
    framer.feed("PING :par")
    framer.reset()
    assert framer.pending == ""
    assert framer.feed("PING :new\r\n") == ["PING :new"]
