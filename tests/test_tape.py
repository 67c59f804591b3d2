from pycpp.tape import Fragment, Tape


def _pending(tape, offset=0):
    return "".join(ch for ch, _ in tape.chars(offset))


def test_read_single_frame():
    tape = Tape.from_text("abc")
    assert _pending(tape) == "abc"
    assert _pending(tape, 1) == "bc"
    tape.skip(2)
    assert tape.top.pos == 2
    assert not tape.at_end
    tape.skip(1)
    assert tape.at_end


def test_push_reads_before_pending_text():
    tape = Tape.from_text("xyz")
    tape.skip(1)
    tape.push([Fragment("ab"), Fragment("N", painted=True)], frozenset({"M"}))
    assert _pending(tape) == "abNyz"
    assert tape.depth == 3
    assert tape.top.text == "ab"
    assert tape.top.hideset == {"M"}
    assert tape.top.is_hidden("M")
    assert not tape.top.is_hidden("X")

    tape.skip(2)
    assert tape.top.painted
    assert tape.top.is_hidden("X")

    tape.skip(1)
    assert tape.depth == 1
    assert not tape.top.is_hidden("M")


def test_empty_fragments_are_not_pushed():
    tape = Tape.from_text("a")
    tape.push([Fragment("")], frozenset({"M"}))
    assert tape.depth == 1


def test_skip_across_frames_returns_last_frame():
    tape = Tape.from_text("cd")
    tape.push([Fragment("ab")], frozenset({"M"}))
    frame = tape.skip(3)
    assert frame.text == "cd"
    assert frame.hideset == frozenset()
    assert _pending(tape) == "d"


def test_base_pos_tracks_source_text():
    tape = Tape.from_text("abcd")
    tape.skip(1)
    tape.push([Fragment("xy")], frozenset({"M"}))
    tape.skip(3)
    assert tape.base_pos == 2
    tape.skip(2)
    assert tape.at_end
    assert tape.base_pos == 4
    assert Tape.from_text("").base_pos == 0
