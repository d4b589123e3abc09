from cifrascrape.chordpro import ChordProFormatter
from cifrascrape.models import ChordSheet


def _render(**kwargs) -> str:
    values = {"artist": "Tom Jobim", "song": "Wave", "content": "[D7M]Vou te contar"}
    values.update(kwargs)
    return ChordProFormatter().render(ChordSheet(**values))


def test_metadata_block():
    lines = _render().splitlines()
    assert lines[0] == "{title: Wave}"
    assert lines[1] == "{artist: Tom Jobim}"


def test_blank_line_between_metadata_and_body():
    lines = _render().splitlines()
    assert lines[2] == ""
    assert lines[3] == "[D7M]Vou te contar"


def test_video_id_as_meta_directive():
    assert "{meta: youtube abc123}" in _render(video_id="abc123")


def test_no_video_directive_without_id():
    assert "youtube" not in _render()


def test_missing_artist_omitted():
    assert "{artist:" not in _render(artist="")


def test_ends_with_single_newline():
    out = _render(content="[G]\n[D]\n\n\n")
    assert out.endswith("[D]\n")
    assert not out.endswith("\n\n")


def test_trailing_spaces_removed_inner_blank_lines_kept():
    out = _render(content="[G]   \n\nletra  \r\n")
    assert out.splitlines()[3:] == ["[G]", "", "letra"]


def test_leading_blank_lines_dropped():
    out = _render(content="\n\n[Intro] [G]")
    assert out.splitlines()[3] == "[Intro] [G]"


def test_body_only_when_no_metadata():
    assert _render(artist="", song="", content="[G]") == "[G]\n"
