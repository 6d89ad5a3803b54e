# tests/test_formats.py
from __future__ import annotations

import asyncio
import random

import pytest

from reelgrab.helper.errors import MalformedOutput
from reelgrab.models.metadata import FormatRecord
from reelgrab.services import instagram
from tests.conftest import FakeExtractor, make_info


def _rec(format_id="1", ext="mp4", vcodec="avc1", acodec="mp4a", height=720, tbr=500, **kw) -> FormatRecord:
    return FormatRecord(format_id=format_id, ext=ext, vcodec=vcodec, acodec=acodec,
                        height=height, tbr=tbr, **kw)


def test_highest_bitrate_wins_per_quality_label():
    options = instagram.select_options([
        _rec("low", height=720, tbr=500),
        _rec("high", height=720, tbr=900),
    ])
    assert [o.format_id for o in options] == ["high"]
    assert options[0].quality_label == "720p"


def test_first_seen_wins_on_equal_bitrate():
    options = instagram.select_options([
        _rec("first", height=480, tbr=700),
        _rec("second", height=480, tbr=700),
    ])
    assert [o.format_id for o in options] == ["first"]


def test_sorted_by_height_then_bitrate():
    options = instagram.select_options([
        _rec("a", height=480, tbr=300),
        _rec("b", height=1080, tbr=2000),
        _rec("c", height=0, tbr=50, format_note="low"),
        _rec("d", height=0, tbr=80, format_note="audio-ish"),
        _rec("e", height=720, tbr=900),
    ])
    assert [o.format_id for o in options] == ["b", "e", "a", "d", "c"]


@pytest.mark.parametrize("missing", [
    {"vcodec": "none"},
    {"vcodec": None},
    {"vcodec": ""},
    {"acodec": "none"},
    {"acodec": None},
    {"format_id": ""},
    {"ext": "webm"},
])
def test_non_muxed_or_unplayable_records_are_dropped(missing):
    assert instagram.select_options([_rec("x", **missing)]) == []


def test_label_falls_back_to_note_then_sd():
    options = instagram.select_options([
        _rec("noted", height=0, tbr=10, format_note="Original"),
        _rec("bare", height=0, tbr=5),
    ])
    assert {o.quality_label for o in options} == {"Original", "SD"}


def test_empty_input_gives_empty_list():
    assert instagram.select_options([]) == []


def test_random_records_keep_invariants():
    rng = random.Random(7)
    records = [
        _rec(
            format_id=rng.choice(["", str(i)]),
            ext=rng.choice(["mp4", "mp4", "webm"]),
            vcodec=rng.choice(["avc1", "none", None]),
            acodec=rng.choice(["mp4a", "none", None]),
            height=rng.choice([0, 360, 480, 720, 1080]),
            tbr=rng.choice([0, 100, 500, 900, 1500]),
            format_note=rng.choice([None, "hd", "sd"]),
        )
        for i in range(200)
    ]
    options = instagram.select_options(records)
    labels = [o.quality_label for o in options]
    assert len(labels) == len(set(labels))

    for a, b in zip(options, options[1:]):
        assert a.height > b.height or (a.height == b.height and a.tbr >= b.tbr)

    by_id = {r.format_id: r for r in records if r.format_id}
    for option in options:
        record = by_id[option.format_id]
        assert record.has_video and record.has_audio and record.ext == "mp4"


def test_parse_media_info_defaults_and_fallbacks():
    info = instagram.parse_media_info({
        "title": None,
        "uploader": None,
        "channel": "somechannel",
        "duration": None,
        "formats": [
            "not a dict",
            {"format_id": 12, "ext": "mp4", "vcodec": "avc1", "acodec": "mp4a", "height": None, "tbr": None},
        ],
    })
    assert info.title == "Instagram Video"
    assert info.author == "somechannel"
    assert info.duration_seconds == 0
    assert info.thumbnail_url is None
    assert len(info.formats) == 1
    assert info.formats[0].format_id == "12"
    assert info.formats[0].height == 0
    assert info.formats[0].tbr == 0


def test_parse_media_info_without_formats():
    info = instagram.parse_media_info({"title": "t", "formats": None})
    assert info.formats == []
    assert info.author == "Unknown"


def test_parse_media_info_rejects_negative_duration():
    with pytest.raises(MalformedOutput):
        instagram.parse_media_info({"duration": -3})


def test_find_format_looks_at_all_records():
    info = instagram.parse_media_info(make_info())
    assert instagram.find_format(info, "dash-a").acodec == "mp4a.40.2"
    assert instagram.find_format(info, "10").height == 1080
    assert instagram.find_format(info, "nope") is None


def test_fetch_metadata_goes_through_extractor():
    extractor = FakeExtractor()
    info = asyncio.run(instagram.fetch_metadata("https://instagram.com/p/abc/", extractor))
    assert extractor.metadata_calls == ["https://instagram.com/p/abc/"]
    assert info.author == "latte.art"
    assert [o.format_id for o in instagram.select_options(info.formats)] == ["10", "8"]
