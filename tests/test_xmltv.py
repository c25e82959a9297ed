import io
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta

import pytest

from scrape2epg.model import Channel, Programme, SubtitleFlag
from scrape2epg.utils import TimeUtils
from scrape2epg.xmltv import XmltvWriter

TZ = TimeUtils.fixed_offset(1)


def write(channels=(), programmes=()):
    fh = io.StringIO()
    writer = XmltvWriter(fh)
    writer.start({"source-info-name": "tv.bluewin.ch", "generator-info-name": "scrape2epg/test"})
    for channel in channels:
        writer.write_channel(channel)
    for programme in programmes:
        writer.write_programme(programme)
    writer.end()
    return writer, fh.getvalue()


def test_header_and_counts():
    channel = Channel("11", "SRF 1", "11.tv.bluewin.ch", "https://tv.bluewin.ch/logo/11.png")
    start = datetime(2024, 1, 1, 20, 0, tzinfo=TZ)
    writer, output = write([channel], [Programme(channel="11.tv.bluewin.ch", title=[("Tagesschau", "de")], start=start)])

    assert output.startswith('<?xml version="1.0" encoding="utf-8"?>\n<!DOCTYPE tv SYSTEM "xmltv.dtd">\n')
    assert writer.station_count == 1
    assert writer.episode_count == 1

    tv = ET.fromstring(output.split("\n", 2)[2])
    assert tv.get("source-info-name") == "tv.bluewin.ch"
    assert tv.find("channel").get("id") == "11.tv.bluewin.ch"
    assert tv.find("channel/icon").get("src") == "https://tv.bluewin.ch/logo/11.png"
    programme = tv.find("programme")
    assert programme.get("start") == "20240101200000 +0100"
    assert programme.get("stop") is None


def test_programme_element_order():
    start = datetime(2024, 1, 1, 20, 15, tzinfo=TZ)
    programme = Programme(
        channel="c",
        title=[("Tatort", "de")],
        start=start,
        stop=start + timedelta(minutes=90),
        sub_title=[("Der Fall", "de")],
        category=[("Movie / Drama", "en"), ("Krimi", "de")],
        description=[("Ein Mord & mehr", "de")],
        credits={"actor": ["Anna", "Ben"], "director": ["Carl"]},
        subtitle_flag=SubtitleFlag.TELETEXT,
        rerun=True,
        rating="12",
        length=90,
    )
    _, output = write(programmes=[programme])
    element = ET.fromstring(output.split("\n", 2)[2]).find("programme")

    assert [child.tag for child in element] == [
        "title", "sub-title", "desc", "credits", "category", "category",
        "length", "previously-shown", "subtitles", "rating",
    ]
    assert [child.tag for child in element.find("credits")] == ["director", "actor", "actor"]
    assert element.find("desc").text == "Ein Mord & mehr"
    assert [c.text for c in element.findall("category")] == ["Movie / Drama", "Krimi"]
    assert element.find("subtitles").get("type") == "teletext"
    assert element.find("rating/value").text == "12"
    assert element.get("stop") == "20240101214500 +0100"


def test_start_twice_rejected():
    writer = XmltvWriter(io.StringIO())
    writer.start()
    with pytest.raises(RuntimeError):
        writer.start()


def test_display_name_language():
    fh = io.StringIO()
    writer = XmltvWriter(fh, language="he")
    writer.write_channel(Channel("1", "כאן", "1.tvguide.co.il"))
    assert '<display-name lang="he">כאן</display-name>' in fh.getvalue()
