from datetime import date, datetime, time

from scrape2epg.utils import HtmlUtils, TextUtils, TimeUtils, backup_output


class TestTimeUtils:
    def test_parse_clock_formats(self):
        assert TimeUtils.parse_clock("20:50") == time(20, 50)
        assert TimeUtils.parse_clock("20h50") == time(20, 50)
        assert TimeUtils.parse_clock(" 6.05 ") == time(6, 5)

    def test_parse_clock_rejects_garbage(self):
        assert TimeUtils.parse_clock("25:00") is None
        assert TimeUtils.parse_clock("now") is None
        assert TimeUtils.parse_clock(None) is None

    def test_weekday_index_sunday_is_one(self):
        assert TimeUtils.weekday_index(date(2024, 1, 7)) == 1  # Sunday
        assert TimeUtils.weekday_index(date(2024, 1, 1)) == 2  # Monday
        assert TimeUtils.weekday_index(date(2024, 1, 6)) == 7  # Saturday

    def test_weekday_index_wraps_after_saturday(self):
        assert TimeUtils.weekday_index(date(2024, 1, 13)) == 7
        assert TimeUtils.weekday_index(date(2024, 1, 14)) == 1

    def test_conv_time(self):
        tz = TimeUtils.fixed_offset(-3)
        assert TimeUtils.conv_time(datetime(2024, 1, 1, 10, 0, tzinfo=tz)) == "20240101100000 -0300"


class TestTextUtils:
    def test_visual_hebrew_to_logical(self):
        assert TextUtils.visual_to_logical("ברעה תושדח") == "חדשות הערב"

    def test_latin_text_untouched(self):
        assert TextUtils.visual_to_logical("Channel 2") == "Channel 2"

    def test_decode_windows_1255(self):
        assert TextUtils.decode_page("חדשות".encode("windows-1255"), "windows-1255") == "חדשות"

    def test_decode_replaces_bad_bytes(self, caplog):
        assert TextUtils.decode_page(b"ok \xff", "utf-8") == "ok �"
        assert "replacing bad bytes" in caplog.text


class TestHtmlUtils:
    def test_conv_html_escapes(self):
        assert HtmlUtils.conv_html('Tom & "Jerry" <1>') == "Tom &amp; &quot;Jerry&quot; &lt;1&gt;"

    def test_clean_text_collapses_whitespace(self):
        assert HtmlUtils.clean_text("  a\xa0\n b  ") == "a b"


def test_backup_output(tmp_path):
    output = tmp_path / "guide.xml"
    assert backup_output(output) is None
    output.write_text("<tv/>", encoding="utf-8")
    backup = backup_output(output)
    assert backup is not None
    assert backup.read_text(encoding="utf-8") == "<tv/>"
