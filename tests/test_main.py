import io
import sys

import pytest
from conftest import FakeDownloader, html_page

from scrape2epg import __version__
from scrape2epg import main as main_module
from scrape2epg.args import ArgumentParser

CHANNELS = html_page(
    '<div id="channels">'
    '<a class="channel" data-id="1">ETV</a>'
    '<a class="channel" data-id="2">ETV2</a>'
    "</div>"
)
DAY = html_page(
    '<ul><li class="broadcast"><time class="start">10:00</time><span class="title">A</span></li>'
    '<li class="broadcast"><time class="start">23:30</time><span class="title">B</span></li></ul>'
)


def route(url, params):
    if url.endswith("/kanalid"):
        return CHANNELS
    if "/kava/" in url:
        return DAY
    return None


@pytest.fixture
def fake_network(monkeypatch):
    downloader = FakeDownloader(handler=route)
    monkeypatch.setattr(main_module, "OptimizedDownloader", lambda **kwargs: downloader)
    return downloader


class TestArgumentParser:
    def test_capabilities(self, capsys):
        with pytest.raises(SystemExit) as exit_info:
            ArgumentParser("ee").parse_args(["--capabilities"])
        assert exit_info.value.code == 0
        assert capsys.readouterr().out.split() == ["baseline", "manualconfig"]

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            ArgumentParser("il").parse_args(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_description(self, capsys):
        with pytest.raises(SystemExit):
            ArgumentParser().parse_args(["--site", "re", "--description"])
        assert capsys.readouterr().out.strip() == "Reunion Island (linfo.re)"

    def test_generic_entry_point_requires_site(self):
        with pytest.raises(SystemExit) as exit_info:
            ArgumentParser().parse_args([])
        assert exit_info.value.code == 2

    def test_site_fixed_for_per_site_parser(self):
        args = ArgumentParser("br_net").parse_args(["--city", "21", "--days", "3"])
        assert args.site == "br_net"
        assert args.city == "21"
        assert args.days == 3
        assert args.offset == 0

    def test_invalid_workers(self):
        with pytest.raises(SystemExit):
            ArgumentParser("ee").parse_args(["--workers", "0"])

    def test_id_template_needs_placeholder(self):
        with pytest.raises(SystemExit):
            ArgumentParser("ee").parse_args(["--id-template", "fixed.example"])

    def test_logging_config(self):
        parser = ArgumentParser("ee")
        assert parser.get_logging_config(parser.parse_args(["--quiet"]))["level"] == "warning"
        assert parser.get_logging_config(parser.parse_args(["--debug"]))["level"] == "debug"
        assert parser.get_logging_config(parser.parse_args([]))["level"] == "default"

    def test_default_config_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        defaults = ArgumentParser().get_system_defaults("ch_bluewin")
        assert defaults == {"config_file": tmp_path / ".xmltv" / "tv_grab_ch_bluewin.conf"}


class TestMain:
    def test_list_channels(self, fake_network, capsys):
        assert main_module.main("ee", ["--list-channels", "--quiet"]) == 0
        out = capsys.readouterr().out
        assert '<channel id="1.kava.ee">' in out
        assert '<display-name lang="et">ETV2</display-name>' in out

    def test_grab_to_file(self, fake_network, tmp_path):
        config = tmp_path / "tv_grab_ee.conf"
        config.write_text("channel 1 ETV\n#channel 2 ETV2\nchannel 9 Gone\n", encoding="utf-8")
        output = tmp_path / "guide.xml"

        status = main_module.main(
            "ee", ["--config-file", str(config), "--output", str(output), "--days", "1", "--quiet"]
        )

        assert status == 0
        xml = output.read_text(encoding="utf-8")
        assert '<channel id="1.kava.ee">' in xml
        assert "9.kava.ee" not in xml
        assert '<title lang="et">A</title>' in xml
        assert '<title lang="et">B</title>' in xml

    def test_missing_config_exits_1(self, fake_network, tmp_path):
        assert main_module.main("ee", ["--config-file", str(tmp_path / "none.conf"), "--quiet"]) == 1

    def test_grab_with_no_pages_exits_1(self, monkeypatch, tmp_path):
        downloader = FakeDownloader(handler=lambda url, params: CHANNELS if url.endswith("/kanalid") else None)
        monkeypatch.setattr(main_module, "OptimizedDownloader", lambda **kwargs: downloader)
        config = tmp_path / "tv_grab_ee.conf"
        config.write_text("channel 1 ETV\n", encoding="utf-8")

        status = main_module.main("ee", ["--config-file", str(config), "--output", str(tmp_path / "out.xml"), "--quiet"])

        assert status == 1

    def test_configure_all(self, fake_network, tmp_path, monkeypatch):
        answers = iter(["all"])
        monkeypatch.setattr("builtins.input", lambda: next(answers))
        config = tmp_path / "tv_grab_ee.conf"

        assert main_module.main("ee", ["--configure", "--config-file", str(config), "--quiet"]) == 0
        text = config.read_text(encoding="utf-8")
        assert "channel 1 ETV\n" in text
        assert "channel 2 ETV2\n" in text

    def test_configure_keeps_existing_file(self, fake_network, tmp_path, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda: "no")
        config = tmp_path / "tv_grab_ee.conf"
        config.write_text("channel 1 ETV\n", encoding="utf-8")

        assert main_module.main("ee", ["--configure", "--config-file", str(config), "--quiet"]) == 0
        assert config.read_text(encoding="utf-8") == "channel 1 ETV\n"

    def test_configure_without_directory_fails(self, monkeypatch, tmp_path):
        monkeypatch.setattr(main_module, "OptimizedDownloader", lambda **kwargs: FakeDownloader())
        config = tmp_path / "tv_grab_ee.conf"

        assert main_module.main("ee", ["--configure", "--config-file", str(config), "--quiet"]) == 1
        assert not config.exists()


def test_stdout_written_as_utf8(monkeypatch):
    buffer = io.BytesIO()
    monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(buffer, encoding="ascii"))

    with main_module.open_output("-") as fh:
        fh.write('<display-name lang="he">כאן</display-name>\n')

    assert buffer.getvalue().decode("utf-8") == '<display-name lang="he">כאן</display-name>\n'
