"""
scrape2epg.xmltv - XMLTV generation (DTD Compliant)

Streams channel and programme records to an XMLTV document. Elements are
written in the order required by the XMLTV DTD and multi-valued entries
(display names, titles, categories) keep the order they were given in.
"""

import logging
from typing import Dict, Optional, TextIO

from .model import CREDIT_ROLES, Channel, Programme
from .utils import HtmlUtils, TimeUtils


class XmltvWriter:
    """Writes XMLTV to an open text stream: start, channels, programmes, end"""

    def __init__(self, fh: TextIO, encoding: str = "utf-8", language: Optional[str] = None):
        self.fh = fh
        self.encoding = encoding
        self.language = language
        self.station_count = 0
        self.episode_count = 0
        self._started = False

    def start(self, header: Optional[Dict[str, str]] = None):
        """Print XMLTV header; header keys become <tv> attributes"""
        if self._started:
            raise RuntimeError("XMLTV output already started")
        self._started = True

        self.fh.write(f'<?xml version="1.0" encoding="{self.encoding}"?>\n')
        self.fh.write('<!DOCTYPE tv SYSTEM "xmltv.dtd">\n')

        attributes = ""
        for key, value in (header or {}).items():
            if value:
                attributes += f' {key}="{HtmlUtils.conv_html(value)}"'
        self.fh.write(f"<tv{attributes}>\n")

    def end(self):
        """Print XMLTV footer"""
        self.fh.write("</tv>\n")
        self.fh.flush()
        logging.info(
            "%d Stations and %d Programmes written to XMLTV output",
            self.station_count,
            self.episode_count,
        )

    def write_channel(self, channel: Channel):
        self.fh.write(f'\t<channel id="{HtmlUtils.conv_html(channel.output_id)}">\n')
        lang_attr = f' lang="{self.language}"' if self.language else ""
        self.fh.write(f"\t\t<display-name{lang_attr}>{HtmlUtils.conv_html(channel.display_name)}</display-name>\n")
        if channel.icon_url:
            self.fh.write(f'\t\t<icon src="{HtmlUtils.conv_html(channel.icon_url)}" />\n')
        self.fh.write("\t</channel>\n")
        self.station_count += 1

    def write_programme(self, programme: Programme):
        """Write one programme - DTD element order"""
        start = TimeUtils.conv_time(programme.start)
        attributes = f'start="{start}"'
        if programme.stop is not None:
            attributes += f' stop="{TimeUtils.conv_time(programme.stop)}"'
        attributes += f' channel="{HtmlUtils.conv_html(programme.channel)}"'
        self.fh.write(f"\t<programme {attributes}>\n")

        # 1. TITLE+
        for text, lang in programme.title:
            self._write_lang("title", text, lang)

        # 2. SUB-TITLE*
        for text, lang in programme.sub_title:
            self._write_lang("sub-title", text, lang)

        # 3. DESC*
        for text, lang in programme.description:
            self._write_lang("desc", text, lang)

        # 4. CREDITS?
        self._write_credits(programme.credits)

        # 6. CATEGORY*
        for text, lang in programme.category:
            self._write_lang("category", text, lang)

        # 10. LENGTH?
        if programme.length:
            self.fh.write(f'\t\t<length units="minutes">{int(programme.length)}</length>\n')

        # 17. PREVIOUSLY-SHOWN?
        if programme.rerun:
            self.fh.write("\t\t<previously-shown />\n")

        # 21. SUBTITLES*
        if programme.subtitle_flag is not None:
            self.fh.write(f'\t\t<subtitles type="{programme.subtitle_flag.value}" />\n')

        # 22. RATING*
        if programme.rating:
            self.fh.write("\t\t<rating>\n")
            self.fh.write(f"\t\t\t<value>{HtmlUtils.conv_html(programme.rating)}</value>\n")
            self.fh.write("\t\t</rating>\n")

        self.fh.write("\t</programme>\n")
        self.episode_count += 1

    def _write_lang(self, element: str, text: str, lang: str):
        if not text:
            return
        lang_attr = f' lang="{lang}"' if lang else ""
        self.fh.write(f"\t\t<{element}{lang_attr}>{HtmlUtils.conv_html(text)}</{element}>\n")

    def _write_credits(self, credits: Dict[str, list]):
        """Write cast and crew credits in DTD role order"""
        if not credits or not any(credits.get(role) for role in CREDIT_ROLES):
            return
        self.fh.write("\t\t<credits>\n")
        for role in CREDIT_ROLES:
            for name in credits.get(role, []):
                self.fh.write(f"\t\t\t<{role}>{HtmlUtils.conv_html(name)}</{role}>\n")
        self.fh.write("\t\t</credits>\n")
