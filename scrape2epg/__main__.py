#!/usr/bin/env python3
"""
scrape2epg.__main__ - Module and console script entry points
"""

import sys

from .main import main


def tv_grab_il():
    return main("il")


def tv_grab_re():
    return main("re")


def tv_grab_ee():
    return main("ee")


def tv_grab_pt_meo():
    return main("pt_meo")


def tv_grab_ch_bluewin():
    return main("ch_bluewin")


def tv_grab_br_net():
    return main("br_net")


if __name__ == "__main__":
    sys.exit(main())
