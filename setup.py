#!/usr/bin/env python3

from setuptools import setup, find_packages
import os


# Read version from __init__.py (single source of truth)
def get_version():
    here = os.path.abspath(os.path.dirname(__file__))
    version_file = os.path.join(here, "scrape2epg", "__init__.py")

    with open(version_file, encoding="utf-8") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split('"')[1]

    raise RuntimeError("Unable to find version string in __init__.py")


# Read long description from README
def read_long_description():
    here = os.path.abspath(os.path.dirname(__file__))
    try:
        with open(os.path.join(here, "README.md"), encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return "XMLTV grabbers for TV schedule websites - scrape2epg"


setup(
    name="scrape2epg",
    version=get_version(),
    description="XMLTV grabbers for Israeli, Reunion, Estonian, Portuguese, Swiss and Brazilian TV guide sites",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    license="GPL-3.0",
    # Package discovery
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.7",
    # Core dependencies (always installed)
    install_requires=[
        "requests>=2.25.0",
        "beautifulsoup4>=4.9.0",
        "python-bidi>=0.4.2",
    ],
    extras_require={
        # Development
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.10",
            "flake8>=3.8",
            "black>=21.0",
            "mypy>=0.910",
            "build>=0.7.0",
        ],
        # Tests only
        "test": [
            "pytest>=6.0",
            "pytest-cov>=2.10",
        ],
    },
    entry_points={
        "console_scripts": [
            "scrape2epg=scrape2epg.__main__:main",
            "tv_grab_il=scrape2epg.__main__:tv_grab_il",
            "tv_grab_re=scrape2epg.__main__:tv_grab_re",
            "tv_grab_ee=scrape2epg.__main__:tv_grab_ee",
            "tv_grab_pt_meo=scrape2epg.__main__:tv_grab_pt_meo",
            "tv_grab_ch_bluewin=scrape2epg.__main__:tv_grab_ch_bluewin",
            "tv_grab_br_net=scrape2epg.__main__:tv_grab_br_net",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Multimedia :: Video",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    keywords="xmltv epg tv guide scraper tv_grab",
    zip_safe=False,
)
