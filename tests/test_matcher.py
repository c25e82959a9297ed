from scrape2epg.matcher import Matcher, parse_html, select_path, text_of

PAGE = """
<div id="guide">
  <ul class="list main">
    <li class="show"><span class="time">10:00</span>A</li>
    <li class="show"><span class="time">10:00</span>A</li>
    <li class="show repeat" data-id="7"><span class="time">later</span>B</li>
  </ul>
</div>
"""


class TestMatcher:
    def test_class_token_match(self):
        soup = parse_html(PAGE)
        assert len(Matcher.of("li", class_="show").find_all(soup)) == 3

    def test_full_class_value_match(self):
        soup = parse_html(PAGE)
        assert Matcher.of("ul", class_="list main").find(soup) is not None

    def test_text_pattern(self):
        soup = parse_html(PAGE)
        times = Matcher.of("span", class_="time", text=r"^\d{1,2}:\d{2}$").find_all(soup)
        assert [text_of(t) for t in times] == ["10:00", "10:00"]

    def test_required_attribute(self):
        soup = parse_html(PAGE)
        hits = Matcher.of("li", has=("data-id",)).find_all(soup)
        assert len(hits) == 1
        assert hits[0]["data-id"] == "7"

    def test_data_attribute_keyword(self):
        soup = parse_html(PAGE)
        assert Matcher.of("li", data_id="7").find(soup) is not None

    def test_find_none_root(self):
        assert Matcher.of("li").find(None) is None
        assert Matcher.of("li").find_all(None) == []


def test_select_path_keeps_identical_siblings():
    soup = parse_html(PAGE)
    rows = select_path(soup, (Matcher.of("div", id="guide"), Matcher.of("li", class_="show")))
    assert len(rows) == 3


def test_text_of_none():
    assert text_of(None) == ""
