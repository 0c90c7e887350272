"""tests/test_layouts.py"""
from bs4 import BeautifulSoup

from src.crawlers.layouts import (
    DAY_STRATEGIES,
    ROW_STRATEGIES,
    day_view_layout,
    extract_record,
    legacy_span_layout,
    nested_label_layout,
    parse_number,
    results_widget_layout,
)


def _spans(values, cls=None):
    attr = f' class="{cls}"' if cls else ""
    return "".join(f"<span{attr}>{v}</span>" for v in values)


def _row(html: str):
    soup = BeautifulSoup(f"<table><tbody>{html}</tbody></table>", "lxml")
    return soup.select_one("tr")


MAIN = [3, 12, 19, 24, 31, 40, 45]

NESTED_ROW = f"""
<tr>
  <td><span class="date">2024-03-15</span></td>
  <td>
    <div class="tirage">
      <div class="libelle">Tirage principal</div>
      <div class="numeros">{_spans(MAIN)}<span>(7)</span></div>
      <div class="libelle">MAXMILLIONS</div>
      <div class="mm">{_spans([1, 2, 3, 4, 5, 6, 7])}</div>
      <div class="mm">{_spans([8, 9, 10, 11, 12, 13])}</div>
    </div>
  </td>
</tr>
"""

LEGACY_ROW = f"""
<tr>
  <td class="date">2024-03-15</td>
  <td>
    <div class="numerosGangnants principal">{_spans(MAIN)}<span> </span><span>7</span></div>
    <div class="numerosGangnants maximillions">{_spans([1, 2, 3, 4, 5, 6, 7])}</div>
    <div class="numerosGangnants maximillions">{_spans([8, 9, 10, 11, 12, 13])}</div>
  </td>
</tr>
"""


class TestParseNumber:
    def test_strips_non_digits(self):
        assert parse_number("(07)") == 7
        assert parse_number(" 45 ") == 45

    def test_non_numeric_is_none(self):
        assert parse_number("-") is None
        assert parse_number("") is None
        assert parse_number(None) is None


class TestNestedLabelLayout:
    def test_main_numbers_and_bonus(self):
        record = nested_label_layout(_row(NESTED_ROW))
        assert record["numbers"] == MAIN
        assert record["bonus"] == 7

    def test_bonus_game_sets_need_exactly_seven(self):
        record = nested_label_layout(_row(NESTED_ROW))
        assert record["bonus_game_sets"] == [[1, 2, 3, 4, 5, 6, 7]]

    def test_no_label_is_not_this_layout(self):
        assert nested_label_layout(_row(LEGACY_ROW)) is None

    def test_without_bonus_slot(self):
        row = _row(f"""
        <tr><td><span class="date">x</span></td><td>
          <div>Tirage principal</div><div>{_spans(MAIN)}</div>
        </td></tr>""")
        record = nested_label_layout(row)
        assert record["numbers"] == MAIN
        assert record["bonus"] is None
        assert record["bonus_game_sets"] == []


class TestLegacySpanLayout:
    def test_same_record_as_nested_layout(self):
        legacy = legacy_span_layout(_row(LEGACY_ROW))
        nested = nested_label_layout(_row(NESTED_ROW))
        assert legacy == nested

    def test_blank_tokens_do_not_shift_counts(self):
        record = legacy_span_layout(_row(LEGACY_ROW))
        # the empty <span> between 45 and 7 is ignored
        assert record["bonus"] == 7

    def test_missing_container(self):
        assert legacy_span_layout(_row(NESTED_ROW)) is None


class TestResultsWidgetLayout:
    def test_widget_block(self):
        soup = BeautifulSoup(f"""
        <div class="item resultats">
          <div class="date">2024-03-15</div>
          <div class="boules">{_spans(MAIN + [7], "boule")}</div>
          <div class="maxmillions">
            <div class="boules">{_spans([1, 2, 3, 4, 5, 6, 7], "boule")}</div>
            <div class="boules">{_spans([1, 2], "boule")}</div>
          </div>
        </div>""", "lxml")
        record = results_widget_layout(soup.select_one(".item.resultats"))
        assert record == {"numbers": MAIN, "bonus": 7, "bonus_game_sets": [[1, 2, 3, 4, 5, 6, 7]]}


class TestDayViewLayout:
    def test_known_containers(self):
        soup = BeautifulSoup(f"""
        <div class="lqZoneResultatsProduit"><div class="numeros">
          {_spans(MAIN, "num")}<span class="num-sep">+</span><span class="num complementaire">7</span>
        </div></div>
        <div class="lqMaxmillions">
          <div class="numeros">{_spans([1, 2, 3, 4, 5, 6, 7], "num")}</div>
          <div class="numeros">{_spans([1, 2, 3, 4, 5, 6], "num")}</div>
        </div>""", "lxml")
        record = day_view_layout(soup)
        assert record["numbers"] == MAIN
        assert record["bonus"] == 7
        assert record["bonus_game_sets"] == [[1, 2, 3, 4, 5, 6, 7]]

    def test_label_scan_fallback(self):
        soup = BeautifulSoup(f"""
        <div class="numeros">{_spans(MAIN, "num")}<span class="num complementaire">7</span></div>
        <div class="bloc">
          <div class="titre">Maxmillions</div>
          <div class="ligne">{_spans([1, 2, 3, 4, 5, 6, 7])}</div>
          <div class="ligne">{_spans([8, 9, 10, 11, 12, 13, 14])}</div>
          <div class="ligne">{_spans([15, 16, 17])}</div>
        </div>""", "lxml")
        record = day_view_layout(soup)
        assert record["bonus_game_sets"] == [[1, 2, 3, 4, 5, 6, 7], [8, 9, 10, 11, 12, 13, 14]]

    def test_label_scan_stops_after_lookahead(self):
        filler = "<div>-</div>" * 30
        soup = BeautifulSoup(f"""
        <div class="numeros">{_spans(MAIN, "num")}</div>
        <div>Maxmillions</div>{filler}
        <div>{_spans([1, 2, 3, 4, 5, 6, 7])}</div>""", "lxml")
        assert day_view_layout(soup)["bonus_game_sets"] == []

    def test_no_container(self):
        soup = BeautifulSoup("<div>Aucun résultat</div>", "lxml")
        assert day_view_layout(soup) is None


class TestExtractRecord:
    def test_nested_row_through_dispatcher(self):
        record = extract_record(_row(NESTED_ROW), ROW_STRATEGIES)
        assert record["numbers"] == MAIN
        assert record["bonus"] == 7

    def test_five_numbers_rejected(self):
        row = _row(f"""
        <tr><td><span class="date">2024-03-15</span></td><td>
          <div>Tirage principal</div><div>{_spans([3, 12, 19, 24, 31])}</div>
        </td></tr>""")
        assert extract_record(row, ROW_STRATEGIES) is None

    def test_falls_through_to_next_strategy(self):
        short = lambda node: {"numbers": [1, 2], "bonus": None, "bonus_game_sets": []}
        full = lambda node: {"numbers": MAIN, "bonus": None, "bonus_game_sets": []}
        assert extract_record(_row(NESTED_ROW), [short, full])["numbers"] == MAIN

    def test_unknown_layout(self):
        row = _row('<tr><td class="date">2024-03-15</td><td>Résultats à venir</td></tr>')
        assert extract_record(row, ROW_STRATEGIES) is None

    def test_day_view_on_empty_document(self):
        assert extract_record(BeautifulSoup("<html></html>", "lxml"), DAY_STRATEGIES) is None
