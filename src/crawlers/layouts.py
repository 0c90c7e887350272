"""
src/crawlers/layouts.py
Layout strategies for Lotto Max result markup.

The results page has changed shape several times:
  - legacy rows (2009–2023): `.numerosGangnants.principal` / `.maximillions` spans
  - nested label rows (2024+): "Tirage principal" / "Maxmillions" label divs
  - results widget: `.item.resultats` blocks with `.boules .boule`
  - day view (single date page): `.numeros` container with `.num` children

Each strategy takes a BeautifulSoup node (a row, or the whole document for the
day view) and returns a partial record
    {"numbers": [...], "bonus": int | None, "bonus_game_sets": [[...], ...]}
or None when the node does not look like that layout. The caller attaches the date.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Iterable

from bs4 import Tag

from src.utils.logger import get_logger

log = get_logger("crawler.layouts")

MAIN_COUNT = 7
SET_SIZE = 7

MAIN_LABEL = "tirage principal"
BONUS_GAME_LABEL = "maxmillions"
# How many divs past the "Maxmillions" label the day view scans
DAY_VIEW_LOOKAHEAD = 30

DAY_VIEW_CONTAINERS = [
    ".lqZoneResultatsProduit .numeros",
    ".numeros",
    ".lqZoneStructuresDeLots .numeros",
]
DAY_VIEW_BONUS = [".num.complementaire", ".complementaire", ".num-sep + .num"]
DAY_VIEW_SET_CONTAINERS = (
    ".lqZoneStructureDeLots .structure2, .ensembleMaxNumeros .numeros, "
    ".lqMaxmillions .numeros, .lqZoneStructureDeLots .numeros"
)

Strategy = Callable[[Tag], "dict[str, Any] | None"]

_NON_DIGIT = re.compile(r"\D")


# ── Numeric parsing ───────────────────────────────────────────────

def parse_number(text: str | None) -> int | None:
    """'(07)' -> 7, ' 12 ' -> 12, '-' -> None."""
    digits = _NON_DIGIT.sub("", text or "")
    if not digits:
        return None
    return int(digits)


def parse_numbers(nodes: Iterable[Tag]) -> list[int]:
    """Parse each node's text, dropping tokens that are not numbers."""
    values = []
    for node in nodes:
        value = parse_number(node.get_text(strip=True))
        if value is not None:
            values.append(value)
    return values


def _own_spans(node: Tag) -> list[Tag]:
    return node.find_all("span", recursive=False)


def _record(values: list[int], bonus: int | None, sets: list[list[int]]) -> dict[str, Any]:
    return {"numbers": values[:MAIN_COUNT], "bonus": bonus, "bonus_game_sets": sets}


def _split_main(values: list[int]) -> tuple[list[int], int | None]:
    """First 7 values are the main numbers, an 8th one is the bonus."""
    bonus = values[MAIN_COUNT] if len(values) > MAIN_COUNT else None
    return values[:MAIN_COUNT], bonus


def _keep_set(values: list[int], where: str) -> bool:
    if len(values) == SET_SIZE:
        return True
    if values:
        log.debug(f"Dropped bonus game set from {where}: {len(values)} numbers {values}")
    return False


def _find_label(divs: list[Tag], marker: str) -> int:
    """
    Index of the innermost div whose text contains `marker` (case-insensitive),
    or -1. Wrapper divs also contain the text, so the deepest match wins.
    """
    for i, div in enumerate(divs):
        if marker not in div.get_text(" ", strip=True).lower():
            continue
        if any(marker in child.get_text(" ", strip=True).lower() for child in div.find_all("div")):
            continue
        return i
    return -1


# ── Strategies ────────────────────────────────────────────────────

def nested_label_layout(row: Tag) -> dict[str, Any] | None:
    """2024+ rows: label div, then a div of number spans; sets follow a second label."""
    cells = row.find_all("td")
    cell = cells[1] if len(cells) >= 2 else row
    divs = cell.find_all("div")

    main_idx = _find_label(divs, MAIN_LABEL)
    if main_idx == -1 or main_idx + 1 >= len(divs):
        return None

    values = parse_numbers(divs[main_idx + 1].find_all("span"))
    numbers, bonus = _split_main(values)

    sets: list[list[int]] = []
    set_idx = _find_label(divs, BONUS_GAME_LABEL)
    if set_idx != -1:
        for div in divs[set_idx + 1:]:
            candidate = parse_numbers(_own_spans(div))
            if _keep_set(candidate, "nested label row"):
                sets.append(candidate)

    return _record(numbers, bonus, sets)


def legacy_span_layout(row: Tag) -> dict[str, Any] | None:
    """2009–2023 rows: classed containers of one span per number."""
    principal = row.select_one(".numerosGangnants.principal")
    if principal is None:
        return None

    numbers, bonus = _split_main(parse_numbers(principal.find_all("span")))

    sets = []
    for block in row.select(".numerosGangnants.maximillions"):
        candidate = parse_numbers(block.find_all("span"))
        if _keep_set(candidate, "legacy row"):
            sets.append(candidate)

    return _record(numbers, bonus, sets)


def results_widget_layout(row: Tag) -> dict[str, Any] | None:
    """`.item.resultats` blocks from the results widget."""
    main = None
    for boules in row.select(".boules"):
        if boules.find_parent(class_="maxmillions") is None:
            main = boules
            break
    if main is None:
        return None

    numbers, bonus = _split_main(parse_numbers(main.select(".boule")))

    sets = []
    for block in row.select(".maxmillions .boules"):
        candidate = parse_numbers(block.select(".boule"))
        if _keep_set(candidate, "results widget"):
            sets.append(candidate)

    return _record(numbers, bonus, sets)


def day_view_layout(doc: Tag) -> dict[str, Any] | None:
    """Single-date page: one `.numeros` container, `.complementaire` bonus."""
    main = None
    for selector in DAY_VIEW_CONTAINERS:
        main = doc.select_one(selector)
        if main is not None:
            break
    if main is None:
        return None

    nodes = main.select(".num") or main.find_all("span")
    numbers = parse_numbers(
        n for n in nodes if "complementaire" not in (n.get("class") or [])
    )[:MAIN_COUNT]

    bonus = None
    for selector in DAY_VIEW_BONUS:
        comp = main.select_one(selector)
        if comp is not None:
            bonus = parse_number(comp.get_text(strip=True))
            break

    sets: list[list[int]] = []
    containers = [c for c in doc.select(DAY_VIEW_SET_CONTAINERS) if c is not main]
    if containers:
        for container in containers:
            candidate = parse_numbers(container.select(".num") or container.find_all("span"))
            if _keep_set(candidate, "day view container"):
                sets.append(candidate)
    else:
        divs = doc.find_all("div")
        label_idx = _find_label(divs, BONUS_GAME_LABEL)
        if label_idx != -1:
            for div in divs[label_idx + 1:label_idx + 1 + DAY_VIEW_LOOKAHEAD]:
                own = [c for c in div.find_all(True, recursive=False)
                       if c.name == "span" or "num" in (c.get("class") or [])]
                candidate = parse_numbers(own)
                if _keep_set(candidate, "day view scan"):
                    sets.append(candidate)

    return _record(numbers, bonus, sets)


ROW_STRATEGIES: list[Strategy] = [nested_label_layout, legacy_span_layout, results_widget_layout]
DAY_STRATEGIES: list[Strategy] = [day_view_layout]


# ── Dispatcher ────────────────────────────────────────────────────

def extract_record(node: Tag, strategies: list[Strategy], min_numbers: int = MAIN_COUNT) -> dict[str, Any] | None:
    """Try strategies in order; the first with enough main numbers wins."""
    for strategy in strategies:
        record = strategy(node)
        if record is None:
            continue
        if len(record["numbers"]) >= min_numbers:
            log.debug(f"Matched {strategy.__name__}: {record['numbers']} bonus={record['bonus']}")
            return record
        log.debug(f"{strategy.__name__} matched shape but found only {len(record['numbers'])} numbers")
    return None
