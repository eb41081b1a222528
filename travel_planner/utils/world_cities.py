"""City suggestions served from the bundled ``data/world_cities.json`` list."""
from __future__ import annotations

import json
import math
import re
import unicodedata
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "world_cities.json"
DEFAULT_LIMIT = 10
MAX_LIMIT = 50
COUNTRY_CODE_PATTERN = re.compile(r"^[A-Za-z]{2}$")


@dataclass(frozen=True)
class City:
    name: str
    country_code: str
    country_name: str
    normalized_name: str

    def to_dict(self):
        return {
            "name": self.name,
            "countryCode": self.country_code,
            "countryName": self.country_name,
        }


def normalize_search_text(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


@lru_cache(maxsize=4)
def load_index(path: str = str(DATA_PATH)) -> Tuple[List[City], Dict[str, List[City]], Dict[str, str]]:
    with open(path, encoding="utf-8") as handle:
        raw_cities = json.load(handle)

    unique: Dict[Tuple[str, str], City] = {}
    code_by_country_name: Dict[str, str] = {}
    for raw in raw_cities:
        name = (raw.get("name") or "").strip()
        code = (raw.get("countryCode") or "").upper()
        if not name or not re.match(r"^[A-Z]{2}$", code):
            continue
        country_name = (raw.get("countryName") or "").strip() or code
        code_by_country_name[normalize_search_text(country_name)] = code
        key = (name, code)
        if key in unique:
            continue
        unique[key] = City(name, code, country_name, normalize_search_text(name))

    cities = sorted(
        unique.values(),
        key=lambda city: (normalize_search_text(city.name), normalize_search_text(city.country_name)),
    )
    by_country: Dict[str, List[City]] = {}
    for city in cities:
        by_country.setdefault(city.country_code, []).append(city)
    return cities, by_country, code_by_country_name


def resolve_country_code(country: Optional[str], path: str = str(DATA_PATH)) -> Optional[str]:
    trimmed = (country or "").strip()
    if not trimmed:
        return None
    if COUNTRY_CODE_PATTERN.match(trimmed):
        return trimmed.upper()
    _, _, code_by_country_name = load_index(path)
    return code_by_country_name.get(normalize_search_text(trimmed))


def clamp_limit(value, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = default
    if not math.isfinite(number):
        number = default
    return int(min(max(number, 1), maximum))


def search_world_cities(query: str, country: Optional[str] = None, limit=DEFAULT_LIMIT, path: str = str(DATA_PATH)) -> List[dict]:
    normalized_query = normalize_search_text(query)
    if not normalized_query:
        return []

    take = clamp_limit(limit)
    cities, by_country, _ = load_index(path)
    country_code = resolve_country_code(country, path)
    # an unrecognised country filter searches everywhere
    source = by_country.get(country_code, []) if country_code else cities

    result = []
    for city in source:
        if not city.normalized_name.startswith(normalized_query):
            continue
        result.append(city.to_dict())
        if len(result) >= take:
            break
    return result
