"""
Parser de listas de fechas escritas a mano en las planillas de cuidados
en casa (feriados y pausas del servicio).

Formatos aceptados:
    "0" o vacío                 → []
    "2025-07-23"                → ISO
    "23/07/2025", "3/7/2025"    → DD/MM/YYYY
    "23-28-29/07/2025"          → varios días del mismo mes/año
    "08 Y 09/12/2025"           → días sueltos: toman el mes/año anterior o,
                                  si no hay, el siguiente
Separadores: coma, punto y coma y " Y ".
"""

import re
from datetime import date

YEAR_MIN = 2020
YEAR_MAX = 2035

_SPLIT = re.compile(r"\s*[,;]\s*|\s+Y\s+", re.IGNORECASE)
_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_MULTI_DAY = re.compile(r"^(\d{1,2}(?:-\d{1,2})*)[/\-](\d{1,2})[/\-](\d{4})$")
_BARE_DAY = re.compile(r"^\d{1,2}$")
_DIGITS = re.compile(r"\d+")


def _to_date(day: int, month: int, year: int) -> date | None:
    if not YEAR_MIN <= year <= YEAR_MAX:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_single_date(value: str) -> date | None:
    """Una sola fecha en ISO o DD/MM/YYYY; None si no es válida."""
    text = value.strip()
    match = _ISO.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _to_date(day, month, year)
    match = _MULTI_DAY.match(text)
    if match and "-" not in match.group(1):
        return _to_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    return None


def parse_date_list(raw: str | None) -> list[date]:
    """Convierte una cadena legacy en una lista ordenada de fechas sin duplicados."""
    if raw is None:
        return []
    text = raw.strip()
    if not text or text == "0":
        return []

    found: set[date] = set()
    pending_days: list[int] = []
    last_month: int | None = None
    last_year: int | None = None

    def flush_pending() -> None:
        if last_month is None or last_year is None:
            return
        for day in pending_days:
            parsed = _to_date(day, last_month, last_year)
            if parsed:
                found.add(parsed)
        pending_days.clear()

    for part in (p.strip() for p in _SPLIT.split(text)):
        if not part:
            continue

        match = _MULTI_DAY.match(part)
        if match:
            flush_pending()
            month, year = int(match.group(2)), int(match.group(3))
            last_month, last_year = month, year
            for day in match.group(1).split("-"):
                parsed = _to_date(int(day), month, year)
                if parsed:
                    found.add(parsed)
            continue

        if _BARE_DAY.match(part):
            day = int(part)
            if 1 <= day <= 31:
                pending_days.append(day)
            continue

        parsed = parse_single_date(part)
        if parsed:
            flush_pending()
            last_month, last_year = parsed.month, parsed.year
            found.add(parsed)

    flush_pending()
    return sorted(found)


def coerce_date_list(value) -> list[date]:
    """Acepta lista de fechas/cadenas o una cadena legacy."""
    if value is None:
        return []
    if isinstance(value, str):
        return parse_date_list(value)
    result: set[date] = set()
    for item in value:
        if isinstance(item, date):
            if YEAR_MIN <= item.year <= YEAR_MAX:
                result.add(item)
        elif item is not None:
            result.update(parse_date_list(str(item)))
    return sorted(result)


def format_date_list(dates: list[date]) -> str:
    """Forma estándar de almacenamiento legacy: ISO separadas por ", "."""
    return ", ".join(d.isoformat() for d in dates)


def parse_pause_hours(value) -> int:
    """Horas de pausa: entero directo o dígitos de un texto ("12 horas")."""
    if value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    digits = "".join(_DIGITS.findall(str(value)))
    return int(digits) if digits else 0
