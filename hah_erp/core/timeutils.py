"""
Helpers de fecha y hora en zona horaria de Lima.
"""

import re
from datetime import date, datetime, timezone, tzinfo

from dateutil import tz
from dateutil.relativedelta import relativedelta

from hah_erp.config import get_settings

settings = get_settings()

_TIME_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_TIME_24H = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")


def local_tz() -> tzinfo:
    return tz.gettz(settings.TIMEZONE)


def now_lima() -> datetime:
    """Fecha y hora actual en la zona horaria de la empresa."""
    return datetime.now(local_tz())


def today_lima() -> date:
    return now_lima().date()


def month_bounds(day: date) -> tuple[date, date]:
    """Primer día del mes de `day` y primer día del mes siguiente."""
    start = day.replace(day=1)
    return start, start + relativedelta(months=1)


def parse_time_12h(value: str) -> str:
    """
    Normaliza una hora a formato HH:MM.
    Acepta "8:00 AM", "08:30 pm" o ya en 24h ("14:05", "14:05:00").
    """
    match = _TIME_12H.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        period = match.group(3).upper()
        if not 1 <= hours <= 12 or minutes > 59:
            raise ValueError(f"Hora inválida: {value}")
        if period == "PM" and hours != 12:
            hours += 12
        elif period == "AM" and hours == 12:
            hours = 0
        return f"{hours:02d}:{minutes:02d}"

    match = _TIME_24H.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise ValueError(f"Hora inválida: {value}")
        return f"{hours:02d}:{minutes:02d}"

    raise ValueError(f"Hora inválida: {value}")


def relative_time(moment: datetime, now: datetime | None = None) -> str:
    """Texto relativo para feeds de actividad: "Hace 3 días", "Hace 2 horas"."""
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    elapsed = now - moment
    if elapsed.total_seconds() < 0:
        return "Hace unos minutos"
    days = elapsed.days
    if days > 0:
        return f"Hace {days} día" if days == 1 else f"Hace {days} días"
    hours = elapsed.seconds // 3600
    if hours > 0:
        return f"Hace {hours} hora" if hours == 1 else f"Hace {hours} horas"
    return "Hace unos minutos"
