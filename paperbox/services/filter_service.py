"""
Filter-Service für die Dashboard-, Favoriten- und Export-Ansichten

Alle Funktionen sind rein: sie verändern die übergebenen Listen nicht.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import FileItem, Language, ReadStatusFilter


class ExportPeriod(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class FilterCriteria:
    """Filter der Dashboard-Liste, alle Dimensionen werden UND-verknüpft"""
    search_term: str = ''
    tag_filters: Tuple[str, ...] = ()
    date_filter: Optional[date] = None
    read_status: ReadStatusFilter = ReadStatusFilter.ALL


@dataclass
class DateGroup:
    day: date
    label: str
    items: List[FileItem] = field(default_factory=list)


RELATIVE_DAY_LABELS = {
    Language.EN: ('Today', 'Yesterday'),
    Language.DE: ('Heute', 'Gestern'),
    Language.CN: ('今天', '昨天'),
}

WEEKDAY_NAMES = {
    Language.EN: ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun'),
    Language.DE: ('Mo.', 'Di.', 'Mi.', 'Do.', 'Fr.', 'Sa.', 'So.'),
    Language.CN: ('周一', '周二', '周三', '周四', '周五', '周六', '周日'),
}

MONTH_NAMES = {
    Language.EN: ('January', 'February', 'March', 'April', 'May', 'June', 'July',
                  'August', 'September', 'October', 'November', 'December'),
    Language.DE: ('Januar', 'Februar', 'März', 'April', 'Mai', 'Juni', 'Juli',
                  'August', 'September', 'Oktober', 'November', 'Dezember'),
}


def _as_day(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def matches_search(item: FileItem, search_term: str) -> bool:
    """Case-insensitive Teilstring-Suche in Name oder Tags"""
    term = search_term.lower()
    if not term:
        return True
    return term in item.name.lower() or any(term in tag.lower() for tag in item.tags)


def matches_criteria(item: FileItem, criteria: FilterCriteria) -> bool:
    if not matches_search(item, criteria.search_term):
        return False

    if criteria.tag_filters and not any(tag in criteria.tag_filters for tag in item.tags):
        return False

    if criteria.date_filter is not None and item.date.date() != _as_day(criteria.date_filter):
        return False

    if criteria.read_status is ReadStatusFilter.READ:
        return item.is_read
    if criteria.read_status is ReadStatusFilter.UNREAD:
        return not item.is_read
    return True


def sort_by_date_desc(files: Iterable[FileItem]) -> List[FileItem]:
    return sorted(files, key=lambda item: item.date, reverse=True)


def filter_files(files: Iterable[FileItem], criteria: Optional[FilterCriteria] = None) -> List[FileItem]:
    """Gefilterte Dateien, neuestes Archivdatum zuerst"""
    criteria = criteria or FilterCriteria()
    return sort_by_date_desc(item for item in files if matches_criteria(item, criteria))


def format_long_date(day: date, language: Language = Language.DE) -> str:
    """Langes Datum mit Wochentag, z.B. 'Fr., 1. März' oder 'Fri, March 1'"""
    weekday = WEEKDAY_NAMES[language][day.weekday()]

    if language is Language.CN:
        return f"{day.month}月{day.day}日{weekday}"
    month = MONTH_NAMES[language][day.month - 1]
    if language is Language.DE:
        return f"{weekday}, {day.day}. {month}"
    return f"{weekday}, {month} {day.day}"


def date_header(day: date, today: Optional[date] = None, language: Language = Language.DE) -> str:
    today = today or date.today()
    today_label, yesterday_label = RELATIVE_DAY_LABELS[language]

    if day == today:
        return today_label
    if day == today - timedelta(days=1):
        return yesterday_label
    return format_long_date(day, language)


def group_by_date(sorted_files: Sequence[FileItem], today: Optional[date] = None,
                  language: Language = Language.DE) -> List[DateGroup]:
    """
    Gruppiert aufeinanderfolgende Dateien desselben Kalendertags

    Es wird nur mit der jeweils letzten Gruppe verglichen; nicht benachbarte
    Dateien desselben Tags landen in getrennten Gruppen.
    """
    groups: List[DateGroup] = []

    for item in sorted_files:
        day = item.date.date()
        if groups and groups[-1].day == day:
            groups[-1].items.append(item)
        else:
            groups.append(DateGroup(day=day, label=date_header(day, today, language), items=[item]))

    return groups


def files_in_range(files: Iterable[FileItem], start: Optional[date] = None,
                   end: Optional[date] = None) -> List[FileItem]:
    """Dateien zwischen start 00:00:00 und end 23:59:59 (beide inklusive)"""
    start_at = datetime.combine(_as_day(start), time.min) if start else None
    end_at = datetime.combine(_as_day(end), time(23, 59, 59)) if end else None

    result = []
    for item in files:
        if start_at and item.date < start_at:
            continue
        if end_at and item.date > end_at:
            continue
        result.append(item)
    return result


def starred_files(files: Iterable[FileItem]) -> List[FileItem]:
    return [item for item in files if item.is_starred]


def week_number(day: date) -> int:
    """Wochennummer wie in der Export-Ansicht: Woche beginnt am Sonntag"""
    day_of_year = (day - date(day.year, 1, 1)).days
    sunday_based_weekday = (day.weekday() + 1) % 7
    return math.ceil((sunday_based_weekday + 1 + day_of_year) / 7)


def files_in_period(files: Iterable[FileItem], period: ExportPeriod,
                    reference: date) -> List[FileItem]:
    """Dateien am selben Tag, in derselben Woche oder im selben Monat wie reference"""
    reference = _as_day(reference)
    result = []

    for item in files:
        day = item.date.date()
        if period is ExportPeriod.DAILY:
            matches = day == reference
        elif period is ExportPeriod.MONTHLY:
            matches = (day.year, day.month) == (reference.year, reference.month)
        else:
            matches = day.year == reference.year and week_number(day) == week_number(reference)
        if matches:
            result.append(item)

    return result


def shift_reference(reference: date, period: ExportPeriod, offset: int) -> date:
    """Verschiebt das Export-Fenster um offset Tage, Wochen oder Monate"""
    reference = _as_day(reference)

    if period is ExportPeriod.DAILY:
        return reference + timedelta(days=offset)
    if period is ExportPeriod.WEEKLY:
        return reference + timedelta(weeks=offset)

    month_index = reference.month - 1 + offset
    year = reference.year + month_index // 12
    month = month_index % 12 + 1
    # Tag auf den letzten gültigen Tag des Zielmonats begrenzen
    next_month = date(year + month // 12, month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(reference.day, last_day))
