"""Monthly, accessibility and delivery reports with their CSV exports."""
import calendar
import csv
import io
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from mealdelivery.services import is_completed

logger = logging.getLogger(__name__)

TREND_MONTHS = 4
RECENT_DELIVERIES = 5


@dataclass
class MonthlyStats:
    month: str
    seniors_served: int = 0
    deliveries_completed: int = 0
    total_deliveries: int = 0
    success_rate: int = 0
    active_volunteers: int = 0
    new_volunteers: int = 0
    monthly_trends: List[Dict] = field(default_factory=list)


@dataclass
class AccessibilityStats:
    total_seniors: int = 0
    seniors_needing_translation: int = 0
    seniors_with_smartphones: int = 0
    seniors_without_smartphones: int = 0
    dietary_restrictions: int = 0
    accessibility_needs: int = 0
    language_breakdown: Dict[str, int] = field(default_factory=dict)
    delivery_method_breakdown: Dict[str, int] = field(default_factory=dict)
    volunteer_languages: Dict[str, int] = field(default_factory=dict)


@dataclass
class AdminOverview:
    month: str
    total_seniors: int = 0
    active_volunteers: int = 0
    monthly_deliveries: int = 0
    pending_deliveries: int = 0
    completed_deliveries: int = 0
    success_rate: int = 0
    recent_deliveries: List[Dict] = field(default_factory=list)


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_label(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def month_range(year: int, month: int) -> Tuple[str, str]:
    label = month_label(year, month)
    return f"{label}-01", f"{label}-{last_day_of_month(year, month):02d}"


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def percentage(part: int, whole: int) -> int:
    """round(part / whole * 100) with halves rounded up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def success_rate(completed: int, total: int) -> int:
    return percentage(completed, total)


def count_completed(deliveries) -> int:
    return sum(1 for d in deliveries if is_completed(d.get("status")))


class ReportService:
    def __init__(self, store):
        self.store = store

    def _deliveries_in(self, year: int, month: int) -> List[Dict]:
        start, end = month_range(year, month)
        return self.store.list_deliveries(start_date=start, end_date=end)

    def monthly_stats(self, year: int, month: int) -> MonthlyStats:
        if not 1 <= month <= 12:
            raise ValueError(f"month must be 1-12, got {month}")
        label = month_label(year, month)
        deliveries = self._deliveries_in(year, month)
        seniors = self.store.list_seniors(active=True)
        volunteers = self.store.list_volunteers()

        total = len(deliveries)
        completed = count_completed(deliveries)
        stats = MonthlyStats(
            month=label,
            seniors_served=len(seniors),
            deliveries_completed=completed,
            total_deliveries=total,
            success_rate=success_rate(completed, total),
            active_volunteers=len({d["volunteer_id"] for d in deliveries}),
            new_volunteers=sum(1 for v in volunteers if (v.get("created_at") or "").startswith(label)),
        )

        for back in range(TREND_MONTHS - 1, -1, -1):
            ty, tm = shift_month(year, month, -back)
            rows = deliveries if back == 0 else self._deliveries_in(ty, tm)
            stats.monthly_trends.append({
                "month": month_label(ty, tm),
                "completion_rate": success_rate(count_completed(rows), len(rows)),
            })
        logger.info(f"Monthly stats for {label}: {completed}/{total} deliveries completed")
        return stats

    def accessibility_stats(self) -> AccessibilityStats:
        seniors = self.store.list_seniors(active=True)
        volunteers = self.store.list_volunteers(active=True)
        stats = AccessibilityStats(total_seniors=len(seniors))
        languages = Counter()
        methods = Counter()
        for s in seniors:
            if s.get("needs_translation"):
                stats.seniors_needing_translation += 1
            if s.get("has_smartphone"):
                stats.seniors_with_smartphones += 1
            else:
                stats.seniors_without_smartphones += 1
            if s.get("dietary_restrictions"):
                stats.dietary_restrictions += 1
            if s.get("accessibility_needs"):
                stats.accessibility_needs += 1
            languages[(s.get("preferred_language") or "english").lower()] += 1
            methods[s.get("delivery_method") or "doorstep"] += 1
        spoken = Counter()
        for v in volunteers:
            for lang in v.get("languages") or []:
                spoken[lang.lower()] += 1
        stats.language_breakdown = dict(languages.most_common())
        stats.delivery_method_breakdown = dict(methods.most_common())
        stats.volunteer_languages = dict(spoken.most_common())
        return stats

    def delivery_report(self, year: int, month: int) -> List[Dict]:
        return self._deliveries_in(year, month)

    def overview(self, year: int, month: int, recent: int = RECENT_DELIVERIES) -> AdminOverview:
        """Dashboard counts for the admin landing tab.

        Every senior on file counts, active or not; only active accounts with the
        plain volunteer role count as volunteers.
        """
        if not 1 <= month <= 12:
            raise ValueError(f"month must be 1-12, got {month}")
        deliveries = self._deliveries_in(year, month)
        volunteers = self.store.list_volunteers(active=True)
        completed = count_completed(deliveries)
        latest = sorted(deliveries, key=lambda d: (d.get("delivery_date") or "", d.get("id") or 0), reverse=True)
        return AdminOverview(
            month=month_label(year, month),
            total_seniors=len(self.store.list_seniors()),
            active_volunteers=sum(1 for v in volunteers if (v.get("role") or "volunteer") == "volunteer"),
            monthly_deliveries=len(deliveries),
            pending_deliveries=sum(1 for d in deliveries if (d.get("status") or "pending") == "pending"),
            completed_deliveries=completed,
            success_rate=success_rate(completed, len(deliveries)),
            recent_deliveries=latest[:recent],
        )


def _to_csv(header: List[str], rows: List[List]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue()


def monthly_csv(stats: MonthlyStats) -> str:
    rows = [
        ["Total Seniors Served", stats.seniors_served, "Number of active seniors in the system"],
        ["Deliveries Completed", stats.deliveries_completed, "Number of successful deliveries"],
        ["Total Deliveries", stats.total_deliveries, "Total number of delivery attempts"],
        ["Success Rate", f"{stats.success_rate}%", "Percentage of successful deliveries"],
        ["Active Volunteers", stats.active_volunteers, "Volunteers with at least one delivery this month"],
        ["New Volunteers", stats.new_volunteers, "Volunteers who signed up this month"],
    ]
    for t in stats.monthly_trends:
        rows.append([f"Completion Rate {t['month']}", f"{t['completion_rate']}%", "Trailing monthly completion rate"])
    return _to_csv(["Metric", "Value", "Description"], rows)


def accessibility_csv(stats: AccessibilityStats) -> str:
    total = stats.total_seniors

    def pct(n):
        return f"{percentage(n, total)}%"

    rows = [
        ["Total Seniors", total, "100%" if total else "0%"],
        ["Need Translation", stats.seniors_needing_translation, pct(stats.seniors_needing_translation)],
        ["Have Smartphones", stats.seniors_with_smartphones, pct(stats.seniors_with_smartphones)],
        ["No Smartphones", stats.seniors_without_smartphones, pct(stats.seniors_without_smartphones)],
        ["Dietary Restrictions", stats.dietary_restrictions, pct(stats.dietary_restrictions)],
        ["Accessibility Needs", stats.accessibility_needs, pct(stats.accessibility_needs)],
    ]
    for language, count in stats.language_breakdown.items():
        rows.append([f"Language: {language}", count, pct(count)])
    for method, count in stats.delivery_method_breakdown.items():
        rows.append([f"Delivery Method: {method}", count, pct(count)])
    return _to_csv(["Category", "Count", "Percentage"], rows)


def delivery_csv(deliveries: List[Dict]) -> str:
    rows = [
        [
            d.get("senior_name") or "Unknown",
            d.get("volunteer_name") or "Unassigned",
            d.get("delivery_date"),
            d.get("status"),
            d.get("delivery_method") or "N/A",
            d.get("notes") or "",
        ]
        for d in deliveries
    ]
    return _to_csv(["Senior Name", "Volunteer Name", "Delivery Date", "Status", "Delivery Method", "Notes"], rows)
