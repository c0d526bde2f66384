"""Tests for the leader statistics dashboard."""

import datetime

from conexion.attendance.services import AttendanceService
from conexion.errors import AccessDenied, NotFoundError, ValidationError
from conexion.stats.services import StatsService
from conexion.stats.utils import (
    age_band,
    calculate_age,
    month_label,
    period_range,
    term_start_month,
    trend_months,
)
from tests.conftest import AppTestCase, ServiceTestCase, add_group, add_user, utc

NOW = utc(2026, 10, 17, 12)
END = datetime.time(23, 59, 59, 999999)


def end_of(year, month, day):
    return datetime.datetime.combine(
        datetime.date(year, month, day), END, tzinfo=datetime.timezone.utc
    )


class StatsUtilsTestCase(ServiceTestCase):
    def test_past_periods_use_natural_bounds(self):
        self.assertEqual(
            period_range("month", utc(2026, 3, 15), NOW),
            (utc(2026, 3, 1), end_of(2026, 3, 31)),
        )
        self.assertEqual(
            period_range("quarter", utc(2026, 6, 10), NOW),
            (utc(2026, 5, 1), end_of(2026, 8, 31)),
        )
        self.assertEqual(
            period_range("year", utc(2025, 6, 1), NOW),
            (utc(2025, 1, 1), end_of(2025, 12, 31)),
        )

    def test_current_periods_end_today(self):
        self.assertEqual(
            period_range("month", utc(2026, 10, 5), NOW),
            (utc(2026, 10, 1), end_of(2026, 10, 17)),
        )
        self.assertEqual(
            period_range("quarter", utc(2026, 9, 20), NOW),
            (utc(2026, 9, 1), end_of(2026, 10, 17)),
        )
        self.assertEqual(
            period_range("year", utc(2026, 2, 1), NOW),
            (utc(2026, 1, 1), end_of(2026, 10, 17)),
        )

    def test_week_runs_from_monday_to_reference(self):
        self.assertEqual(
            period_range("week", utc(2026, 10, 15), NOW),
            (utc(2026, 10, 12), end_of(2026, 10, 15)),
        )

    def test_invalid_period_type(self):
        with self.assertRaises(ValidationError):
            period_range("decade", NOW, NOW)

    def test_terms(self):
        self.assertEqual(
            [term_start_month(m) for m in range(1, 13)],
            [1, 1, 1, 1, 5, 5, 5, 5, 9, 9, 9, 9],
        )

    def test_trend_months(self):
        self.assertEqual(
            trend_months("quarter", utc(2026, 6, 10)),
            [(2026, 5), (2026, 6), (2026, 7), (2026, 8)],
        )
        self.assertEqual(
            trend_months("month", utc(2026, 2, 10)),
            [(2025, 9), (2025, 10), (2025, 11), (2025, 12), (2026, 1), (2026, 2)],
        )
        self.assertEqual(
            trend_months("year", utc(2026, 7, 1)),
            [(2026, m) for m in range(1, 13)],
        )
        self.assertEqual(trend_months("week", utc(2026, 10, 15)), [(2026, 10)])

    def test_month_label(self):
        self.assertEqual(month_label(2026, 1), "Ene 2026")
        self.assertEqual(month_label(2025, 12), "Dic 2025")

    def test_age(self):
        today = datetime.date(2026, 10, 17)
        self.assertEqual(calculate_age(utc(2000, 10, 18), today), 25)
        self.assertEqual(calculate_age(utc(2000, 10, 17), today), 26)

    def test_age_bands(self):
        cases = {
            12: "-13",
            13: "13-17",
            17: "13-17",
            25: "18-25",
            26: "26-35",
            45: "36-45",
            55: "46-55",
            56: "56+",
        }
        for age, band in cases.items():
            with self.subTest(age=age):
                self.assertEqual(age_band(age), band)


class StatsServiceTestCase(ServiceTestCase):
    def setUp(self):
        super().setUp()
        add_user(self.db, "leader")
        add_user(
            self.db,
            "ana",
            gender="Female",
            leader="leader",
            birthdate=utc(2010, 1, 1),
            isActiveInSchool=True,
            currentCourses=["c1", "c2"],
        )
        add_user(
            self.db,
            "beto",
            leader="leader",
            birthdate=utc(1990, 5, 5),
            currentCourses=["c1", "gone"],
        )
        add_user(
            self.db, "carla", gender="Female", leader="leader", currentCourses=["c1"]
        )
        add_user(self.db, "other")
        add_group(self.db, "g1", ["leader"], ["ana", "beto", "carla"])
        add_group(self.db, "g2", ["other"])
        self.db.collection("courses").document("c1").set({"name": "Fundamentos"})
        self.db.collection("courses").document("c2").set({"name": "Liderazgo"})

    def _record(self, user_id, date, type_, count, **kwargs):
        AttendanceService.record_attendance(
            self.db, user_id, date, type_, count, **kwargs
        )

    def test_gender_distribution(self):
        self.assertEqual(
            StatsService.get_gender_distribution(self.db, "leader"),
            {"male": 1, "female": 2},
        )

    def test_group_must_be_led_by_caller(self):
        with self.assertRaises(AccessDenied):
            StatsService.get_gender_distribution(self.db, "leader", "g2")
        with self.assertRaises(NotFoundError):
            StatsService.get_gender_distribution(self.db, "leader", "missing")

    def test_non_leader_sees_empty_stats(self):
        self.assertEqual(
            StatsService.get_gender_distribution(self.db, "ana"),
            {"male": 0, "female": 0},
        )

    def test_age_distribution_skips_missing_birthdates(self):
        bands = StatsService.get_age_distribution(self.db, "leader", now=NOW)

        counts = {b["range"]: b["count"] for b in bands}
        self.assertEqual([b["range"] for b in bands], list(counts))
        self.assertEqual(counts["13-17"], 1)
        self.assertEqual(counts["36-45"], 1)
        self.assertEqual(sum(counts.values()), 2)

    def test_school_participation(self):
        self.assertEqual(
            StatsService.get_school_participation(self.db, "leader", "g1"),
            {"active": 1, "inactive": 2},
        )

    def test_popular_courses(self):
        courses = StatsService.get_popular_courses(self.db, "leader")

        self.assertEqual(courses[0], {"courseName": "Fundamentos", "count": 3})
        self.assertEqual(
            sorted(c["courseName"] for c in courses[1:]),
            ["Curso desconocido", "Liderazgo"],
        )
        self.assertEqual(
            len(StatsService.get_popular_courses(self.db, "leader", limit=2)), 2
        )

    def test_attendance_trends(self):
        self._record(
            "leader", datetime.date(2026, 3, 2), "reset", 4, service="sunday-1"
        )
        self._record(
            "ana",
            datetime.date(2026, 3, 1),
            "nuevos_asistentes",
            2,
            attended=True,
            service="sunday-2",
        )
        self._record("beto", datetime.date(2026, 1, 5), "conferencia", 5)
        self._record("beto", datetime.date(2026, 4, 6), "reset", 10)
        self._record("other", datetime.date(2026, 3, 2), "reset", 50)

        rows = StatsService.get_attendance_trends(
            self.db, "leader", "month", utc(2026, 3, 15), now=NOW
        )

        self.assertEqual(
            [r["month"] for r in rows],
            ["Oct 2025", "Nov 2025", "Dic 2025", "Ene 2026", "Feb 2026", "Mar 2026"],
        )
        self.assertEqual(rows[3]["conferencia"], 5)
        march = rows[-1]
        self.assertEqual(march["reset"], 4)
        self.assertEqual(march["nuevos_asistentes"], 3)
        self.assertEqual(march["sunday-1"], 4)
        self.assertEqual(march["sunday-2"], 3)
        self.assertEqual(march["saturday-1"], 0)

    def test_service_distribution(self):
        self._record(
            "leader", datetime.date(2026, 3, 2), "reset", 4, service="sunday-1"
        )
        self._record(
            "ana",
            datetime.date(2026, 3, 1),
            "nuevos_asistentes",
            2,
            attended=True,
            service="sunday-2",
        )
        self._record(
            "ana", datetime.date(2026, 2, 1), "reset", 9, service="sunday-2"
        )

        result = StatsService.get_service_distribution(
            self.db, "leader", "month", utc(2026, 3, 15), now=NOW
        )

        self.assertEqual(
            result,
            [
                {"service": "Sábado NEXT 5PM", "count": 0},
                {"service": "Sábado NEXT 7PM", "count": 0},
                {"service": "Domingo 9AM", "count": 4},
                {"service": "Domingo 11:30AM", "count": 3},
            ],
        )


class StatsRoutesTestCase(AppTestCase):
    def setUp(self):
        super().setUp()
        add_user(self.db, "user1")
        add_user(self.db, "ana", gender="Female", leader="user1")
        add_group(self.db, "g1", ["user1"], ["ana"])
        self._set_session_user()

    def test_gender(self):
        response = self.client.get("/stats/gender")
        self.assertEqual(response.get_json(), {"male": 0, "female": 1})

    def test_trends_with_reference_date(self):
        response = self.client.get(
            "/stats/attendance-trends?periodType=year&referenceDate=2025-06-01"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.get_json()), 12)

    def test_invalid_period_type(self):
        response = self.client.get("/stats/services?periodType=decade")
        self.assertEqual(response.status_code, 400)

    def test_invalid_reference_date(self):
        response = self.client.get("/stats/services?referenceDate=ayer")
        self.assertEqual(response.status_code, 400)
