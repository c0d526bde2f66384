"""Tests for attendance records and reports."""

import datetime

from conexion.attendance.services import AttendanceService
from conexion.attendance.utils import clean_record, month_range, normalize_date
from conexion.errors import AccessDenied, NotFoundError, ValidationError
from tests.conftest import AppTestCase, ServiceTestCase, add_group, add_user, utc

SUNDAY = datetime.date(2026, 3, 1)
MONDAY = datetime.date(2026, 3, 2)


class AttendanceUtilsTestCase(ServiceTestCase):
    def test_normalize_date(self):
        self.assertEqual(normalize_date(MONDAY), utc(2026, 3, 2))
        self.assertEqual(normalize_date(utc(2026, 3, 2, 22, 15)), utc(2026, 3, 2))

    def test_month_range(self):
        start, end = month_range(2024, 2)
        self.assertEqual(start, utc(2024, 2, 1))
        self.assertEqual(end, utc(2024, 2, 29, 23, 59, 59, 999999))
        with self.assertRaises(ValidationError):
            month_range(2024, 13)

    def test_new_attendees_only_on_sunday(self):
        with self.assertRaises(ValidationError):
            clean_record(MONDAY, "nuevos_asistentes", 2, attended=True)

        data = clean_record(SUNDAY, "nuevos_asistentes", 2, attended=False)
        self.assertEqual(
            data,
            {
                "date": utc(2026, 3, 1),
                "type": "nuevos_asistentes",
                "attended": False,
                "count": 2,
            },
        )

    def test_attended_required_for_new_attendees(self):
        with self.assertRaises(ValidationError):
            clean_record(SUNDAY, "nuevos_asistentes", 2)

    def test_attended_dropped_for_other_types(self):
        data = clean_record(MONDAY, "reset", 3, attended=True)
        self.assertNotIn("attended", data)

    def test_invalid_values(self):
        cases = [
            (MONDAY, "reset", -1, None, None),
            (MONDAY, "reset", None, None, None),
            (MONDAY, "culto", 1, None, None),
            (MONDAY, "reset", 1, None, "monday-1"),
        ]
        for date, type_, count, attended, service in cases:
            with self.subTest(type=type_, count=count, service=service):
                with self.assertRaises(ValidationError):
                    clean_record(date, type_, count, attended, service)

    def test_zero_count_is_valid(self):
        self.assertEqual(clean_record(MONDAY, "conferencia", 0)["count"], 0)


class AttendanceServiceTestCase(ServiceTestCase):
    def setUp(self):
        super().setUp()
        add_user(self.db, "leader", gender="Male")
        add_user(self.db, "ana", gender="Female", leader="leader")
        add_user(self.db, "beto", gender="Male", leader="leader")
        add_user(self.db, "other", leader="someone")
        add_group(self.db, "g1", ["leader"], ["ana", "beto"])

    def _record(self, user_id, date, type_="reset", count=1, **kwargs):
        return AttendanceService.record_attendance(
            self.db, user_id, date, type_, count, **kwargs
        )

    def _stored(self, record_id):
        return self.db.collection("attendanceRecords").document(record_id).get()

    def test_co_leaders_of_opposite_gender(self):
        add_user(self.db, "maria", gender="Female")
        add_user(self.db, "carlos", gender="Male")
        add_group(self.db, "g2", ["leader", "maria"])
        add_group(self.db, "g3", ["maria", "leader"])
        add_group(self.db, "g4", ["leader", "carlos"])

        co_leaders = AttendanceService.get_co_leaders(self.db, "leader")

        self.assertEqual(
            co_leaders,
            [
                {
                    "id": "maria",
                    "name": "Maria",
                    "email": "maria@example.com",
                    "gender": "Female",
                }
            ],
        )
        self.assertEqual(AttendanceService.get_co_leaders(self.db, "carlos"), [])
        self.assertEqual(AttendanceService.get_co_leaders(self.db, "ana"), [])

    def test_record_attendance_normalizes_date(self):
        record_id = self._record(
            "ana", utc(2026, 3, 1, 18, 30), "nuevos_asistentes", 3, attended=True
        )

        record = self._stored(record_id).to_dict()
        self.assertEqual(record["date"], utc(2026, 3, 1))
        self.assertEqual(record["userId"], "ana")
        self.assertTrue(record["attended"])

    def test_update_validates_merged_record(self):
        record_id = self._record(
            "ana", SUNDAY, "nuevos_asistentes", 3, attended=True, service="sunday-1"
        )

        with self.assertRaises(ValidationError):
            AttendanceService.update_attendance(self.db, "ana", record_id, date=MONDAY)

        AttendanceService.update_attendance(
            self.db, "ana", record_id, date=MONDAY, type="reset"
        )
        record = self._stored(record_id).to_dict()
        self.assertEqual(record["type"], "reset")
        self.assertIsNone(record["attended"])
        self.assertEqual(record["service"], "sunday-1")
        self.assertEqual(record["count"], 3)

    def test_only_owner_edits_and_deletes(self):
        record_id = self._record("ana", MONDAY)

        with self.assertRaises(AccessDenied):
            AttendanceService.update_attendance(self.db, "beto", record_id, count=5)
        with self.assertRaises(AccessDenied):
            AttendanceService.delete_attendance(self.db, "beto", record_id)
        with self.assertRaises(NotFoundError):
            AttendanceService.delete_attendance(self.db, "ana", "missing")

        AttendanceService.delete_attendance(self.db, "ana", record_id)
        self.assertFalse(self._stored(record_id).exists)

    def test_my_records_filters(self):
        march = self._record("ana", MONDAY, "reset")
        april = self._record("ana", datetime.date(2026, 4, 6), "reset")
        conference = self._record("ana", MONDAY, "conferencia")
        self._record("beto", MONDAY, "reset")

        all_records = AttendanceService.get_my_attendance_records(self.db, "ana")
        self.assertEqual(all_records[0]["id"], april)
        self.assertEqual(len(all_records), 3)

        resets = AttendanceService.get_my_attendance_records(
            self.db, "ana", type="reset"
        )
        self.assertEqual({r["id"] for r in resets}, {march, april})

        in_march = AttendanceService.get_my_attendance_records(
            self.db, "ana", month=3, year=2026
        )
        self.assertEqual({r["id"] for r in in_march}, {march, conference})

        # A month without a year does not filter.
        self.assertEqual(
            len(AttendanceService.get_my_attendance_records(self.db, "ana", month=3)),
            3,
        )

    def test_records_by_user_for_leaders(self):
        self._record("ana", MONDAY)

        records = AttendanceService.get_attendance_records_by_user_id(
            self.db, "leader", "ana"
        )
        self.assertEqual(len(records), 1)

        with self.assertRaises(AccessDenied):
            AttendanceService.get_attendance_records_by_user_id(self.db, "ana", "beto")
        with self.assertRaises(AccessDenied):
            AttendanceService.get_attendance_records_by_user_id(
                self.db, "leader", "other"
            )
        with self.assertRaises(NotFoundError):
            AttendanceService.get_attendance_records_by_user_id(
                self.db, "leader", "ghost"
            )

    def test_monthly_report_counts_owner_attendance(self):
        self._record("ana", SUNDAY, "nuevos_asistentes", 2, attended=True)
        self._record(
            "ana", datetime.date(2026, 3, 8), "nuevos_asistentes", 1, attended=False
        )
        self._record("ana", MONDAY, "reset", 4)
        self._record("ana", datetime.date(2026, 4, 6), "reset", 10)

        report = AttendanceService.get_my_monthly_report(self.db, "ana", 2026, 3)

        self.assertEqual(report["nuevos_asistentes"]["total"], 4)
        self.assertEqual(report["nuevos_asistentes"]["female"], 4)
        self.assertEqual(report["nuevos_asistentes"]["male"], 0)
        self.assertEqual(len(report["nuevos_asistentes"]["records"]), 2)
        self.assertEqual(report["reset"]["total"], 4)
        self.assertEqual(report["conferencia"]["total"], 0)

        yearly = AttendanceService.get_my_monthly_report(self.db, "ana", 2026)
        self.assertEqual(yearly["reset"]["total"], 14)

    def test_group_report_excludes_leader_records(self):
        self._record("leader", MONDAY, "reset", 7)
        self._record("ana", MONDAY, "reset", 2)
        self._record("beto", MONDAY, "reset", 3)
        self._record("other", MONDAY, "reset", 100)

        report = AttendanceService.get_group_attendance_report(
            self.db, "leader", 2026, 3
        )

        self.assertTrue(report["isLeader"])
        reset = report["groupReport"]["reset"]
        self.assertEqual(reset["total"], 5)
        self.assertEqual(reset["female"], 2)
        self.assertEqual(reset["male"], 3)
        self.assertEqual(reset["myTotal"], 7)
        self.assertEqual(reset["myMale"], 7)
        self.assertEqual(reset["disciplesTotal"], 5)
        self.assertEqual(report["myReport"]["reset"]["total"], 7)

    def test_group_report_filters(self):
        self._record("ana", MONDAY, "reset", 2)
        self._record("beto", MONDAY, "reset", 3)

        by_disciple = AttendanceService.get_group_attendance_report(
            self.db, "leader", 2026, 3, disciple_id="beto"
        )
        self.assertEqual(by_disciple["groupReport"]["reset"]["total"], 3)

        by_group = AttendanceService.get_group_attendance_report(
            self.db, "leader", 2026, 3, group_id="g1"
        )
        self.assertEqual(by_group["groupReport"]["reset"]["total"], 5)

        with self.assertRaises(AccessDenied):
            AttendanceService.get_group_attendance_report(
                self.db, "leader", 2026, 3, group_id="elsewhere"
            )
        with self.assertRaises(AccessDenied):
            AttendanceService.get_group_attendance_report(
                self.db, "leader", 2026, 3, disciple_id="other"
            )

    def test_group_report_for_non_leader(self):
        self._record("ana", MONDAY, "reset", 2)

        report = AttendanceService.get_group_attendance_report(self.db, "ana", 2026, 3)

        self.assertFalse(report["isLeader"])
        self.assertIsNone(report["groupReport"])
        self.assertEqual(report["myReport"]["reset"]["total"], 2)


class AttendanceRoutesTestCase(AppTestCase):
    def setUp(self):
        super().setUp()
        add_user(self.db, "user1")
        self._set_session_user()

    def test_record_and_report(self):
        response = self.client.post(
            "/attendance/",
            json={
                "date": "2026-03-01",
                "type": "nuevos_asistentes",
                "count": 0,
                "attended": True,
                "service": "sunday-2",
            },
        )
        self.assertEqual(response.status_code, 201)

        response = self.client.get("/attendance/report?year=2026&month=3")
        data = response.get_json()
        self.assertEqual(data["nuevos_asistentes"]["total"], 1)
        self.assertEqual(data["nuevos_asistentes"]["male"], 1)

    def test_sunday_rule(self):
        response = self.client.post(
            "/attendance/",
            json={
                "date": "2026-03-02",
                "type": "nuevos_asistentes",
                "count": 1,
                "attended": False,
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("domingo", response.get_json()["error"])

    def test_report_requires_year(self):
        response = self.client.get("/attendance/report")
        self.assertEqual(response.status_code, 400)

    def test_null_date_is_a_validation_error(self):
        response = self.client.post(
            "/attendance/",
            json={"date": None, "type": "reset", "count": None},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.get_json())

    def test_co_leaders(self):
        add_user(self.db, "maria", gender="Female")
        add_group(self.db, "g1", ["user1", "maria"])

        response = self.client.get("/attendance/co-leaders")
        self.assertEqual([c["id"] for c in response.get_json()], ["maria"])
