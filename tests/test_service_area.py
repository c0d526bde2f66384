"""Tests for service areas and user assignments."""

from conexion.errors import AccessDenied, NotFoundError, ValidationError
from conexion.service_area.services import ServiceAreaService
from tests.conftest import AppTestCase, ServiceTestCase, add_user


class ServiceAreaServiceTestCase(ServiceTestCase):
    def setUp(self):
        super().setUp()
        add_user(self.db, "admin", isAdmin=True)
        add_user(self.db, "member")
        add_user(self.db, "helper")
        self.service_id = ServiceAreaService.create_service(
            self.db, "admin", "  Alabanza "
        )

    def _user(self, user_id):
        return self.db.collection("users").document(user_id).get().to_dict()

    def test_create_and_list_sorted(self):
        ServiceAreaService.create_service(self.db, "admin", "Acogida")

        names = [s["name"] for s in ServiceAreaService.get_all_services(self.db)]

        self.assertEqual(names, ["Acogida", "Alabanza"])

    def test_admin_only_management(self):
        with self.assertRaises(AccessDenied):
            ServiceAreaService.create_service(self.db, "member", "Ujieres")
        with self.assertRaises(AccessDenied):
            ServiceAreaService.update_service(
                self.db, "member", self.service_id, name="Otra"
            )
        with self.assertRaises(AccessDenied):
            ServiceAreaService.delete_service(self.db, "member", self.service_id)
        with self.assertRaises(AccessDenied):
            ServiceAreaService.assign_service_to_user_for_admin(
                self.db, "member", "helper", self.service_id
            )

    def test_name_validation(self):
        with self.assertRaises(ValidationError):
            ServiceAreaService.create_service(self.db, "admin", " a ")
        with self.assertRaises(ValidationError):
            ServiceAreaService.update_service(
                self.db, "admin", self.service_id, name=""
            )

    def test_rename(self):
        ServiceAreaService.update_service(
            self.db, "admin", self.service_id, name="Música"
        )
        service = ServiceAreaService.get_service_by_id(self.db, self.service_id)
        self.assertEqual(service["name"], "Música")

    def test_self_assignment(self):
        self.assertIsNone(ServiceAreaService.get_my_service(self.db, "member"))

        ServiceAreaService.assign_service_to_user(self.db, "member", self.service_id)
        self.assertEqual(
            ServiceAreaService.get_my_service(self.db, "member")["id"], self.service_id
        )

        ServiceAreaService.remove_service_from_user(self.db, "member")
        self.assertIsNone(self._user("member")["serviceId"])

    def test_assign_unknown_service(self):
        with self.assertRaises(NotFoundError):
            ServiceAreaService.assign_service_to_user(self.db, "member", "missing")

    def test_admin_assignment(self):
        ServiceAreaService.assign_service_to_user_for_admin(
            self.db, "admin", "helper", self.service_id
        )
        self.assertEqual(self._user("helper")["serviceId"], self.service_id)

        ServiceAreaService.remove_service_from_user_for_admin(
            self.db, "admin", "helper"
        )
        self.assertIsNone(self._user("helper")["serviceId"])

        with self.assertRaises(NotFoundError):
            ServiceAreaService.remove_service_from_user_for_admin(
                self.db, "admin", "ghost"
            )

    def test_delete_unassigns_users(self):
        other_id = ServiceAreaService.create_service(self.db, "admin", "Ujieres")
        ServiceAreaService.assign_service_to_user(self.db, "member", self.service_id)
        ServiceAreaService.assign_service_to_user(self.db, "helper", other_id)

        ServiceAreaService.delete_service(self.db, "admin", self.service_id)

        self.assertIsNone(
            ServiceAreaService.get_service_by_id(self.db, self.service_id)
        )
        self.assertIsNone(self._user("member")["serviceId"])
        self.assertEqual(self._user("helper")["serviceId"], other_id)


class ServiceAreaRoutesTestCase(AppTestCase):
    def setUp(self):
        super().setUp()
        add_user(self.db, "user1", isAdmin=True)
        self._set_session_user()

    def test_create_join_and_leave(self):
        response = self.client.post("/services/", json={"name": "Alabanza"})
        self.assertEqual(response.status_code, 201)
        service_id = response.get_json()["serviceId"]

        response = self.client.post("/services/mine", json={"serviceId": service_id})
        self.assertEqual(response.status_code, 200)

        response = self.client.get("/services/mine")
        self.assertEqual(response.get_json()["name"], "Alabanza")

        response = self.client.delete("/services/mine")
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.client.get("/services/mine").get_json())

    def test_unknown_service(self):
        response = self.client.get("/services/missing")
        self.assertEqual(response.status_code, 404)

    def test_assign_requires_service_id(self):
        response = self.client.post("/services/mine", json={})
        self.assertEqual(response.status_code, 400)
