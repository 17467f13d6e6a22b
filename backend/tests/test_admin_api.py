"""
test_admin_api.py: Admin user management, scoped to the caller's company.
"""

from conftest import auth_headers, make_user
from pocket_kintai.core.security import verify_password
from pocket_kintai.models import User, UserRole


def _new_user(**overrides):
    body = {"email": "new@acme.com", "password": "secret1", "name": "New Hire"}
    body.update(overrides)
    return body


class TestCreateAndFetch:

    def test_created_user_never_exposes_password(self, client, admin, company):
        resp = client.post("/api/admin/users", json=_new_user(), headers=auth_headers(admin))
        assert resp.status_code == 201
        created = resp.json()["data"]
        assert created["role"] == "EMPLOYEE"
        assert created["companyId"] == company.id
        assert "password" not in created
        assert "hashedPassword" not in created

        fetched = client.get(f"/api/admin/users/{created['id']}", headers=auth_headers(admin)).json()["data"]
        assert fetched["email"] == "new@acme.com"
        assert "password" not in fetched
        assert "hashedPassword" not in fetched

    def test_duplicate_email(self, client, admin, employee):
        resp = client.post("/api/admin/users", json=_new_user(email=employee.email), headers=auth_headers(admin))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email is already in use"

    def test_short_password(self, client, admin):
        resp = client.post("/api/admin/users", json=_new_user(password="123"), headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_cannot_create_super_admin(self, client, admin):
        resp = client.post("/api/admin/users", json=_new_user(role="SUPER_ADMIN"), headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_super_admin_needs_company(self, client, super_admin, company):
        headers = auth_headers(super_admin)
        assert client.post("/api/admin/users", json=_new_user(), headers=headers).status_code == 400
        resp = client.post("/api/admin/users", json=_new_user(companyId=company.id), headers=headers)
        assert resp.status_code == 201
        assert resp.json()["data"]["companyId"] == company.id

    def test_employee_forbidden(self, client, employee):
        resp = client.post("/api/admin/users", json=_new_user(), headers=auth_headers(employee))
        assert resp.status_code == 403
        assert resp.json()["message"] == "Admin access required"


class TestListUpdateDelete:

    def test_list_confined_to_company(self, client, admin, employee, outsider):
        data = client.get("/api/admin/users", headers=auth_headers(admin)).json()["data"]
        emails = {u["email"] for u in data["users"]}
        assert emails == {admin.email, employee.email}
        assert data["pagination"]["total"] == 2

    def test_super_admin_sees_everyone(self, client, super_admin, admin, outsider):
        data = client.get("/api/admin/users?limit=50", headers=auth_headers(super_admin)).json()["data"]
        assert data["pagination"]["total"] == 3

    def test_other_tenant_user_is_404(self, client, admin, outsider):
        assert client.get(f"/api/admin/users/{outsider.id}", headers=auth_headers(admin)).status_code == 404

    def test_update_rehashes_password(self, client, db, admin, employee):
        resp = client.put(
            f"/api/admin/users/{employee.id}",
            json={"name": "Renamed", "password": "brandnew", "role": "ADMIN"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["role"] == "ADMIN"
        user = db.get(User, employee.id)
        assert user.name == "Renamed"
        assert verify_password("brandnew", user.hashed_password)

    def test_update_email_uniqueness_excludes_self(self, client, db, admin, employee, coworker):
        headers = auth_headers(admin)
        same = client.put(f"/api/admin/users/{employee.id}", json={"email": employee.email}, headers=headers)
        assert same.status_code == 200
        taken = client.put(f"/api/admin/users/{employee.id}", json={"email": coworker.email}, headers=headers)
        assert taken.status_code == 400

    def test_delete(self, client, db, admin, employee):
        employee_id = employee.id
        resp = client.delete(f"/api/admin/users/{employee_id}", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert db.get(User, employee_id) is None

    def test_self_delete_rejected(self, client, admin):
        resp = client.delete(f"/api/admin/users/{admin.id}", headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_delete_unknown(self, client, admin):
        assert client.delete("/api/admin/users/9999", headers=auth_headers(admin)).status_code == 404

    def test_admin_cannot_touch_super_admin(self, client, db, admin, company):
        # A super admin parked inside a company is still off limits to company admins
        boss = make_user(db, "boss@acme.com", UserRole.SUPER_ADMIN, company)
        resp = client.delete(f"/api/admin/users/{boss.id}", headers=auth_headers(admin))
        assert resp.status_code == 404
