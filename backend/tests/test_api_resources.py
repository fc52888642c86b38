from conftest import ADMIN, add_allocation, add_project, add_resource, as_user
from resourcio.models.audit_log import AuditLog
from resourcio.models.user import User


def test_create_and_get_resource(client):
    r = client.post("/api/resources", headers=ADMIN, json={
        "name": "Anna de Vries",
        "email": "Anna@Resourcio.nl",
        "role": "Solution Architect",
        "weeklyCapacity": 36,
        "skills": ["cloud"],
    })
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["email"] == "anna@resourcio.nl"
    assert body["weeklyCapacity"] == 36
    assert body["department"] == "IT Architecture & Delivery"
    assert body["isDeleted"] is False

    r = client.get(f"/api/resources/{body['id']}", headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["name"] == "Anna de Vries"


def test_create_resource_validation(client):
    r = client.post("/api/resources", headers=ADMIN, json={"name": "X", "email": "x@resourcio.nl", "weeklyCapacity": 80})
    assert r.status_code == 422


def test_duplicate_email_conflicts(client, db):
    add_resource(db, "Anna de Vries", email="anna@resourcio.nl")
    r = client.post("/api/resources", headers=ADMIN, json={"name": "Other", "email": "anna@resourcio.nl"})
    assert r.status_code == 409


def test_list_resources_hides_deleted_and_filters_department(client, db):
    add_resource(db, "Anna de Vries")
    add_resource(db, "Chloe Peeters", department="Business Operations")
    add_resource(db, "Gert Gone", is_deleted=True)

    names = [r["name"] for r in client.get("/api/resources", headers=ADMIN).json()]
    assert names == ["Anna de Vries", "Chloe Peeters"]

    r = client.get("/api/resources", headers=ADMIN, params={"department": "Business Operations"})
    assert [x["name"] for x in r.json()] == ["Chloe Peeters"]

    r = client.get("/api/resources", headers=ADMIN, params={"includeDeleted": "true"})
    assert len(r.json()) == 3


def test_update_resource(client, db):
    anna = add_resource(db, "Anna de Vries")
    r = client.put(f"/api/resources/{anna.id}", headers=ADMIN, json={"weeklyCapacity": 32, "department": "Ops"})
    assert r.status_code == 200
    assert r.json()["weeklyCapacity"] == 32
    assert r.json()["department"] == "Ops"

    assert client.put("/api/resources/999", headers=ADMIN, json={"name": "x"}).status_code == 404


def test_soft_delete_reports_relationships_and_deactivates_users(client, db):
    anna = add_resource(db, "Anna de Vries")
    project = add_project(db, change_lead_id=anna.id)
    add_allocation(db, project, anna, 16)
    db.add(User(email="anna@resourcio.nl", password_hash="x$y", resource_id=anna.id))
    db.commit()

    rel = client.get(f"/api/resources/{anna.id}/relationships", headers=ADMIN).json()
    assert rel["activeAllocations"] == 1
    assert rel["projectsAsChangeLead"] == 1
    assert rel["userAccounts"] == 1

    r = client.delete(f"/api/resources/{anna.id}", headers=ADMIN)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["deactivatedUsers"] == 1
    assert any("active project allocation" in w for w in body["relationships"]["warnings"])

    db.expire_all()
    assert db.query(User).filter(User.resource_id == anna.id).one().is_active is False
    assert db.query(AuditLog).filter(AuditLog.action == "soft_delete").count() == 1

    assert client.get(f"/api/resources/{anna.id}/relationships", headers=ADMIN).status_code == 404
    names = [x["name"] for x in client.get("/api/resources", headers=ADMIN).json()]
    assert "Anna de Vries" not in names


def test_resource_allocations(client, db):
    anna = add_resource(db, "Anna de Vries")
    project = add_project(db)
    add_allocation(db, project, anna, 16, weekly_allocations={"2025-W34": 8})
    r = client.get(f"/api/resources/{anna.id}/allocations", headers=ADMIN)
    assert r.status_code == 200
    assert r.json()[0]["weeklyAllocations"] == {"2025-W34": 8}
    assert client.get("/api/resources/999/allocations", headers=ADMIN).status_code == 404


def test_regular_user_cannot_manage_resources(client, db):
    anna = add_resource(db, "Anna de Vries")
    regular = as_user("regular_user", resource_id=anna.id, user_id=5)
    # dashboard permission is enough to read
    assert client.get("/api/resources", headers=regular).status_code == 200
    assert client.post("/api/resources", headers=regular, json={"name": "X", "email": "x@resourcio.nl"}).status_code == 403
    assert client.delete(f"/api/resources/{anna.id}", headers=regular).status_code == 403


def test_change_lead_cannot_delete(client, db):
    anna = add_resource(db, "Anna de Vries")
    r = client.delete(f"/api/resources/{anna.id}", headers=as_user("change_lead"))
    assert r.status_code == 403
