from conftest import ADMIN, add_allocation, add_project, add_resource, as_user

MANAGER = as_user("manager_change", user_id=2)


def _project_body(**kw):
    body = {
        "name": "Customer Portal Refresh",
        "startDate": "2025-03-03",
        "endDate": "2025-09-26",
        "priority": "high",
        "type": "change",
    }
    body.update(kw)
    return body


def test_create_and_list_projects(client, db):
    lead = add_resource(db, "Bram Janssen")
    r = client.post("/api/projects", headers=MANAGER, json=_project_body(changeLeadId=lead.id))
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "active"
    assert body["changeLeadId"] == lead.id

    listed = client.get("/api/projects", headers=MANAGER).json()
    assert [p["name"] for p in listed] == ["Customer Portal Refresh"]
    assert client.get("/api/projects", headers=MANAGER, params={"status": "draft"}).json() == []


def test_create_project_rejects_bad_input(client):
    r = client.post("/api/projects", headers=ADMIN, json=_project_body(startDate="2025-10-01"))
    assert r.status_code == 422
    r = client.post("/api/projects", headers=ADMIN, json=_project_body(status="paused"))
    assert r.status_code == 422
    r = client.post("/api/projects", headers=ADMIN, json=_project_body(directorId=999))
    assert r.status_code == 400


def test_update_project(client, db):
    project = add_project(db)
    r = client.put(f"/api/projects/{project.id}", headers=ADMIN, json={"status": "closure"})
    assert r.status_code == 200
    assert r.json()["status"] == "closure"

    r = client.put(f"/api/projects/{project.id}", headers=ADMIN, json={"endDate": "2024-01-01"})
    assert r.status_code == 400


def test_delete_project_with_active_allocations_conflicts(client, db):
    anna = add_resource(db)
    project = add_project(db)
    allocation = add_allocation(db, project, anna)

    assert client.delete(f"/api/projects/{project.id}", headers=ADMIN).status_code == 409

    client.put(f"/api/allocations/{allocation.id}", headers=ADMIN, json={"status": "completed"})
    r = client.delete(f"/api/projects/{project.id}", headers=ADMIN)
    assert r.status_code == 200
    assert client.get(f"/api/projects/{project.id}", headers=ADMIN).status_code == 404


def test_regular_user_cannot_write_projects(client, db):
    regular = as_user("regular_user")
    assert client.get("/api/projects", headers=regular).status_code == 200
    assert client.post("/api/projects", headers=regular, json=_project_body()).status_code == 403


# ── Allocations ──


def test_create_allocation(client, db):
    anna = add_resource(db)
    project = add_project(db)
    r = client.post(f"/api/projects/{project.id}/allocations", headers=MANAGER, json={
        "resourceId": anna.id,
        "allocatedHours": 16,
        "startDate": "2025-02-03",
        "endDate": "2025-06-27",
        "role": "Architect",
        "weeklyAllocations": {"2025-W10": 24},
    })
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["projectId"] == project.id
    assert body["allocatedHours"] == 16
    assert body["weeklyAllocations"] == {"2025-W10": 24}

    listed = client.get(f"/api/projects/{project.id}/allocations", headers=MANAGER).json()
    assert [a["id"] for a in listed] == [body["id"]]


def test_create_allocation_validation(client, db):
    anna = add_resource(db)
    project = add_project(db)
    url = f"/api/projects/{project.id}/allocations"
    base = {"resourceId": anna.id, "allocatedHours": 8, "startDate": "2025-02-03", "endDate": "2025-06-27"}

    assert client.post(url, headers=ADMIN, json={**base, "endDate": "2025-01-01"}).status_code == 422
    assert client.post(url, headers=ADMIN, json={**base, "weeklyAllocations": {"W10": 8}}).status_code == 422
    assert client.post(url, headers=ADMIN, json={**base, "resourceId": 999}).status_code == 404
    assert client.post("/api/projects/999/allocations", headers=ADMIN, json=base).status_code == 404

    inactive = add_resource(db, "Finn Willems", is_active=False)
    assert client.post(url, headers=ADMIN, json={**base, "resourceId": inactive.id}).status_code == 400


def test_update_weekly_allocations(client, db):
    anna = add_resource(db)
    bram = add_resource(db, "Bram Janssen")
    project = add_project(db)
    a1 = add_allocation(db, project, anna, 16)
    a2 = add_allocation(db, project, bram, 8, weekly_allocations={"2025-W01": 4})

    r = client.put(f"/api/projects/{project.id}/weekly-allocations", headers=ADMIN, json={
        "allocations": {str(a1.id): {"2025-W34": 8, "2025-W35": 12}, str(a2.id): {}},
    })
    assert r.status_code == 200, r.text
    by_id = {a["id"]: a for a in r.json()}
    assert by_id[a1.id]["weeklyAllocations"] == {"2025-W34": 8, "2025-W35": 12}
    assert by_id[a2.id]["weeklyAllocations"] == {}

    other = add_project(db, "Other")
    foreign = add_allocation(db, other, anna, 4)
    r = client.put(f"/api/projects/{project.id}/weekly-allocations", headers=ADMIN, json={
        "allocations": {str(foreign.id): {"2025-W34": 8}},
    })
    assert r.status_code == 404


def test_list_allocations_by_window(client, db):
    anna = add_resource(db)
    project = add_project(db)
    add_allocation(db, project, anna, 8, start_date=project.start_date.replace(month=1), end_date=project.start_date.replace(month=3))
    late = add_allocation(db, project, anna, 8, start_date=project.start_date.replace(month=6), end_date=project.start_date.replace(month=9))

    r = client.get("/api/allocations", headers=ADMIN, params={"startDate": "2025-05-01", "endDate": "2025-07-01"})
    assert r.status_code == 200
    assert [a["id"] for a in r.json()] == [late.id]

    r = client.get("/api/allocations", headers=ADMIN, params={"startDate": "2025-07-01", "endDate": "2025-05-01"})
    assert r.status_code == 400


def test_update_and_delete_allocation(client, db):
    anna = add_resource(db)
    project = add_project(db)
    allocation = add_allocation(db, project, anna, 8)

    r = client.put(f"/api/allocations/{allocation.id}", headers=ADMIN, json={"allocatedHours": 24})
    assert r.status_code == 200
    assert r.json()["allocatedHours"] == 24

    r = client.put(f"/api/allocations/{allocation.id}", headers=ADMIN, json={"startDate": "2026-01-01"})
    assert r.status_code == 400

    assert client.delete(f"/api/allocations/{allocation.id}", headers=ADMIN).status_code == 200
    assert client.delete(f"/api/allocations/{allocation.id}", headers=ADMIN).status_code == 404
