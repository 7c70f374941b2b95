def test_create_and_get_template(client, auth_headers, active_template):
    assert active_template["status"] == "active"
    assert active_template["version"] == "1.0.0"
    assert [q["key"] for q in active_template["questions"]] == ["problems", "satisfaction", "interested_in_trying"]

    r = client.get(f"/api/survey-templates/{active_template['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["name"] == active_template["name"]


def test_template_requires_questions(client, auth_headers, template_payload):
    payload = template_payload()
    payload["questions"] = []
    r = client.post("/api/survey-templates", json=payload, headers=auth_headers)
    assert r.status_code == 422


def test_list_filters_by_status_and_search(client, auth_headers, template_payload):
    client.post("/api/survey-templates", json=template_payload(name="Campus Needs"), headers=auth_headers)
    client.post("/api/survey-templates", json=template_payload(status="draft", name="Draft Survey"),
                headers=auth_headers)

    body = client.get("/api/survey-templates", params={"status": "active"}, headers=auth_headers).json()
    assert [t["name"] for t in body["templates"]] == ["Campus Needs"]
    assert body["pagination"]["total"] == 1

    body = client.get("/api/survey-templates", params={"search": "draft"}, headers=auth_headers).json()
    assert [t["name"] for t in body["templates"]] == ["Draft Survey"]


def test_update_template(client, auth_headers, active_template):
    r = client.put(f"/api/survey-templates/{active_template['id']}",
                   json={"status": "archived", "tags": ["closed"]}, headers=auth_headers)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "archived"
    assert r.json()["tags"] == ["closed"]
    assert r.json()["name"] == active_template["name"]


def test_duplicate_template_is_draft_copy(client, auth_headers, active_template):
    r = client.post(f"/api/survey-templates/{active_template['id']}/duplicate", headers=auth_headers)
    assert r.status_code == 201, r.text
    copy = r.json()
    assert copy["id"] != active_template["id"]
    assert copy["name"] == f"{active_template['name']} (Copy)"
    assert copy["status"] == "draft"
    assert copy["questions"] == active_template["questions"]


def test_delete_unused_template(client, auth_headers, active_template):
    r = client.delete(f"/api/survey-templates/{active_template['id']}", headers=auth_headers)
    assert r.status_code == 204
    r = client.get(f"/api/survey-templates/{active_template['id']}", headers=auth_headers)
    assert r.status_code == 404


def test_delete_blocked_when_responses_exist(client, auth_headers, active_template, candidate):
    r = client.post("/api/survey-responses", json=candidate(active_template["id"]), headers=auth_headers)
    assert r.status_code == 201, r.text

    r = client.delete(f"/api/survey-templates/{active_template['id']}", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot delete template with existing responses. Archive it instead."


def test_templates_are_team_scoped(client, register, active_template):
    other = register(team_name="Other Team")
    r = client.get(f"/api/survey-templates/{active_template['id']}", headers=other["headers"])
    assert r.status_code == 404
    body = client.get("/api/survey-templates", headers=other["headers"]).json()
    assert body["templates"] == []
