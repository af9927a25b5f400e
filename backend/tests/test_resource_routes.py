"""
CV Site Backend — Resource Route Integration Tests
====================================================

What:  End-to-end tests for /api/skills and /api/projects.
How:   httpx AsyncClient against the real app; each test seeds its own
       in-memory database (see conftest.py).

What we test:
    ✅ Soft-deleted records never appear in list / retrieve
    ✅ update / patch / remove 404 rules
    ✅ creator is always the caller, never the payload
    ✅ Cursor pages never overlap
    ✅ Embedded relation objects are stored as ids
    ✅ Populated relations leave out soft-deleted targets
    ✅ Anonymous writes and malformed parameters are rejected
"""

import pytest

from cvsite.models import Project, Skill

ALICE = {"X-User-ID": "alice"}


class TestSkillReads:

    @pytest.mark.asyncio
    async def test_list_excludes_deleted_sorted_by_name(self, client, seed):
        await seed(
            Skill(name="Python", category="language"),
            Skill(name="Go", category="language", deleted=True),
            Skill(name="Docker", category="tooling"),
        )

        response = await client.get("/api/skills/")

        assert response.status_code == 200
        assert [s["name"] for s in response.json()] == ["Docker", "Python"]

    @pytest.mark.asyncio
    async def test_list_filters_by_category(self, client, seed):
        await seed(
            Skill(name="Python", category="language"),
            Skill(name="Docker", category="tooling"),
        )

        response = await client.get("/api/skills/", params={"category": "language"})

        assert [s["name"] for s in response.json()] == ["Python"]

    @pytest.mark.asyncio
    async def test_retrieve(self, client, seed):
        (python,) = await seed(Skill(name="Python", level=5))

        response = await client.get(f"/api/skills/{python.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == python.id
        assert body["level"] == 5
        assert body["deleted"] is False

    @pytest.mark.asyncio
    async def test_retrieve_deleted_returns_null(self, client, seed):
        (go,) = await seed(Skill(name="Go", deleted=True))

        response = await client.get(f"/api/skills/{go.id}")

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_retrieve_missing_returns_null(self, client):
        response = await client.get("/api/skills/12345")
        assert response.status_code == 200
        assert response.json() is None


class TestPagination:

    @pytest.mark.asyncio
    async def test_pages_do_not_overlap(self, client, seed):
        await seed(*[Skill(name=f"skill-{i}") for i in range(5)])
        await seed(Skill(name="gone", deleted=True))

        seen = []
        cursor = None
        for expected in (2, 2, 1):
            params = {"limit": 2}
            if cursor is not None:
                params["cursor"] = cursor
            response = await client.get("/api/skills/", params=params)
            assert response.status_code == 200
            page = response.json()
            assert page["limit"] == 2
            assert page["total"] == expected
            ids = [item["id"] for item in page["items"]]
            assert ids == sorted(ids, reverse=True)
            assert page["cursor"] == ids[-1]
            seen.extend(ids)
            cursor = page["cursor"]

        assert len(seen) == len(set(seen)) == 5

        last = (await client.get("/api/skills/", params={"limit": 2, "cursor": cursor})).json()
        assert last["items"] == []
        assert last["cursor"] is None

    @pytest.mark.asyncio
    async def test_zero_limit_means_plain_list(self, client, seed):
        await seed(Skill(name="B"), Skill(name="A"))

        response = await client.get("/api/skills/", params={"limit": 0})

        assert [s["name"] for s in response.json()] == ["A", "B"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [
        {"limit": "abc"},
        {"limit": -1},
        {"limit": 51},
        {"limit": 5, "cursor": 0},
        {"limit": 5, "cursor": "next"},
    ])
    async def test_malformed_paging_rejected(self, client, params):
        response = await client.get("/api/skills/", params=params)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_oversized_cursor_rejected(self, client, seed):
        await seed(Skill(name="Go"))

        response = await client.get(
            "/api/skills/", params={"limit": 2, "cursor": "99999999999999999999999"}
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "cursor"

    @pytest.mark.asyncio
    async def test_largest_cursor_accepted(self, client, seed):
        await seed(Skill(name="Go"))

        response = await client.get("/api/skills/", params={"limit": 2, "cursor": 2**31 - 1})

        assert response.status_code == 200
        assert [s["name"] for s in response.json()["items"]] == ["Go"]


class TestSkillWrites:

    @pytest.mark.asyncio
    async def test_create_stamps_creator_from_caller(self, client):
        response = await client.post(
            "/api/skills/",
            json={"name": "Go", "creator": "mallory", "deleted": True, "id": 999},
            headers=ALICE,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["creator"] == "alice"
        assert body["deleted"] is False
        assert body["id"] != 999

        listed = (await client.get("/api/skills/")).json()
        assert [s["name"] for s in listed] == ["Go"]

    @pytest.mark.asyncio
    async def test_anonymous_create_rejected(self, client):
        response = await client.post("/api/skills/", json={"name": "Go"})

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"
        assert (await client.get("/api/skills/")).json() == []

    @pytest.mark.asyncio
    async def test_update_keeps_creator(self, client, seed):
        (go,) = await seed(Skill(name="Go", creator="bob"))

        response = await client.put(
            f"/api/skills/{go.id}", json={"name": "Golang", "creator": "alice"}, headers=ALICE
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Golang"
        assert response.json()["creator"] == "bob"

    @pytest.mark.asyncio
    async def test_patch_changes_only_sent_fields(self, client, seed):
        (go,) = await seed(Skill(name="Go", level=2, category="language"))

        response = await client.patch(f"/api/skills/{go.id}", json={"level": 4}, headers=ALICE)

        body = response.json()
        assert body["level"] == 4
        assert body["name"] == "Go"
        assert body["category"] == "language"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["put", "patch"])
    async def test_update_deleted_is_not_found(self, client, seed, method):
        (go,) = await seed(Skill(name="Go", deleted=True))

        response = await getattr(client, method)(
            f"/api/skills/{go.id}", json={"name": "Back"}, headers=ALICE
        )

        assert response.status_code == 404
        assert response.json()["details"]["resource_id"] == str(go.id)

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(self, client):
        response = await client.put("/api/skills/777", json={"name": "x"}, headers=ALICE)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_remove_soft_deletes(self, client, seed, db_session):
        (go,) = await seed(Skill(name="Go"))

        response = await client.delete(f"/api/skills/{go.id}", headers=ALICE)

        assert response.status_code == 200
        assert response.json()["deleted"] is True
        assert (await client.get(f"/api/skills/{go.id}")).json() is None
        assert (await db_session.get(Skill, go.id)).deleted is True

    @pytest.mark.asyncio
    async def test_remove_twice_still_succeeds(self, client, seed):
        (go,) = await seed(Skill(name="Go", deleted=True))

        response = await client.delete(f"/api/skills/{go.id}", headers=ALICE)

        assert response.status_code == 200
        assert response.json()["deleted"] is True

    @pytest.mark.asyncio
    async def test_remove_missing_is_not_found(self, client):
        response = await client.delete("/api/skills/4242", headers=ALICE)
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_anonymous_remove_rejected(self, client, seed):
        (go,) = await seed(Skill(name="Go"))
        response = await client.delete(f"/api/skills/{go.id}")
        assert response.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("item_id", ["abc", "0", "-1"])
    async def test_malformed_item_id_rejected(self, client, item_id):
        response = await client.get(f"/api/skills/{item_id}")
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["get", "delete"])
    async def test_oversized_item_id_rejected(self, client, method):
        response = await getattr(client, method)(
            "/api/skills/99999999999999999999999", headers=ALICE
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "item_id"

    @pytest.mark.asyncio
    async def test_largest_item_id_answers_null(self, client):
        response = await client.get(f"/api/skills/{2**31 - 1}")
        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_non_json_body_rejected(self, client):
        response = await client.post(
            "/api/skills/",
            content=b"name=Go",
            headers={**ALICE, "Content-Type": "application/json"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_object_body_rejected(self, client):
        response = await client.post("/api/skills/", json=["Go"], headers=ALICE)
        assert response.status_code == 400


class TestProjects:

    @pytest.mark.asyncio
    async def test_create_normalizes_embedded_references(self, client, seed):
        python, sql = await seed(Skill(name="Python"), Skill(name="SQL"))

        response = await client.post(
            "/api/projects/",
            json={
                "title": "CV site",
                "skills": [{"id": python.id, "name": "Python"}, sql.id],
                "main_skill": {"id": python.id, "name": "Python"},
            },
            headers=ALICE,
        )

        assert response.status_code == 201
        body = response.json()
        assert [s["id"] for s in body["skills"]] == [python.id, sql.id]
        assert body["skills"][1]["name"] == "SQL"
        assert body["main_skill"]["id"] == python.id
        assert body["creator"] == "alice"
        assert body["description"] == ""

    @pytest.mark.asyncio
    async def test_populated_skills_exclude_deleted(self, client, seed):
        live, dead = await seed(Skill(name="Python"), Skill(name="Perl", deleted=True))
        (project,) = await seed(Project(title="Legacy", skills=[live, dead], main_skill_id=dead.id))

        body = (await client.get(f"/api/projects/{project.id}")).json()

        assert [s["name"] for s in body["skills"]] == ["Python"]
        assert body["main_skill"] is None

    @pytest.mark.asyncio
    async def test_list_newest_first_with_population(self, client, seed):
        (python,) = await seed(Skill(name="Python"))
        await seed(Project(title="Old", skills=[python]))
        await seed(Project(title="New"))

        body = (await client.get("/api/projects/")).json()

        assert [p["title"] for p in body] == ["New", "Old"]
        assert body[1]["skills"][0]["name"] == "Python"

    @pytest.mark.asyncio
    async def test_update_replaces_skill_list(self, client, seed):
        python, sql, go = await seed(Skill(name="Python"), Skill(name="SQL"), Skill(name="Go"))
        (project,) = await seed(Project(title="API", skills=[python, sql]))

        response = await client.patch(
            f"/api/projects/{project.id}",
            json={"skills": [{"id": go.id}, python.id]},
            headers=ALICE,
        )

        assert response.status_code == 200
        assert sorted(s["name"] for s in response.json()["skills"]) == ["Go", "Python"]

    @pytest.mark.asyncio
    async def test_unknown_skill_reference_rejected(self, client):
        response = await client.post(
            "/api/projects/", json={"title": "Ghost", "skills": [999]}, headers=ALICE
        )

        assert response.status_code == 400
        assert (await client.get("/api/projects/")).json() == []

    @pytest.mark.asyncio
    async def test_oversized_skill_reference_rejected(self, client):
        response = await client.post(
            "/api/projects/",
            json={"title": "Ghost", "main_skill": {"id": 99999999999999999999999}},
            headers=ALICE,
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "main_skill"

    @pytest.mark.asyncio
    async def test_remove_renders_ids(self, client, seed):
        (python,) = await seed(Skill(name="Python"))
        (project,) = await seed(Project(title="API", skills=[python], main_skill_id=python.id))

        response = await client.delete(f"/api/projects/{project.id}", headers=ALICE)

        body = response.json()
        assert body["deleted"] is True
        assert body["skills"] == [python.id]
        assert body["main_skill"] == python.id


class TestServiceEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        response = await client.get("/api/skills/", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, client):
        response = await client.get("/api/skills/x", headers={"X-Request-ID": "req-9"})
        assert response.json()["request_id"] == "req-9"
