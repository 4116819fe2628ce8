"""
API tests for /api/v1/teachers.
"""

BASE = "/api/v1/teachers"

PROFILE = {
    "bio": "Physics teacher who loves experiments.",
    "qualifications": "MPhys, QTS",
    "years_of_experience": 6,
    "hourly_rate": 4000,
}


class TestProfileRoutes:
    def test_teacher_creates_and_reads_profile(self, client, headers_for, other_teacher) -> None:
        created = client.put(f"{BASE}/me", json=PROFILE, headers=headers_for(other_teacher))

        assert created.status_code == 200
        assert created.json()["name"] == "Theo Tutor"
        assert created.json()["hourly_rate"] == 4000

        mine = client.get(f"{BASE}/me", headers=headers_for(other_teacher))
        assert mine.json()["id"] == created.json()["id"]

        public = client.get(f"{BASE}/{created.json()['id']}")
        assert public.status_code == 200
        assert public.json()["bio"] == PROFILE["bio"]

    def test_rate_out_of_range(self, client, headers_for, other_teacher) -> None:
        response = client.put(
            f"{BASE}/me", json={**PROFILE, "hourly_rate": 50}, headers=headers_for(other_teacher)
        )

        assert response.status_code == 400
        assert response.json()["detail"]["details"]["field"] == "hourly_rate"

    def test_parents_cannot_manage_profiles(self, client, headers_for, parent) -> None:
        assert client.put(f"{BASE}/me", json=PROFILE, headers=headers_for(parent)).status_code == 403

    def test_profile_missing(self, client, headers_for, other_teacher) -> None:
        assert client.get(f"{BASE}/me", headers=headers_for(other_teacher)).status_code == 404

    def test_toggle_accepting(self, client, headers_for, teacher, teacher_profile) -> None:
        response = client.patch(
            f"{BASE}/me/accepting",
            json={"is_available_for_new_students": False},
            headers=headers_for(teacher),
        )

        assert response.status_code == 200
        assert response.json()["is_available_for_new_students"] is False


class TestSubjectAndSearchRoutes:
    def test_subjects(self, client, headers_for, teacher, teacher_profile, subject) -> None:
        assert [s["name"] for s in client.get(f"{BASE}/subjects").json()] == ["Mathematics"]

        added = client.post(f"{BASE}/me/subjects/{subject.id}", headers=headers_for(teacher))
        assert [s["id"] for s in added.json()] == [subject.id]
        assert client.get(f"{BASE}/{teacher_profile.id}").json()["subjects"][0]["name"] == "Mathematics"

        removed = client.delete(f"{BASE}/me/subjects/{subject.id}", headers=headers_for(teacher))
        assert removed.json() == []

    def test_search(self, client, teacher_profile, subject, headers_for, teacher) -> None:
        client.post(f"{BASE}/me/subjects/{subject.id}", headers=headers_for(teacher))

        response = client.get(BASE, params={"q": "maths", "subject_id": subject.id})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["results"][0]["id"] == teacher_profile.id
        assert data["results"][0]["average_rating"] == 0.0
        assert data["results"][0]["review_count"] == 0

    def test_search_with_inverted_rate_range(self, client) -> None:
        response = client.get(BASE, params={"min_rate": 5000, "max_rate": 1000})

        assert response.status_code == 400


class TestAvailabilityRoutes:
    def test_slot_lifecycle(self, client, headers_for, teacher, teacher_profile) -> None:
        created = client.post(
            f"{BASE}/me/availability",
            json={"day_of_week": 2, "start_time": "9:00", "end_time": "11:00"},
            headers=headers_for(teacher),
        )
        assert created.status_code == 201
        slot_id = created.json()["id"]
        assert created.json()["start_time"] == "09:00"

        updated = client.put(
            f"{BASE}/me/availability/{slot_id}",
            json={"end_time": "12:00"},
            headers=headers_for(teacher),
        )
        assert updated.json()["end_time"] == "12:00"

        public = client.get(f"{BASE}/{teacher_profile.id}/availability")
        assert [s["id"] for s in public.json()] == [slot_id]

        deleted = client.delete(f"{BASE}/me/availability/{slot_id}", headers=headers_for(teacher))
        assert deleted.json()["success"] is True
        assert client.get(f"{BASE}/me/availability", headers=headers_for(teacher)).json() == []

    def test_bad_slot_times(self, client, headers_for, teacher, teacher_profile) -> None:
        response = client.post(
            f"{BASE}/me/availability",
            json={"day_of_week": 2, "start_time": "25:00", "end_time": "26:00"},
            headers=headers_for(teacher),
        )

        assert response.status_code == 400
