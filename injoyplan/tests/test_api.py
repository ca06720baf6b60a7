"""API integration tests."""
import pytest
from datetime import timedelta


def headers(user):
    return {"X-User-Id": user.id}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_public_search_anonymous(client, upcoming_event, today):
    """Expanded by default: one row per upcoming date, favorites false."""
    response = client.get("/api/events/public/search")
    assert response.status_code == 200
    data = response.json()

    assert data["total"] == 2
    assert data["page"] == 1
    assert data["totalPages"] == 1
    assert [row["dates"][0]["date"] for row in data["results"]] == [
        (today + timedelta(days=5)).isoformat(),
        (today + timedelta(days=12)).isoformat(),
    ]
    assert all(row["favorite"] is False for row in data["results"])
    assert "password" not in data["results"][0]["user"]


def test_public_search_spanish_params(client, upcoming_event, create_event, organizer, today):
    create_event(
        organizer, "Stand Up", category="Comedia",
        dates=[(today + timedelta(days=2), "23:30", 20)],
        location=("Cusco", "Cusco", "Wanchaq", "Bar Central"),
    )

    free = client.get("/api/events/public/search", params={"esGratis": "true"}).json()
    assert [row["title"] for row in free["results"]] == ["Jazz en el Parque"]
    assert [row["dates"][0]["price"] for row in free["results"]] == [0]

    late = client.get(
        "/api/events/public/search", params={"horaInicio": "22:00", "horaFin": "02:00"}
    ).json()
    assert [row["title"] for row in late["results"]] == ["Stand Up"]

    grouped = client.get(
        "/api/events/public/search",
        params={"departamento": "lima", "distrito": "miraflores", "expandDates": "false"},
    ).json()
    assert grouped["total"] == 1
    assert len(grouped["results"][0]["dates"]) == 2

    text = client.get("/api/events/public/search", params={"busqueda": "bar central"}).json()
    assert [row["title"] for row in text["results"]] == ["Stand Up"]


def test_public_search_overlays_caller_favorite(client, person, upcoming_event):
    created = client.post(
        "/api/favorites", json={"event_id": upcoming_event.id}, headers=headers(person)
    )
    assert created.status_code == 201
    favorite_id = created.json()["id"]

    mine = client.get("/api/events/public/search", headers=headers(person)).json()
    assert all(row["favorite"] == favorite_id for row in mine["results"])

    anonymous = client.get("/api/events/public/search").json()
    assert all(row["favorite"] is False for row in anonymous["results"])


def test_public_search_page_past_end(client, upcoming_event):
    data = client.get("/api/events/public/search", params={"page": 5, "limit": 1}).json()
    assert data["results"] == []
    assert data["total"] == 2
    assert data["totalPages"] == 2


@pytest.mark.parametrize("params,parameter", [
    ({"page": "0"}, "page"),
    ({"page": "uno"}, "page"),
    ({"limit": "-5"}, "limit"),
])
def test_invalid_pagination_rejected(client, params, parameter):
    response = client.get("/api/events/public/search", params=params)
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "INVALID_PAGINATION"
    assert body["parameter"] == parameter


def test_invalid_time_rejected(client):
    response = client.get("/api/events/public/search", params={"horaInicio": "25:00"})
    assert response.status_code == 422


def test_event_not_found(client):
    response = client.get("/api/events/does-not-exist")
    assert response.status_code == 404
    assert response.json()["code"] == "EVENT_NOT_FOUND"

    assert client.get("/api/events/related/does-not-exist").status_code == 404


def test_create_update_delete_event(client, organizer, person):
    payload = {
        "title": "Noche de Salsa",
        "description": "Orquesta en vivo",
        "category": "Música",
        "department": "Lima",
        "province": "Lima",
        "district": "Barranco",
        "dates": [{"date": "2030-03-01", "start_time": "22:00", "price": 35}],
    }

    assert client.post("/api/events", json=payload).status_code == 401
    assert client.post("/api/events", json=payload, headers=headers(person)).status_code == 403

    created = client.post("/api/events", json=payload, headers=headers(organizer))
    assert created.status_code == 201
    event_id = created.json()["id"]

    updated = client.patch(f"/api/events/{event_id}", json={"title": "Salsa Brava"}, headers=headers(organizer))
    assert updated.json()["title"] == "Salsa Brava"

    forbidden = client.patch(f"/api/events/{event_id}", json={"title": "X"}, headers=headers(person))
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "NOT_OWNER"

    toggled = client.patch(f"/api/events/{event_id}/toggle-status", headers=headers(organizer))
    assert toggled.json() == {"id": event_id, "is_active": False}

    mine = client.get("/api/events/my", headers=headers(organizer)).json()
    assert [e["id"] for e in mine] == [event_id]

    assert client.delete(f"/api/events/{event_id}", headers=headers(organizer)).status_code == 200
    assert client.get(f"/api/events/{event_id}").status_code == 404


def test_event_dates_and_detail(client, person, upcoming_event, today):
    dates = client.get(f"/api/events/{upcoming_event.id}/dates").json()
    assert len(dates) == 3

    future_date = dates[2]["id"]
    client.post(
        "/api/favorites",
        json={"event_id": upcoming_event.id, "event_date_id": future_date},
        headers=headers(person),
    )

    detail = client.get(
        f"/api/events/detail/{upcoming_event.id}/{future_date}", headers=headers(person)
    ).json()
    assert detail["favorite"] is not False
    assert all(d["date"] >= today.isoformat() for d in detail["dates"])


def test_favorite_conflict_and_listing(client, person, upcoming_event):
    body = {"event_id": upcoming_event.id}
    assert client.post("/api/favorites", json=body, headers=headers(person)).status_code == 201

    duplicate = client.post("/api/favorites", json=body, headers=headers(person))
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "FAVORITE_EXISTS"

    listing = client.get("/api/favorites", headers=headers(person)).json()
    assert listing["total"] == 1
    assert listing["totalPages"] == 1

    removed = client.delete(f"/api/favorites/event/{upcoming_event.id}", headers=headers(person))
    assert removed.status_code == 200
    assert client.get("/api/favorites", headers=headers(person)).json()["total"] == 0


def test_comments_flow(client, person, organizer, upcoming_event):
    url = f"/api/events/{upcoming_event.id}/comments"

    empty = client.post(url, json={"content": ""}, headers=headers(person))
    assert empty.status_code == 400
    assert empty.json()["parameter"] == "content"

    comment = client.post(url, json={"content": "¿Hay estacionamiento?"}, headers=headers(person)).json()
    client.post(url, json={"content": "Sí", "parent_id": comment["id"]}, headers=headers(organizer))

    liked = client.post(f"/api/comments/{comment['id']}/like", headers=headers(organizer))
    assert liked.json() == {"is_liked": True}

    page = client.get(url, headers=headers(organizer)).json()
    assert page["total"] == 1
    assert page["results"][0]["reply_count"] == 1
    assert page["results"][0]["is_liked"] is True

    assert client.delete(f"/api/comments/{comment['id']}", headers=headers(organizer)).status_code == 403


def test_follow_endpoints(client, person, organizer):
    followed = client.post(f"/api/users/{organizer.id}/follow", headers=headers(person))
    assert followed.json() == {"following": True}

    again = client.post(f"/api/users/{organizer.id}/follow", headers=headers(person))
    assert again.status_code == 409

    followers = client.get(f"/api/users/{organizer.id}/followers").json()
    assert [u["id"] for u in followers["results"]] == [person.id]
    assert followers["totalPages"] == 1

    bad_page = client.get(f"/api/users/{organizer.id}/following", params={"page": "cero"})
    assert bad_page.status_code == 400
    assert bad_page.json()["parameter"] == "page"

    self_follow = client.post(f"/api/users/{person.id}/follow", headers=headers(person))
    assert self_follow.status_code == 400

    assert client.delete(f"/api/users/{organizer.id}/follow", headers=headers(person)).json() == {"following": False}


def test_feed_requires_user(client):
    assert client.get("/api/events/feed").status_code == 401
    assert client.get("/api/events/feed", headers={"X-User-Id": "ghost"}).status_code == 401


def test_complaint_endpoint(client, sample_complaint_data):
    response = client.post("/api/complaints", json=sample_complaint_data)
    assert response.status_code == 201
    assert response.json()["message"] == "Reclamación registrada y correo enviado"

    invalid = client.post("/api/complaints", json={**sample_complaint_data, "claim_amount": -1})
    assert invalid.status_code == 422


def test_admin_endpoints_require_admin(client, person, admin_user):
    assert client.get("/api/admin/stats", headers=headers(person)).status_code == 403

    stats = client.get("/api/admin/stats", headers=headers(admin_user)).json()
    assert stats["total_users"] == 2

    users = client.get("/api/admin/users", headers=headers(admin_user)).json()
    assert users["total"] == 2
    assert "totalPages" in users

    promoted = client.patch(
        f"/api/admin/users/{person.id}/role", json={"role": "ADMIN"}, headers=headers(admin_user)
    )
    assert promoted.json()["role"] == "ADMIN"


def test_admin_import_csv(client, admin_user):
    content = "Titulo,Fecha,Categoria,Descripcion\nFeria del Libro,20/07/2030,Cultura,Stands\n"
    response = client.post(
        "/api/admin/events/import",
        files={"file": ("eventos.csv", content.encode(), "text/csv")},
        headers=headers(admin_user),
    )
    assert response.status_code == 200
    assert response.json()["count"] == 1

    events = client.get("/api/events", params={"search": "libro"}).json()
    assert [e["title"] for e in events["results"]] == ["Feria del Libro"]


def test_stats_by_category_without_categories(client):
    assert client.get("/api/events/stats/by-category").json() == []


def test_user_pages_and_profile_edit(client, person, organizer, upcoming_event):
    client.post(f"/api/users/{organizer.id}/follow", headers=headers(person))

    page = client.get(f"/api/users/{organizer.id}", headers=headers(person)).json()
    assert page["counts"] == {"followers": 1, "following": 0, "events": 1}
    assert page["is_following"] is True
    assert "password" not in page
    assert "phone" not in page["profile"]

    assert client.get("/api/users/me").status_code == 401
    assert client.get("/api/users/missing").status_code == 404

    edited = client.patch(
        "/api/users/me/profile", json={"bio": "Melómana", "phone": "987654321"}, headers=headers(person)
    )
    assert edited.status_code == 200
    assert edited.json()["bio"] == "Melómana"

    too_long = client.patch("/api/users/me/profile", json={"gender": "x" * 11}, headers=headers(person))
    assert too_long.status_code == 422

    me = client.get("/api/users/me", headers=headers(person)).json()
    assert me["profile"]["phone"] == "987654321"
    assert me["role"] == "USER"
    assert me["counts"]["following"] == 1


def test_organizer_page_hides_past_events(client, organizer, create_event, today):
    create_event(organizer, "Ya Paso", dates=[(today - timedelta(days=3), "20:00", 0)])
    create_event(organizer, "Viene", dates=[(today + timedelta(days=3), "20:00", 0)])

    data = client.get(f"/api/events/user/{organizer.id}").json()
    assert [e["title"] for e in data["results"]] == ["Viene"]
    assert data["total"] == 1


def test_event_detail_carries_counts(client, person, upcoming_event):
    client.post("/api/favorites", json={"event_id": upcoming_event.id}, headers=headers(person))
    client.post(
        f"/api/events/{upcoming_event.id}/comments", json={"content": "¡Genial!"}, headers=headers(person)
    )

    event = client.get(f"/api/events/{upcoming_event.id}").json()
    assert event["favorites_count"] == 1
    assert event["comments_count"] == 1
