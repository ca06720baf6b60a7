"""Tests for organizer CRUD, listings, favorites, comments and follows."""
import pytest
from datetime import date, timedelta
from injoyplan.core.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from injoyplan.db.models import Category, EventDate, Favorite
from injoyplan.schemas.event import EventCreate, EventDateCreate, EventUpdate
from injoyplan.schemas.user import ProfileUpdate
from injoyplan.services.comments import CommentService
from injoyplan.services.events import EventService
from injoyplan.services.favorites import FavoriteService
from injoyplan.services.social import SocialService
from injoyplan.services.users import UserService


def test_create_event_requires_company(db_session, person, organizer):
    service = EventService()
    payload = EventCreate(
        title="Festival de Cine",
        description="Muestra anual",
        category="Cine",
        department="Lima",
        province="Lima",
        district="San Isidro",
        location_name="Centro Cultural",
        dates=[EventDateCreate(date=date(2030, 5, 1), start_time="19:00", price=25)],
    )

    with pytest.raises(ForbiddenError):
        service.create_event(db_session, person, payload)

    event = service.create_event(db_session, organizer, payload)
    assert event.location.district == "San Isidro"
    assert len(event.dates) == 1
    assert event.is_active is True


def test_create_event_without_full_location(db_session, organizer):
    payload = EventCreate(title="Charla", description="Online", category="Educación", department="Lima")
    event = EventService().create_event(db_session, organizer, payload)
    assert event.location is None


def test_update_event_owner_only(db_session, organizer, person, upcoming_event):
    service = EventService()

    with pytest.raises(ForbiddenError):
        service.update_event(db_session, person, upcoming_event.id, EventUpdate(title="Otro"))

    updated = service.update_event(
        db_session, organizer, upcoming_event.id,
        EventUpdate(
            title="Jazz al Aire Libre",
            district="Barranco",
            dates=[EventDateCreate(date=date(2030, 1, 1), start_time="18:00")],
        ),
    )
    assert updated.title == "Jazz al Aire Libre"
    assert updated.location.district == "Barranco"
    assert [d.date for d in updated.dates] == [date(2030, 1, 1)]
    assert db_session.query(EventDate).filter_by(event_id=upcoming_event.id).count() == 1


def test_toggle_and_remove(db_session, organizer, upcoming_event):
    service = EventService()

    assert service.toggle_status(db_session, organizer, upcoming_event.id).is_active is False
    assert service.toggle_status(db_session, organizer, upcoming_event.id).is_active is True

    service.remove_event(db_session, organizer, upcoming_event.id)
    with pytest.raises(NotFoundError):
        service.get_event(db_session, upcoming_event.id)


def test_featured_lists_upcoming_featured_only(db_session, organizer, create_event, today):
    create_event(organizer, "Destacado Pasado", is_featured=True, dates=[(today - timedelta(days=3), "10:00", 0)])
    create_event(organizer, "Destacado", is_featured=True, dates=[(today + timedelta(days=3), "10:00", 0)])
    create_event(organizer, "Normal", dates=[(today + timedelta(days=1), "10:00", 0)])

    page = EventService().featured(db_session, today=today)

    assert [r.title for r in page.results] == ["Destacado"]
    assert page.total == 1


def test_by_category_is_grouped_and_upcoming(db_session, upcoming_event, today):
    page = EventService().by_category(db_session, "música", today=today)

    assert page.total == 1
    assert [d.date for d in page.results[0].dates] == [
        today + timedelta(days=5), today + timedelta(days=12)
    ]


def test_list_events_status_filter(db_session, organizer, create_event, today):
    soon = [(today + timedelta(days=2), "19:00", 10)]
    create_event(organizer, "Activo", dates=soon)
    create_event(organizer, "Inactivo", dates=soon, is_active=False)
    service = EventService()

    assert [r.title for r in service.list_events(db_session).results] == ["Activo"]
    assert [r.title for r in service.list_events(db_session, status="inactive").results] == ["Inactivo"]
    assert service.list_events(db_session, status="all").total == 2


def test_listings_skip_events_without_upcoming_dates(db_session, organizer, person, create_event, today):
    create_event(organizer, "Solo Pasado", dates=[(today - timedelta(days=3), "20:00", 0)])
    create_event(organizer, "Sin Fechas")
    create_event(organizer, "Proximo", dates=[(today + timedelta(days=3), "20:00", 0)])
    service = EventService()

    mine = service.by_user(db_session, organizer.id, today=today)
    assert [r.title for r in mine.results] == ["Proximo"]
    assert mine.total == 1
    assert mine.total_pages == 1

    assert [r.title for r in service.list_events(db_session, status="all", today=today).results] == ["Proximo"]
    assert [r.title for r in service.feed(db_session, person, today=today).results] == ["Proximo"]
    assert [e.title for e in service.related_by_category(db_session, "Música", today=today)] == ["Proximo"]


def test_by_user_overlays_viewer_favorites(db_session, organizer, person, upcoming_event):
    FavoriteService().add_favorite(db_session, person.id, upcoming_event.id)
    service = EventService()

    as_viewer = service.by_user(db_session, organizer.id, viewer_id=person.id)
    assert as_viewer.results[0].favorite is not False

    as_owner = service.by_user(db_session, organizer.id, viewer_id=organizer.id)
    assert as_owner.results[0].favorite is False


def test_feed_follows_and_discovery(db_session, organizer, person, create_user, create_event, today):
    other = create_user("otra@example.com", user_type=organizer.user_type)
    soon = [(today + timedelta(days=1), "18:00", 0)]
    create_event(organizer, "Seguido", dates=soon)
    create_event(other, "No Seguido", dates=soon)
    service = EventService()

    # Nothing followed yet: discovery mode shows everything
    assert service.feed(db_session, person).total == 2

    SocialService().follow(db_session, person.id, organizer.id)
    assert [r.title for r in service.feed(db_session, person).results] == ["Seguido"]


def test_related_by_event(db_session, organizer, create_event, upcoming_event, today):
    soon = [(today + timedelta(days=4), "20:00", 15)]
    create_event(organizer, "Otro Concierto", dates=soon)
    create_event(organizer, "Concierto Pasado", dates=[(today - timedelta(days=4), "20:00", 15)])
    create_event(organizer, "Obra", category="Teatro", dates=soon)

    related = EventService().related_by_event(db_session, upcoming_event.id)
    assert [e.title for e in related] == ["Otro Concierto"]

    with pytest.raises(NotFoundError):
        EventService().related_by_event(db_session, "missing")


def test_stats_by_category(db_session, organizer, create_event):
    db_session.add_all([
        Category(name="Música", icon="music", order=1),
        Category(name="Teatro", icon="mask", order=2),
        Category(name="Oculta", order=3, is_active=False),
    ])
    db_session.commit()
    create_event(organizer, "Uno")
    create_event(organizer, "Dos")
    create_event(organizer, "Tres", is_active=False)

    stats = EventService().stats_by_category(db_session)
    assert [(s.name, s.count) for s in stats] == [("Música", 2), ("Teatro", 0)]


def test_detail_by_date_prefers_date_favorite(db_session, person, upcoming_event, today):
    favorites = FavoriteService()
    upcoming = [d for d in upcoming_event.dates if d.date >= today]
    event_fav = favorites.add_favorite(db_session, person.id, upcoming_event.id)
    date_fav = favorites.add_favorite(db_session, person.id, upcoming_event.id, upcoming[1].id)
    service = EventService()

    detail = service.detail_by_date(db_session, upcoming_event.id, upcoming[1].id, viewer_id=person.id, today=today)
    assert detail.favorite == date_fav.id
    assert [d.id for d in detail.dates] == [d.id for d in upcoming]

    detail = service.detail_by_date(db_session, upcoming_event.id, upcoming[0].id, viewer_id=person.id, today=today)
    assert detail.favorite == event_fav.id

    anonymous = service.detail_by_date(db_session, upcoming_event.id, upcoming[0].id, today=today)
    assert anonymous.favorite is False


def test_favorite_conflicts_and_removal(db_session, person, create_user, upcoming_event):
    service = FavoriteService()
    date_id = upcoming_event.dates[1].id

    whole = service.add_favorite(db_session, person.id, upcoming_event.id)
    service.add_favorite(db_session, person.id, upcoming_event.id, date_id)

    with pytest.raises(ConflictError):
        service.add_favorite(db_session, person.id, upcoming_event.id)
    with pytest.raises(ConflictError):
        service.add_favorite(db_session, person.id, upcoming_event.id, date_id)
    with pytest.raises(NotFoundError):
        service.add_favorite(db_session, person.id, "missing")
    with pytest.raises(NotFoundError):
        service.add_favorite(db_session, person.id, upcoming_event.id, "missing-date")

    stranger = create_user("extrano@example.com")
    with pytest.raises(NotFoundError):
        service.remove_favorite(db_session, stranger.id, whole.id)

    service.remove_favorite(db_session, person.id, whole.id)
    assert service.remove_by_event(db_session, person.id, upcoming_event.id) == 1
    with pytest.raises(NotFoundError):
        service.remove_by_event(db_session, person.id, upcoming_event.id)


def test_list_favorites_date_display(db_session, person, upcoming_event, today):
    service = FavoriteService()
    date_id = upcoming_event.dates[2].id
    service.add_favorite(db_session, person.id, upcoming_event.id)
    service.add_favorite(db_session, person.id, upcoming_event.id, date_id)

    page = service.list_favorites(db_session, person.id, today=today)

    assert page.total == 2
    by_scope = {f.event_date_id: f for f in page.results}
    assert [d.id for d in by_scope[date_id].event.dates] == [date_id]
    assert all(d.date >= today for d in by_scope[None].event.dates)
    assert len(by_scope[None].event.dates) == 2


def test_deleting_date_removes_its_favorites(db_session, person, organizer, upcoming_event):
    date_id = upcoming_event.dates[1].id
    FavoriteService().add_favorite(db_session, person.id, upcoming_event.id, date_id)

    EventService().update_event(
        db_session, organizer, upcoming_event.id,
        EventUpdate(dates=[EventDateCreate(date=date(2031, 1, 1))]),
    )

    assert db_session.query(Favorite).filter_by(event_date_id=date_id).count() == 0


def test_comments_replies_and_likes(db_session, person, organizer, upcoming_event):
    service = CommentService()

    with pytest.raises(InvalidInputError):
        service.add_comment(db_session, person.id, upcoming_event.id, "   ")

    root = service.add_comment(db_session, person.id, upcoming_event.id, "¡Excelente!")
    service.add_comment(db_session, organizer.id, upcoming_event.id, "Gracias", parent_id=root.id)

    assert service.toggle_like(db_session, organizer.id, root.id) is True

    page = service.list_comments(db_session, upcoming_event.id, viewer_id=organizer.id)
    assert page.total == 1
    comment = page.results[0]
    assert comment.reply_count == 1
    assert comment.like_count == 1
    assert comment.is_liked is True
    assert comment.replies[0].content == "Gracias"

    assert service.toggle_like(db_session, organizer.id, root.id) is False

    with pytest.raises(ForbiddenError):
        service.edit_comment(db_session, organizer.id, root.id, "editado")
    assert service.edit_comment(db_session, person.id, root.id, "editado").content == "editado"

    service.delete_comment(db_session, person.id, root.id)
    assert service.list_comments(db_session, upcoming_event.id).total == 0


def test_reply_must_belong_to_same_event(db_session, person, organizer, create_event, upcoming_event):
    other = create_event(organizer, "Otro")
    service = CommentService()
    root = service.add_comment(db_session, person.id, upcoming_event.id, "Hola")

    with pytest.raises(NotFoundError):
        service.add_comment(db_session, person.id, other.id, "Respuesta", parent_id=root.id)


def test_follow_rules(db_session, person, organizer):
    service = SocialService()

    with pytest.raises(InvalidInputError):
        service.follow(db_session, person.id, person.id)

    service.follow(db_session, person.id, organizer.id)
    with pytest.raises(ConflictError):
        service.follow(db_session, person.id, organizer.id)

    followers = service.followers(db_session, organizer.id)
    assert [u.id for u in followers.results] == [person.id]
    assert followers.total_pages == 1
    assert [u.id for u in service.following(db_session, person.id).results] == [organizer.id]

    service.unfollow(db_session, person.id, organizer.id)
    with pytest.raises(NotFoundError):
        service.unfollow(db_session, person.id, organizer.id)


def test_followers_are_paged(db_session, organizer, create_user):
    service = SocialService()
    for n in range(3):
        fan = create_user(f"fan{n}@example.com")
        service.follow(db_session, fan.id, organizer.id)

    first = service.followers(db_session, organizer.id, page=1, limit=2)
    second = service.followers(db_session, organizer.id, page=2, limit=2)

    assert first.total == 3
    assert first.total_pages == 2
    assert len(first.results) == 2
    assert len(second.results) == 1
    assert {u.id for u in first.results + second.results} == {
        u.id for u in service.followers(db_session, organizer.id).results
    }

    with pytest.raises(InvalidInputError):
        service.following(db_session, organizer.id, page="0")
    with pytest.raises(NotFoundError):
        service.followers(db_session, "missing")


def test_user_profile_counts_and_follow_state(db_session, organizer, person, upcoming_event):
    SocialService().follow(db_session, person.id, organizer.id)
    service = UserService()

    seen_by_fan = service.get_profile(db_session, organizer.id, viewer_id=person.id)
    assert seen_by_fan.counts.followers == 1
    assert seen_by_fan.counts.following == 0
    assert seen_by_fan.counts.events == 1
    assert seen_by_fan.is_following is True

    assert service.get_profile(db_session, organizer.id).is_following is False
    assert service.get_profile(db_session, person.id, viewer_id=organizer.id).counts.following == 1

    with pytest.raises(NotFoundError):
        service.get_profile(db_session, "missing")


def test_update_profile_changes_sent_fields_only(db_session, person):
    service = UserService()

    profile = service.update_profile(
        db_session, person, ProfileUpdate(last_name="Torres", city="Arequipa", birth_date=date(1995, 4, 2))
    )

    assert profile.first_name == "ana"
    assert profile.last_name == "Torres"
    assert profile.city == "Arequipa"

    own = service.get_own_profile(db_session, person)
    assert own.profile.birth_date == date(1995, 4, 2)
    assert own.counts.events == 0

    with pytest.raises(ValueError):
        ProfileUpdate(first_name="x" * 51)


def test_event_counts(db_session, person, organizer, upcoming_event):
    FavoriteService().add_favorite(db_session, person.id, upcoming_event.id)
    comments = CommentService()
    root = comments.add_comment(db_session, person.id, upcoming_event.id, "¿A qué hora abren?")
    comments.add_comment(db_session, organizer.id, upcoming_event.id, "A las 19:00", parent_id=root.id)

    event = EventService().get_event(db_session, upcoming_event.id)
    assert event.favorites_count == 1
    assert event.comments_count == 2
