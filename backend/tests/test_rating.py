import pytest

from app import crud
from app.models import Booking, BookingStatus, Rating, User, UserRole
from app.services import ratings
from app.utils.errors import DuplicateRating, Forbidden, InvalidTransition, NotFound, ValidationError

REVIEW = "Great work, very tidy."


@pytest.fixture
def completed(db, crew, make_booking):
    customer, _, worker = crew

    def _make():
        return make_booking(customer, worker, status=BookingStatus.COMPLETED)

    return _make


def _worker(db, worker):
    db.expire_all()
    return db.get(User, worker.id)


def test_average_is_recomputed_from_all_ratings(db, crew, completed):
    customer, _, worker = crew
    for stars in (5, 4, 3):
        ratings.submit_rating(db, completed().id, customer.id, stars, REVIEW)
    assert _worker(db, worker).average_rating == 4.0

    booking = completed()
    ratings.submit_rating(db, booking.id, customer.id, 2, REVIEW, worker_id=worker.id)

    refreshed = _worker(db, worker)
    assert refreshed.average_rating == 3.5
    assert refreshed.total_ratings == 4
    rated = db.get(Booking, booking.id)
    assert rated.has_rated is True
    assert rated.rating_submitted_at is not None


def test_second_rating_for_same_booking_is_refused(db, crew, completed):
    customer, _, worker = crew
    booking = completed()
    ratings.submit_rating(db, booking.id, customer.id, 5, REVIEW)
    with pytest.raises(DuplicateRating):
        ratings.submit_rating(db, booking.id, customer.id, 1, REVIEW)
    refreshed = _worker(db, worker)
    assert refreshed.average_rating == 5.0
    assert refreshed.total_ratings == 1
    assert db.query(Rating).count() == 1


def test_unique_index_refuses_duplicate_that_skips_lookup(db, crew, completed, monkeypatch):
    customer, _, worker = crew
    booking = completed()
    ratings.submit_rating(db, booking.id, customer.id, 4, REVIEW)

    monkeypatch.setattr(crud.rating, "get_rating_by_booking", lambda db, booking_id: None)
    with pytest.raises(DuplicateRating):
        ratings.submit_rating(db, booking.id, customer.id, 1, REVIEW)
    refreshed = _worker(db, worker)
    assert refreshed.average_rating == 4.0
    assert refreshed.total_ratings == 1


@pytest.mark.parametrize(
    "status",
    [BookingStatus.PENDING, BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED],
)
def test_only_completed_bookings_can_be_rated(db, crew, make_booking, status):
    customer, _, worker = crew
    booking = make_booking(customer, worker, status=status)
    with pytest.raises(InvalidTransition):
        ratings.submit_rating(db, booking.id, customer.id, 5, REVIEW)
    assert db.query(Rating).count() == 0


def test_only_the_booking_customer_can_rate(db, crew, completed, make_user):
    _, _, worker = crew
    booking = completed()
    other = make_user(UserRole.CUSTOMER)
    with pytest.raises(Forbidden):
        ratings.submit_rating(db, booking.id, other.id, 5, REVIEW)
    with pytest.raises(NotFound):
        ratings.submit_rating(db, 4242, other.id, 5, REVIEW)


def test_worker_mismatch(db, crew, completed, make_user):
    customer, _, _ = crew
    booking = completed()
    someone = make_user(UserRole.INDEPENDENT_WORKER)
    with pytest.raises(ValidationError):
        ratings.submit_rating(db, booking.id, customer.id, 5, REVIEW, worker_id=someone.id)


@pytest.mark.parametrize("stars", [0, 6, True, 4.5])
def test_stars_out_of_range(db, crew, completed, stars):
    customer, _, _ = crew
    with pytest.raises(ValidationError):
        ratings.submit_rating(db, completed().id, customer.id, stars, REVIEW)


def test_review_length_is_checked_after_trimming(db, crew, completed):
    customer, _, _ = crew
    booking = completed()
    with pytest.raises(ValidationError):
        ratings.submit_rating(db, booking.id, customer.id, 5, "   short    ")
    with pytest.raises(ValidationError):
        ratings.submit_rating(db, booking.id, customer.id, 5, "x" * 1001)
    stored = ratings.submit_rating(db, booking.id, customer.id, 5, "  ten chars!  ")
    assert stored.review == "ten chars!"


def test_round_rating_half_up():
    assert ratings.round_rating(3.25) == 3.3
    assert ratings.round_rating(2.45) == 2.5
    assert ratings.round_rating(None) == 0.0


def test_recalculate_resets_workers_without_ratings(db, crew, completed, make_user):
    customer, _, worker = crew
    ratings.submit_rating(db, completed().id, customer.id, 3, REVIEW)
    idle = make_user(UserRole.INDEPENDENT_WORKER, average_rating=4.8, total_ratings=12)
    stale = _worker(db, worker)
    stale.average_rating = 1.0
    stale.total_ratings = 99
    db.commit()

    assert ratings.recalculate_all_ratings(db) == 2

    assert _worker(db, worker).average_rating == 3.0
    assert _worker(db, worker).total_ratings == 1
    reset = db.get(User, idle.id)
    assert reset.average_rating == 0.0
    assert reset.total_ratings == 0


def test_list_worker_ratings_summary(db, crew, completed):
    customer, _, worker = crew
    for stars in (5, 5, 2):
        ratings.submit_rating(db, completed().id, customer.id, stars, REVIEW)
    result = ratings.list_worker_ratings(db, worker.id, limit=2)
    assert len(result["ratings"]) == 2
    assert result["pagination"]["total"] == 3
    assert result["summary"]["totalRatings"] == 3
    assert result["summary"]["averageRating"] == 4.0
    assert result["summary"]["ratingCounts"] == {1: 0, 2: 1, 3: 0, 4: 0, 5: 2}

    with pytest.raises(NotFound):
        ratings.list_worker_ratings(db, customer.id)
