from decimal import Decimal

from app import crud
from app.models import Booking, BookingStatus, User, UserRole, WalletTransaction

BOOKINGS = "/api/v1/bookings"


def _payload(worker, **kw):
    data = {
        "worker_id": worker.id,
        "work_type": "Electrical",
        "location": "Nagpur",
        "start_date": "2030-05-01T10:00:00",
    }
    data.update(kw)
    return data


def test_customer_books_and_pays_from_wallet(client, db, crew, auth_headers):
    customer, contractor, worker = crew
    resp = client.post(
        BOOKINGS,
        json=_payload(worker, use_wallet=True, budget="400"),
        headers=auth_headers(customer),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "pending"
    assert body["contractor_id"] == contractor.id
    assert body["wallet_transaction_id"] is not None

    db.expire_all()
    assert Decimal(str(db.get(User, customer.id).wallet_balance)) == Decimal("600")

    mine = client.get(f"{BOOKINGS}/mine", headers=auth_headers(customer)).json()
    assert mine["pagination"]["total"] == 1


def test_insufficient_wallet_leaves_nothing_behind(client, db, crew, auth_headers):
    customer, _, worker = crew
    resp = client.post(
        BOOKINGS,
        json=_payload(worker, use_wallet=True, budget="5000"),
        headers=auth_headers(customer),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == "Insufficient wallet balance"
    db.expire_all()
    assert db.query(Booking).count() == 0
    assert db.query(WalletTransaction).count() == 0


def test_only_customers_create_bookings(client, crew, auth_headers):
    _, _, worker = crew
    resp = client.post(BOOKINGS, json=_payload(worker), headers=auth_headers(worker))
    assert resp.status_code == 403
    assert resp.json()["detail"]["field_errors"] == {"role": "worker"}


def test_end_before_start_is_rejected(client, crew, auth_headers):
    customer, _, worker = crew
    resp = client.post(
        BOOKINGS,
        json=_payload(worker, end_date="2030-04-30T10:00:00"),
        headers=auth_headers(customer),
    )
    assert resp.status_code == 422


def test_lifecycle_over_http(client, crew, make_booking, auth_headers):
    customer, contractor, worker = crew
    booking = make_booking(customer, worker)
    url = f"{BOOKINGS}/{booking.id}"

    skip = client.put(f"{url}/status", json={"status": "completed"}, headers=auth_headers(worker))
    assert skip.status_code == 409
    assert skip.json()["detail"]["field_errors"] == {"status": "completed"}

    resp = client.put(f"{url}/accept", json={"notes": "tomorrow 9am"}, headers=auth_headers(contractor))
    assert resp.status_code == 200
    assert resp.json()["status"] == "accepted"

    for target in ("confirmed", "in_progress"):
        resp = client.put(f"{url}/status", json={"status": target}, headers=auth_headers(worker))
        assert resp.status_code == 200
        assert resp.json()["status"] == target

    done = client.put(
        f"{url}/status", json={"status": "completed", "final_price": "1200"}, headers=auth_headers(worker)
    )
    assert done.status_code == 200
    assert done.json()["status"] == "completed"
    assert Decimal(str(done.json()["final_price"])) == Decimal("1200")
    assert done.json()["commission_amount"] is not None

    cancel = client.put(f"{url}/cancel", headers=auth_headers(customer))
    assert cancel.status_code == 409


def test_reject_without_body(client, crew, make_booking, auth_headers):
    customer, _, worker = crew
    booking = make_booking(customer, worker)
    resp = client.put(f"{BOOKINGS}/{booking.id}/reject", headers=auth_headers(worker))
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"
    assert resp.json()["rejected_reason"] == "No reason provided"


def test_outsiders_cannot_view_or_handle(client, crew, make_booking, make_user, auth_headers):
    customer, _, worker = crew
    booking = make_booking(customer, worker)
    outsider = make_user(UserRole.INDEPENDENT_WORKER)
    assert client.get(f"{BOOKINGS}/{booking.id}", headers=auth_headers(outsider)).status_code == 403
    resp = client.put(f"{BOOKINGS}/{booking.id}/accept", headers=auth_headers(outsider))
    assert resp.status_code == 403
    assert client.get(f"{BOOKINGS}/999", headers=auth_headers(customer)).status_code == 404


def test_delete_booking(client, db, crew, make_booking, auth_headers):
    customer, contractor, worker = crew
    booking = make_booking(customer, worker, status=BookingStatus.CANCELLED)
    assert client.delete(f"{BOOKINGS}/{booking.id}", headers=auth_headers(customer)).status_code == 403
    assert client.delete(f"{BOOKINGS}/{booking.id}", headers=auth_headers(contractor)).status_code == 204
    db.expire_all()
    assert crud.booking.get_booking(db, booking.id) is None


def test_rated_booking_delete_is_refused(client, crew, make_booking, make_user, auth_headers):
    customer, contractor, worker = crew
    admin = make_user(UserRole.ADMIN)
    booking = make_booking(customer, worker, status=BookingStatus.COMPLETED)
    body = {"booking_id": booking.id, "rating": 5, "review": "Excellent wiring job."}
    assert client.post("/api/v1/ratings", json=body, headers=auth_headers(customer)).status_code == 201
    cancel = client.put(f"/api/v1/admin/bookings/{booking.id}/cancel", headers=auth_headers(admin))
    assert cancel.status_code == 200

    resp = client.delete(f"{BOOKINGS}/{booking.id}", headers=auth_headers(contractor))
    assert resp.status_code == 409
    assert resp.json()["detail"]["message"] == "Cannot delete a booking that has been rated"


def test_rating_endpoints(client, crew, make_booking, auth_headers):
    customer, _, worker = crew
    booking = make_booking(customer, worker, status=BookingStatus.COMPLETED)
    body = {"booking_id": booking.id, "rating": 4, "review": "Neat and quick work."}

    first = client.post("/api/v1/ratings", json=body, headers=auth_headers(customer))
    assert first.status_code == 201
    assert first.json()["worker_id"] == worker.id

    again = client.post("/api/v1/ratings", json=body, headers=auth_headers(customer))
    assert again.status_code == 409
    assert again.json()["detail"]["message"] == "This booking has already been rated"

    bad = client.post("/api/v1/ratings", json={**body, "rating": 6}, headers=auth_headers(customer))
    assert bad.status_code == 422

    public = client.get(f"/api/v1/workers/{worker.id}/ratings").json()
    assert public["summary"]["totalRatings"] == 1
    assert public["summary"]["averageRating"] == 4.0
    assert len(public["ratings"]) == 1


def test_rating_must_name_the_booked_worker(client, crew, make_booking, make_user, auth_headers):
    customer, _, worker = crew
    other = make_user(UserRole.INDEPENDENT_WORKER)
    booking = make_booking(customer, worker, status=BookingStatus.COMPLETED)
    body = {"booking_id": booking.id, "rating": 3, "review": "Okay but arrived late.", "worker_id": other.id}

    wrong = client.post("/api/v1/ratings", json=body, headers=auth_headers(customer))
    assert wrong.status_code == 422
    assert wrong.json()["detail"]["field_errors"] == {"worker_id": str(other.id)}

    right = client.post("/api/v1/ratings", json={**body, "worker_id": worker.id}, headers=auth_headers(customer))
    assert right.status_code == 201
    assert right.json()["worker_id"] == worker.id


def test_role_dashboards(client, crew, make_booking, make_user, auth_headers):
    customer, contractor, worker = crew
    admin = make_user(UserRole.ADMIN)
    make_booking(customer, worker, status=BookingStatus.COMPLETED, budget=Decimal("100"))

    worker_stats = client.get("/api/v1/workers/dashboard-stats", headers=auth_headers(worker))
    assert worker_stats.status_code == 200
    assert worker_stats.json()["stats"]["completedJobs"] == 1

    contractor_stats = client.get("/api/v1/contractors/dashboard-stats", headers=auth_headers(contractor))
    assert contractor_stats.json()["stats"]["totalWorkers"] == 1

    customer_stats = client.get("/api/v1/customers/dashboard-stats", headers=auth_headers(customer))
    assert Decimal(str(customer_stats.json()["stats"]["totalSpent"])) == Decimal("100")

    refused = client.get("/api/v1/admin/dashboard-stats", headers=auth_headers(customer))
    assert refused.status_code == 403

    admin_stats = client.get(
        "/api/v1/admin/dashboard-stats", params={"timeRange": "30d"}, headers=auth_headers(admin)
    )
    assert admin_stats.status_code == 200
    assert admin_stats.json()["timeRange"] == "30d"
    assert admin_stats.json()["users"]["admins"] == 1


def test_admin_cancel_and_contractor_assignment(client, db, crew, make_booking, make_user, auth_headers):
    customer, contractor, worker = crew
    admin = make_user(UserRole.ADMIN)
    done = make_booking(customer, worker, status=BookingStatus.COMPLETED)
    resp = client.put(
        f"/api/v1/admin/bookings/{done.id}/cancel",
        json={"reason": "dispute"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    assert resp.json()["cancellation_reason"] == "dispute"

    orphan = make_user(UserRole.WORKER)
    resp = client.put(
        f"/api/v1/admin/workers/{orphan.id}/contractor",
        json={"contractor_id": contractor.id},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["contractor_id"] == contractor.id

    recalc = client.post("/api/v1/admin/ratings/recalculate", headers=auth_headers(admin))
    assert recalc.json() == {"updated": 2}
