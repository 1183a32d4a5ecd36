from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.core.config import settings
from app.models import BookingStatus, UserRole
from app.services import bookings, dashboard, ledger, ratings


@pytest.fixture(autouse=True)
def ten_percent_commission(monkeypatch):
    monkeypatch.setattr(settings, "COMMISSION_RATE", 10.0)


def test_unknown_time_range_falls_back_to_week():
    assert dashboard.resolve_time_range("1y") == "7d"
    assert dashboard.resolve_time_range(None) == "7d"
    assert dashboard.resolve_time_range("90d") == "90d"
    now = datetime(2030, 3, 15, 12, 0)
    assert dashboard.window_start("24h", now) == datetime(2030, 3, 14, 12, 0)


def test_month_bounds_cross_year():
    last, this = dashboard.month_bounds(datetime(2030, 1, 20, 8, 30))
    assert this == datetime(2030, 1, 1)
    assert last == datetime(2029, 12, 1)


def test_admin_stats_window_counts(db, crew, make_booking):
    customer, _, worker = crew
    make_booking(customer, worker)
    make_booking(customer, worker, status=BookingStatus.ACCEPTED)
    make_booking(
        customer,
        worker,
        status=BookingStatus.COMPLETED,
        created_at=datetime.utcnow() - timedelta(days=20),
    )
    ledger.recharge(db, customer.id, 300)

    stats = dashboard.admin_dashboard_stats(db, "bogus", now=datetime.utcnow())

    assert stats["timeRange"] == "7d"
    assert stats["users"]["customers"] == 1
    assert stats["users"]["contractors"] == 1
    assert stats["users"]["workers"] == 1
    assert stats["users"]["total"] == 3
    assert stats["bookings"]["total"] == 2
    assert stats["bookings"]["pending"] == 1
    assert stats["bookings"]["completed"] == 0
    assert stats["transactions"]["total"] == 1
    assert stats["transactions"]["recharge"] == Decimal("300.00")

    wider = dashboard.admin_dashboard_stats(db, "30d", now=datetime.utcnow())
    assert wider["bookings"]["total"] == 3
    assert wider["bookings"]["completed"] == 1


def test_revenue_sums_commission_snapshots(db, crew, make_booking):
    customer, _, worker = crew
    now = datetime.utcnow()
    last_month, this_month = dashboard.month_bounds(now)

    def completed(price, when):
        return make_booking(
            customer,
            worker,
            status=BookingStatus.COMPLETED,
            budget=Decimal("1"),
            final_price=Decimal(price),
            commission_amount=bookings.commission_for(price),
            completed_at=when,
        )

    completed("1000", now)
    completed("500", last_month + timedelta(days=1))
    completed("200", last_month - timedelta(days=10))
    make_booking(customer, worker, status=BookingStatus.PENDING, budget=Decimal("999"))

    revenue = dashboard.admin_dashboard_stats(db, "7d", now=now)["revenue"]

    assert revenue["total"] == Decimal("170.00")
    assert revenue["commission"] == Decimal("170.00")
    assert revenue["thisMonth"] == Decimal("100.00")
    assert revenue["lastMonth"] == Decimal("50.00")


def test_rate_change_does_not_rewrite_past_revenue(db, crew, make_booking, monkeypatch):
    customer, _, worker = crew
    booking = make_booking(customer, worker, status=BookingStatus.IN_PROGRESS, budget=Decimal("800"))
    bookings.update_status(db, booking.id, worker, BookingStatus.COMPLETED, final_price=Decimal("900"))

    monkeypatch.setattr(settings, "COMMISSION_RATE", 50.0)
    revenue = dashboard.admin_dashboard_stats(db, "7d")["revenue"]

    assert revenue["total"] == Decimal("90.00")
    assert revenue["thisMonth"] == Decimal("90.00")


def test_commission_follows_configured_rate(monkeypatch):
    monkeypatch.setattr(settings, "COMMISSION_RATE", 12.5)
    assert bookings.commission_for("99.99") == Decimal("12.50")
    assert bookings.commission_for(None) == Decimal("0.00")


def test_totals_and_rating_stats(db, crew, make_booking):
    customer, _, worker = crew
    for stars in (5, 4):
        booking = make_booking(customer, worker, status=BookingStatus.COMPLETED)
        ratings.submit_rating(db, booking.id, customer.id, stars, "Solid, on time.")
    ledger.recharge(db, customer.id, 50)
    ledger.withdraw(db, customer.id, 20)

    assert dashboard.user_stats(db)["total"] == 3
    assert dashboard.booking_stats(db)["completed"] == 2

    txns = dashboard.transaction_stats(db)
    assert txns["recharge"] == {"count": 1, "totalAmount": Decimal("50.00")}
    assert txns["withdraw"]["count"] == 1
    assert txns["refund"] == {"count": 0, "totalAmount": Decimal("0.00")}

    rating = dashboard.rating_stats(db)
    assert rating["average"] == 4.5
    assert rating["total"] == 2
    assert rating["distribution"][5] == 1


def test_worker_dashboard(db, crew, make_booking):
    customer, _, worker = crew
    now = datetime.utcnow()
    last_month, _ = dashboard.month_bounds(now)
    make_booking(customer, worker, status=BookingStatus.PENDING)
    make_booking(customer, worker, status=BookingStatus.ACCEPTED)
    make_booking(customer, worker, status=BookingStatus.IN_PROGRESS)
    make_booking(customer, worker, status=BookingStatus.CANCELLED)
    make_booking(customer, worker, status=BookingStatus.COMPLETED, budget=Decimal("400"), completed_at=now)
    make_booking(
        customer, worker, status=BookingStatus.COMPLETED, budget=Decimal("100"), completed_at=last_month
    )

    result = dashboard.worker_dashboard(db, worker.id, now=now)
    stats = result["stats"]

    assert stats["totalJobs"] == 6
    assert stats["activeJobs"] == 2
    assert stats["completedJobs"] == 2
    assert stats["cancelledJobs"] == 1
    assert stats["pendingJobs"] == 1
    assert stats["inProgressJobs"] == 1
    assert stats["monthlyEarnings"] == Decimal("400.00")
    assert stats["totalEarnings"] == Decimal("500.00")
    assert stats["performance"] == 33
    assert len(result["recentJobs"]) == 5


def test_worker_without_jobs_has_zero_performance(db, make_user):
    worker = make_user(UserRole.INDEPENDENT_WORKER)
    stats = dashboard.worker_dashboard(db, worker.id)["stats"]
    assert stats["totalJobs"] == 0
    assert stats["performance"] == 0
    assert stats["totalEarnings"] == Decimal("0.00")


def test_customer_dashboard(db, crew, make_booking):
    customer, _, worker = crew
    make_booking(customer, worker, status=BookingStatus.COMPLETED, budget=Decimal("250"))
    make_booking(customer, worker, status=BookingStatus.COMPLETED, budget=Decimal("100"), final_price=Decimal("150.50"))
    make_booking(customer, worker, status=BookingStatus.CANCELLED, budget=Decimal("999"))

    result = dashboard.customer_dashboard(db, customer.id)

    assert result["stats"]["total"] == 3
    assert result["stats"]["completed"] == 2
    assert result["stats"]["totalSpent"] == Decimal("400.50")
    assert len(result["recentBookings"]) == 3


def test_contractor_dashboard(db, crew, make_booking):
    customer, contractor, worker = crew
    now = datetime.utcnow()
    make_booking(customer, worker, status=BookingStatus.PENDING, work_type="Tiling")
    make_booking(customer, worker, status=BookingStatus.CONFIRMED)
    make_booking(
        customer, worker, status=BookingStatus.COMPLETED, budget=Decimal("300"), completed_at=now
    )

    result = dashboard.contractor_dashboard(db, contractor.id, now=now)

    assert result["stats"] == {
        "totalWorkers": 1,
        "activeJobs": 1,
        "pendingRequests": 1,
        "monthlyEarnings": Decimal("300.00"),
    }
    kinds = {a["type"] for a in result["recentActivities"]}
    assert kinds == {"worker_added", "job_request", "job_completed"}
    descriptions = " ".join(a["description"] for a in result["recentActivities"])
    assert "Tiling from Cara Customer" in descriptions
    assert '"Sam Worker" joined your team' in descriptions
