from flask import Blueprint, request, jsonify, current_app

from rentcore_backend.extensions import db
from rentcore_backend.security import roles_required, current_user_id
from rentcore_backend.services.advance import AdvanceDistributor
from rentcore_backend.services.collection import parse_date, record_collection
from rentcore_backend.services.notifications import notify_payments
from rentcore_backend.services.periods import Period, periods_of_year
from rentcore_backend.services.reconciler import period_statuses, reconcile
from rentcore_backend.services.store import RentStore

collector_bp = Blueprint("collector", __name__, url_prefix="/api/collector")


def _store():
    return RentStore(db.session)


def _notify(renter, records):
    notifier = current_app.extensions.get("rentcore_notifier")
    if notifier is not None and records:
        notify_payments(notifier, renter, records)


# ============= ADVANCE PAYMENTS =============

@collector_bp.post("/advance")
@roles_required("collector")
def advance_payment():
    """Spread a lump sum over the current and following months"""
    data = request.get_json(silent=True) or {}
    store = _store()

    distributor = AdvanceDistributor(store, timezone=current_app.config.get("TIMEZONE"))
    result = distributor.distribute(
        data.get("renter_id"),
        data.get("lump_sum"),
        payment_mode=data.get("payment_mode") or "cash",
        notes=data.get("notes") or "",
        collection_date=parse_date(data.get("collection_date")),
        collector_id=current_user_id(),
    )

    if result.records_created:
        _notify(store.get_renter(data.get("renter_id")), result.records_created)

    return jsonify(result.to_dict()), 201 if result.months_affected else 200


# ============= DIRECT COLLECTION =============

@collector_bp.post("/collect")
@roles_required("collector")
def collect_payment():
    """Record rent collected for one or more selected months"""
    data = request.get_json(silent=True) or {}

    renter, created = record_collection(
        _store(),
        data.get("renter_id"),
        data.get("months") or [],
        data.get("received_amount"),
        payment_mode=data.get("payment_mode") or "cash",
        notes=data.get("notes") or "",
        collection_date=data.get("collection_date"),
        collector_id=current_user_id(),
        timezone=current_app.config.get("TIMEZONE"),
    )
    _notify(renter, created)

    return jsonify({
        "success": True,
        "months_affected": len(created),
        "records_created": [r.to_dict() for r in created],
    }), 201


@collector_bp.get("/renters/<int:renter_id>/periods")
@roles_required("collector", "admin", "owner")
def renter_periods(renter_id):
    """Per-month status for one renter; only months without a payment are selectable"""
    year = request.args.get("year", type=int) or Period.current(tz=current_app.config.get("TIMEZONE")).year
    store = _store()
    renter = store.get_renter(renter_id)
    periods = periods_of_year(year)
    payments = store.payments_for_renter(renter.id, periods=periods)

    return jsonify({
        "renter": renter.to_dict(),
        "year": year,
        "monthly_expected": float(renter.monthly_expected),
        "periods": period_statuses(renter, payments, periods),
    })


# ============= SEARCH & HISTORY =============

@collector_bp.get("/search")
@roles_required("collector", "admin", "owner")
def search_renters():
    """All renters with their payment status for a month (YYYY-MM or Mon-YYYY)"""
    period = Period.parse(request.args.get("month"))
    store = _store()
    statuses = reconcile(period, store.list_renters(), store.payments_for_period(period))

    q = (request.args.get("q") or "").strip().lower()
    if q:
        statuses = [s for s in statuses
                    if q in s.renter.renter_code.lower() or q in s.renter.name.lower()]

    return jsonify([s.to_dict(with_deposit=True) for s in statuses])


@collector_bp.get("/history")
@roles_required("collector")
def history():
    """Last 100 payments recorded by the calling collector"""
    limit = max(1, min(request.args.get("limit", 100, type=int), 500))
    return jsonify(_store().history_for_collector(current_user_id(), limit=limit))
