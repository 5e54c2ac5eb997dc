from decimal import Decimal, InvalidOperation

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError

from rentcore_backend.errors import ConflictError, NotFoundError, ValidationError
from rentcore_backend.extensions import db
from rentcore_backend.models import Complex, Renter, RenterShop, Shop
from rentcore_backend.security import roles_required
from rentcore_backend.services.collection import edit_payment, parse_date
from rentcore_backend.services.periods import Period
from rentcore_backend.services.reconciler import rank_defaulters, reconcile, summarize
from rentcore_backend.services.store import RentStore

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def _month_arg(default_previous=False):
    month = request.args.get("month")
    if not month:
        current = Period.current(tz=current_app.config.get("TIMEZONE"))
        return current.shift(-1) if default_previous else current
    return Period.parse(month)


def _money(data, field, default="0"):
    raw = data.get(field)
    if raw is None or raw == "":
        raw = default
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", code="invalid_amount")
    if not value.is_finite():
        raise ValidationError(f"{field} must be a number", code="invalid_amount")
    if value < 0:
        raise ValidationError(f"{field} cannot be negative", code="invalid_amount")
    return value


def _collection_day(data):
    raw = data.get("rent_collection_day") or 1
    try:
        day = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("rent_collection_day must be a whole number", code="invalid_day")
    if not 1 <= day <= 31:
        raise ValidationError("rent_collection_day must be between 1 and 31", code="invalid_day")
    return day


def _commit(conflict_message):
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise ConflictError(conflict_message) from e


# ============= REPORTS =============

@admin_bp.get("/defaulters")
@roles_required("admin", "owner")
def defaulters():
    """Who owes what for a month, most severe first"""
    period = _month_arg()
    include_paid = request.args.get("include_paid", "false").lower() == "true"
    store = RentStore(db.session)
    statuses = reconcile(period, store.list_renters(), store.payments_for_period(period))
    ranked = rank_defaulters(statuses, include_paid=include_paid)

    return jsonify({
        "period": period.label,
        "count": len(ranked),
        "defaulters": [s.to_dict() for s in ranked],
    })


@admin_bp.get("/stats")
@roles_required("admin", "owner")
def stats():
    """Collection summary for a month (defaults to the previous month)"""
    period = _month_arg(default_previous=True)
    store = RentStore(db.session)
    statuses = reconcile(period, store.list_renters(), store.payments_for_period(period))

    summary = summarize(statuses)
    summary["period"] = period.label
    summary["total_shops"] = db.session.query(Shop).filter(Shop.is_active.is_(True)).count()
    return jsonify(summary)


# ============= PAYMENT CORRECTIONS =============

@admin_bp.patch("/payments/<int:payment_id>")
@roles_required("admin", "owner")
def update_payment(payment_id):
    """Correct amount, mode, date or notes; payments are never deleted"""
    data = request.get_json(silent=True) or {}
    updated = edit_payment(RentStore(db.session), payment_id, **data)
    return jsonify(updated.to_dict())


# ============= RENTERS / SHOPS / ASSIGNMENTS =============

@admin_bp.post("/renters")
@roles_required("admin")
def create_renter():
    data = request.get_json(silent=True) or {}
    for field in ("renter_code", "name"):
        if not (data.get(field) or "").strip():
            raise ValidationError(f"{field} is required")

    renter = Renter(
        renter_code=data["renter_code"].strip(),
        name=data["name"].strip(),
        phone=(data.get("phone") or "").strip(),
    )
    db.session.add(renter)
    _commit("Renter code already exists")
    return jsonify(renter.serialize()), 201


@admin_bp.delete("/renters/<int:renter_id>")
@roles_required("admin")
def delete_renter(renter_id):
    """Delete a renter together with its shop links and payments"""
    renter = db.session.get(Renter, renter_id)
    if renter is None:
        raise NotFoundError("Renter not found", code="renter_not_found")

    code = renter.renter_code
    db.session.delete(renter)
    db.session.commit()
    current_app.logger.info("Deleted renter %s", code)
    return jsonify({"message": "Renter deleted successfully"})


@admin_bp.post("/shops")
@roles_required("admin")
def create_shop():
    data = request.get_json(silent=True) or {}
    if not (data.get("shop_no") or "").strip():
        raise ValidationError("shop_no is required")
    rent_amount = _money(data, "rent_amount")
    collection_day = _collection_day(data)

    complex_ = None
    complex_name = (data.get("complex_name") or "").strip()
    if complex_name:
        complex_ = db.session.query(Complex).filter_by(name=complex_name).first()
        if complex_ is None:
            complex_ = Complex(name=complex_name)
            db.session.add(complex_)

    shop = Shop(
        shop_no=data["shop_no"].strip(),
        complex=complex_,
        category=data.get("category") or "Numeric",
        rent_amount=rent_amount,
        rent_collection_day=collection_day,
        is_active=bool(data.get("is_active", True)),
    )
    db.session.add(shop)
    _commit("Shop number already exists in this complex")
    return jsonify(shop.serialize()), 201


@admin_bp.post("/assignments")
@roles_required("admin")
def assign_shop():
    data = request.get_json(silent=True) or {}
    renter = db.session.get(Renter, data.get("renter_id"))
    shop = db.session.get(Shop, data.get("shop_id"))
    if renter is None or shop is None:
        raise NotFoundError("Renter or shop not found")

    link = RenterShop(
        renter=renter,
        shop=shop,
        expected_deposit=_money(data, "expected_deposit"),
        deposit_amount=_money(data, "deposit_amount"),
        deposit_date=parse_date(data.get("deposit_date"), "deposit_date"),
        deposit_remarks=data.get("deposit_remarks") or "",
    )
    db.session.add(link)
    _commit("Shop is already assigned to this renter")
    current_app.logger.info("Assigned shop %s to renter %s", shop.shop_no, renter.renter_code)
    return jsonify(link.serialize()), 201
