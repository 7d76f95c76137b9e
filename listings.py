# listings.py - donation listing lifecycle
import math
import re
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import or_, update

from activity_log import log_activity
from errors import AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError
from impact_metrics import record_metric
from models import db, FoodListing, LISTING_STATUSES, utcnow

REQUIRED_FIELDS = ['food_type', 'quantity', 'location', 'available_until', 'contact_info']

# Statuses only move forward, one step at a time
NEXT_STATUS = {
    'available': 'reserved',
    'reserved': 'completed',
}

_FIRST_INTEGER = re.compile(r'\d+')


# ---------- QUANTITY ESTIMATES ----------

def _first_integer(quantity):
    match = _FIRST_INTEGER.search(quantity or '')
    return int(match.group()) if match else None


def _is_weight(quantity):
    lower = quantity.lower()
    return 'lb' in lower or 'pound' in lower


def estimate_meals(quantity):
    """Rough meal count for a free-text quantity: 1 lb is about 2 meals"""
    number = _first_integer(quantity)
    if number is None:
        return 1

    if _is_weight(quantity):
        return max(1, number * 2)
    elif 'serving' in quantity.lower():
        return number
    return max(1, number // 2)


def estimate_waste(quantity):
    """Rough waste reduced, in lbs when the quantity is a weight"""
    number = _first_integer(quantity)
    if number is None:
        return 1

    if _is_weight(quantity):
        return number
    return max(1, math.floor(number * 0.5))


# ---------- HELPERS ----------

def parse_timestamp(value, field='available_until'):
    """ISO-8601 string to a naive UTC datetime"""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid {field}: expected an ISO-8601 timestamp")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _field_value(data, field):
    value = data.get(field)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _record_activity(user_id, activity_type, description, listing):
    """Activity entries that follow a listing change are best-effort"""
    try:
        log_activity(user_id, activity_type, description, related_id=listing.id, location=listing.location)
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Error logging %s for listing %s', activity_type, listing.id)


# ---------- OPERATIONS ----------

def create_listing(user, data):
    """Create a listing owned by `user`; status always starts as available"""
    data = data or {}
    values = {field: _field_value(data, field) for field in REQUIRED_FIELDS}

    missing = [field for field in REQUIRED_FIELDS if not values[field]]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    listing = FoodListing(
        user_id=user.id,
        food_type=values['food_type'],
        quantity=values['quantity'],
        description=data.get('description') or '',
        location=values['location'],
        contact_info=values['contact_info'],
        available_until=parse_timestamp(values['available_until']),
        status='available'
    )
    db.session.add(listing)
    db.session.commit()
    current_app.logger.info('Listing %s created by user %s', listing.id, user.id)

    _record_activity(user.id, 'donation_created', f"Created donation listing for {listing.food_type}", listing)
    record_metric('donations_completed', 1)
    return listing


def list_listings(search=None, status=None):
    """All listings, newest first"""
    query = FoodListing.query

    if status:
        if status not in LISTING_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        query = query.filter(FoodListing.status == status)

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            FoodListing.food_type.ilike(pattern),
            FoodListing.description.ilike(pattern)
        ))

    return query.order_by(FoodListing.created_at.desc(), FoodListing.id.desc()).all()


def get_listing(listing_id):
    listing = db.session.get(FoodListing, listing_id)
    if listing is None:
        raise NotFoundError(f"Listing {listing_id} not found")
    return listing


def require_owner(user, listing_id):
    """Load a listing for mutation; only its owner gets past this"""
    listing = get_listing(listing_id)
    if listing.user_id != user.id:
        raise AuthorizationError("You can only modify your own listings")
    return listing


def update_listing_status(user, listing_id, new_status):
    listing = require_owner(user, listing_id)

    if new_status not in LISTING_STATUSES:
        raise ValidationError(f"Invalid status: {new_status}")
    current_status = listing.status
    if NEXT_STATUS.get(current_status) != new_status:
        raise InvalidTransitionError(f"Cannot change status from {current_status} to {new_status}")

    # Only applies if nobody moved the listing since it was read
    result = db.session.execute(
        update(FoodListing)
        .where(FoodListing.id == listing.id, FoodListing.status == current_status)
        .values(status=new_status, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise InvalidTransitionError(f"Listing {listing_id} is no longer {current_status}")
    db.session.commit()
    current_app.logger.info('Listing %s is now %s', listing.id, new_status)

    if new_status == 'reserved':
        _record_activity(user.id, 'donation_reserved', f"Reserved donation: {listing.food_type}", listing)
        record_metric('meals_saved', estimate_meals(listing.quantity))
    elif new_status == 'completed':
        _record_activity(user.id, 'donation_completed', f"Completed donation: {listing.food_type}", listing)
        record_metric('users_helped', 1)
        record_metric('waste_reduced', estimate_waste(listing.quantity))

    return listing


def delete_listing(user, listing_id):
    listing = require_owner(user, listing_id)
    db.session.delete(listing)
    db.session.commit()
    current_app.logger.info('Listing %s deleted by user %s', listing_id, user.id)
