# activity_log.py
from models import db, UserActivity

ACTIVITY_TYPES = ('donation_created', 'donation_reserved', 'donation_completed', 'food_scanned')


def log_activity(user_id, activity_type, description, related_id=None, location=None, commit=True):
    """Append an entry to the activity feed; entries are never edited afterwards"""
    if activity_type not in ACTIVITY_TYPES:
        raise ValueError(f"Unknown activity type: {activity_type}")

    activity = UserActivity(
        user_id=user_id,
        activity_type=activity_type,
        description=description,
        related_id=related_id,
        location=location
    )
    db.session.add(activity)
    if commit:
        db.session.commit()
    return activity
