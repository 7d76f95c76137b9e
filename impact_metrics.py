# impact_metrics.py - day-bucketed impact counters
from datetime import timedelta

from flask import current_app
from sqlalchemy import func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from errors import ValidationError
from models import db, ImpactMetric, User, UserActivity, utcnow, utc_today

METRIC_TYPES = ('meals_saved', 'donations_completed', 'waste_reduced', 'users_helped')

# Look-back window in days for aggregated periods
PERIOD_DAYS = {
    'today': 0,
    'week': 7,
    'month': 30,
}

_UPSERT_INSERTS = {
    'sqlite': sqlite_insert,
    'postgresql': pg_insert,
}


def increment_metric(metric_type, amount, day=None):
    """
    Add `amount` to the (metric_type, day) bucket, creating it on first use.

    The addition happens inside the database, so concurrent increments of
    the same bucket cannot overwrite each other.
    """
    day = day or utc_today()
    now = utcnow()
    table = ImpactMetric.__table__

    insert = _UPSERT_INSERTS.get(db.engine.dialect.name)
    if insert is not None:
        stmt = insert(table).values(
            metric_type=metric_type, date=day, value=amount, created_at=now, updated_at=now
        ).on_conflict_do_update(
            index_elements=[table.c.metric_type, table.c.date],
            set_={'value': table.c.value + amount, 'updated_at': now}
        )
        db.session.execute(stmt)
    else:
        result = db.session.execute(
            update(table)
            .where(table.c.metric_type == metric_type, table.c.date == day)
            .values(value=table.c.value + amount, updated_at=now)
        )
        if result.rowcount == 0:
            db.session.execute(table.insert().values(
                metric_type=metric_type, date=day, value=amount, created_at=now, updated_at=now
            ))

    db.session.commit()


def record_metric(metric_type, amount):
    """Best-effort increment: failures are logged, never raised"""
    try:
        increment_metric(metric_type, amount)
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Error updating impact metric %s by %s', metric_type, amount)
        return False
    return True


def get_metric_value(metric_type, day=None):
    day = day or utc_today()
    metric = ImpactMetric.query.filter_by(metric_type=metric_type, date=day).first()
    return metric.value if metric else 0


def query_metrics(period='today', metric_type=None, today=None):
    """Raw rows for today, or per-type totals over the last week/month"""
    if period not in PERIOD_DAYS:
        raise ValidationError(f"Invalid period: {period}. Use one of: {', '.join(PERIOD_DAYS)}")

    today = today or utc_today()

    if period == 'today':
        query = ImpactMetric.query.filter(ImpactMetric.date == today)
        if metric_type:
            query = query.filter(ImpactMetric.metric_type == metric_type)
        return [m.to_dict() for m in query.order_by(ImpactMetric.metric_type).all()]

    since = today - timedelta(days=PERIOD_DAYS[period])
    query = db.session.query(
        ImpactMetric.metric_type,
        func.sum(ImpactMetric.value)
    ).filter(ImpactMetric.date >= since)
    if metric_type:
        query = query.filter(ImpactMetric.metric_type == metric_type)

    rows = query.group_by(ImpactMetric.metric_type).order_by(ImpactMetric.metric_type).all()
    return [
        {
            'metric_type': row_type,
            'value': int(total or 0),
            'period': period,
            'since': since.isoformat()
        }
        for row_type, total in rows
    ]


def recent_activities(limit=10):
    """Latest activity entries with the actor's display name"""
    rows = db.session.query(UserActivity, User.full_name) \
        .join(User, UserActivity.user_id == User.id) \
        .order_by(UserActivity.created_at.desc(), UserActivity.id.desc()) \
        .limit(limit) \
        .all()

    result = []
    for activity, full_name in rows:
        data = activity.to_dict()
        data['profiles'] = {'full_name': full_name}
        result.append(data)
    return result
