# models.py
from flask_sqlalchemy import SQLAlchemy
from datetime import datetime, timezone

db = SQLAlchemy()

LISTING_STATUSES = ('available', 'reserved', 'completed')


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today():
    return utcnow().date()


class User(db.Model):
    """Registered users; any user may donate and reserve"""
    __tablename__ = 'profiles'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    full_name = db.Column(db.String(100))
    password_hash = db.Column(db.String(256), nullable=False)
    api_token = db.Column(db.String(64), unique=True, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    # Relationships
    listings = db.relationship('FoodListing', backref='owner', lazy=True)
    activities = db.relationship('UserActivity', backref='user', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }


class FoodListing(db.Model):
    """Food donation listings"""
    __tablename__ = 'food_listings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id'), nullable=False, index=True)

    # Food details
    food_type = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.String(100), nullable=False)  # free text, e.g. "10 lbs", "15 servings"
    description = db.Column(db.Text)

    # Pickup
    location = db.Column(db.Text, nullable=False)
    contact_info = db.Column(db.String(200), nullable=False)
    available_until = db.Column(db.DateTime, nullable=False)

    # Status tracking
    status = db.Column(db.String(20), nullable=False, default='available')  # available, reserved, completed
    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'food_type': self.food_type,
            'quantity': self.quantity,
            'description': self.description,
            'location': self.location,
            'contact_info': self.contact_info,
            'available_until': self.available_until.isoformat() if self.available_until else None,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }


class FoodAnalysis(db.Model):
    """Stored results of image scans"""
    __tablename__ = 'food_analysis'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id'), nullable=False, index=True)

    food_name = db.Column(db.String(200))
    category = db.Column(db.String(50))  # Fruit, Vegetables, Bakery, Meat, Dairy, Other
    freshness = db.Column(db.String(20))  # excellent, good, fair, poor
    estimated_expiry = db.Column(db.String(50))
    nutritional_value = db.Column(db.String(200))
    donation_suitability = db.Column(db.String(20))  # excellent, good, not_recommended
    confidence = db.Column(db.Integer)
    analysis_data = db.Column(db.JSON)

    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'food_name': self.food_name,
            'category': self.category,
            'freshness': self.freshness,
            'estimated_expiry': self.estimated_expiry,
            'nutritional_value': self.nutritional_value,
            'donation_suitability': self.donation_suitability,
            'confidence': self.confidence,
            'analysis_data': self.analysis_data,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }


class ImpactMetric(db.Model):
    """Day-bucketed platform counters"""
    __tablename__ = 'impact_metrics'
    __table_args__ = (
        db.UniqueConstraint('metric_type', 'date', name='uq_impact_metrics_type_date'),
    )

    id = db.Column(db.Integer, primary_key=True)
    metric_type = db.Column(db.String(50), nullable=False)  # meals_saved, donations_completed, waste_reduced, users_helped
    date = db.Column(db.Date, nullable=False, index=True)
    value = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'metric_type': self.metric_type,
            'date': self.date.isoformat() if self.date else None,
            'value': self.value,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }


class UserActivity(db.Model):
    """Append-only feed of user actions"""
    __tablename__ = 'user_activities'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id'), nullable=False, index=True)
    activity_type = db.Column(db.String(50), nullable=False)  # donation_created, donation_reserved, donation_completed, food_scanned
    description = db.Column(db.Text)
    related_id = db.Column(db.Integer)
    location = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'activity_type': self.activity_type,
            'description': self.description,
            'related_id': self.related_id,
            'location': self.location,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }


def init_db(app):
    """Create all tables"""
    with app.app_context():
        db.create_all()
        app.logger.info('Database tables created')
