# scans.py - stored image analyses
from flask import current_app

from activity_log import log_activity
from models import db, FoodAnalysis


def record_analysis(user, result, predictions=None):
    """
    Save an analysis result and log a food_scanned activity.

    The raw classifier predictions are stored alongside the processed
    label; they are not part of the result returned to the client.

    Storage is best-effort: the caller already has the result, so a
    database failure is logged and the scan still succeeds.
    """
    analysis_data = dict(result.get('analysis_data') or {})
    if predictions:
        analysis_data['classification_results'] = predictions
        analysis_data['top_prediction'] = predictions[0]

    try:
        analysis = FoodAnalysis(
            user_id=user.id,
            food_name=result['food_name'],
            category=result['category'],
            freshness=result['freshness'],
            estimated_expiry=result['estimated_expiry'],
            nutritional_value=result['nutritional_value'],
            donation_suitability=result['donation_suitability'],
            confidence=result['confidence'],
            analysis_data=analysis_data
        )
        db.session.add(analysis)
        db.session.flush()

        log_activity(
            user.id,
            'food_scanned',
            f"Scanned {result['food_name']} with {result['confidence']}% confidence",
            related_id=analysis.id,
            commit=False
        )
        db.session.commit()
        return analysis
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Error saving food analysis for user %s', user.id)
        return None


def list_analyses(user, search=None, category=None, limit=50):
    """The user's scan history, newest first"""
    query = FoodAnalysis.query.filter(FoodAnalysis.user_id == user.id)

    if search:
        query = query.filter(FoodAnalysis.food_name.ilike(f"%{search}%"))
    if category and category.lower() != 'all':
        query = query.filter(db.func.lower(FoodAnalysis.category) == category.lower())

    return query.order_by(FoodAnalysis.created_at.desc(), FoodAnalysis.id.desc()).limit(limit).all()
