# routes.py - JSON API
from flask import Blueprint, current_app, g, jsonify, request

from ai_classifier import analyze_image
from auth import login_required
from errors import ValidationError
from impact_metrics import query_metrics, recent_activities
from listings import (create_listing, delete_listing, get_listing, list_listings,
                      update_listing_status)
from scans import list_analyses, record_analysis

api_bp = Blueprint('api', __name__)


def _json_body():
    return request.get_json(silent=True) or {}


def _listing_id(required=True):
    raw = request.args.get('id')
    if not raw:
        if required:
            raise ValidationError("Listing ID required")
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Invalid listing ID: {raw}")


@api_bp.route('/')
def home():
    return jsonify({
        "message": "Food Donation Platform API",
        "version": "1.0",
        "endpoints": {
            "/auth/register": "POST create an account",
            "/auth/login": "POST get an API token",
            "/food-listings": "GET/POST/PUT/DELETE donation listings",
            "/ai-food-analysis": "POST analyze a food image, GET scan history",
            "/impact-metrics": "GET impact metrics (period=today|week|month)"
        }
    })


@api_bp.route('/health')
def health():
    return jsonify({"status": "ok"})


# ---------- FOOD LISTINGS ----------

@api_bp.route('/food-listings', methods=['GET'])
@login_required
def get_food_listings():
    """One listing by id, or all listings newest first"""
    listing_id = _listing_id(required=False)
    if listing_id is not None:
        return jsonify(get_listing(listing_id).to_dict())

    listings = list_listings(
        search=request.args.get('search'),
        status=request.args.get('status')
    )
    return jsonify([listing.to_dict() for listing in listings])


@api_bp.route('/food-listings', methods=['POST'])
@login_required
def create_food_listing():
    listing = create_listing(g.current_user, _json_body())
    return jsonify(listing.to_dict()), 201


@api_bp.route('/food-listings', methods=['PUT'])
@login_required
def update_food_listing():
    listing_id = _listing_id()
    status = _json_body().get('status')
    if not status:
        raise ValidationError("Missing required field: status")

    listing = update_listing_status(g.current_user, listing_id, status)
    return jsonify(listing.to_dict())


@api_bp.route('/food-listings', methods=['DELETE'])
@login_required
def delete_food_listing():
    delete_listing(g.current_user, _listing_id())
    return jsonify({"success": True})


# ---------- AI FOOD ANALYSIS ----------

@api_bp.route('/ai-food-analysis', methods=['POST'])
@login_required
def analyze_food():
    """Classify an uploaded image; nothing but the scan history is written"""
    data = _json_body()
    classifier = current_app.extensions['food_classifier']

    current_app.logger.info('Starting AI food analysis for user %s', g.current_user.id)
    result, predictions = analyze_image(classifier, data.get('imageData'))
    record_analysis(g.current_user, result, predictions)

    return jsonify(result)


@api_bp.route('/ai-food-analysis', methods=['GET'])
@login_required
def food_analysis_history():
    analyses = list_analyses(
        g.current_user,
        search=request.args.get('search'),
        category=request.args.get('category')
    )
    return jsonify([analysis.to_dict() for analysis in analyses])


# ---------- IMPACT METRICS ----------

@api_bp.route('/impact-metrics', methods=['GET'])
def get_impact_metrics():
    period = request.args.get('period', 'today')
    metric_type = request.args.get('type')

    metrics = query_metrics(period, metric_type)
    if period != 'today':
        return jsonify(metrics)

    return jsonify({
        "metrics": metrics,
        "recent_activities": recent_activities(current_app.config['RECENT_ACTIVITY_LIMIT'])
    })
