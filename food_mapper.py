# food_mapper.py - classifier label to food attributes
import re

# Checked in order, first match wins
CATEGORY_KEYWORDS = [
    ('Fruit', ['fruit', 'apple', 'banana', 'orange', 'berry', 'grape']),
    ('Vegetables', ['vegetable', 'carrot', 'broccoli', 'lettuce', 'tomato', 'potato']),
    ('Bakery', ['bread', 'bakery', 'pastry']),
    ('Meat', ['meat', 'chicken', 'beef']),
    ('Dairy', ['dairy', 'milk', 'cheese']),
]
DEFAULT_CATEGORY = 'Other'
CATEGORIES = [name for name, _ in CATEGORY_KEYWORDS] + [DEFAULT_CATEGORY]

ESTIMATED_EXPIRY = {
    'Fruit': '3-7 days',
    'Vegetables': '5-10 days',
    'Bakery': '1-3 days',
    'Meat': '1-2 days',
    'Dairy': '3-5 days',
}
DEFAULT_EXPIRY = '2-5 days'

NUTRITIONAL_VALUE = {
    'Fruit': 'High in vitamins, fiber, and antioxidants',
    'Vegetables': 'Rich in vitamins, minerals, and fiber',
    'Bakery': 'Carbohydrates and energy',
    'Meat': 'High protein and essential amino acids',
    'Dairy': 'Calcium, protein, and vitamins',
}
DEFAULT_NUTRITION = 'Varied nutritional content'

SUITABILITY = {
    'excellent': 'excellent',
    'good': 'excellent',
    'fair': 'good',
    'poor': 'not_recommended',
}

_LEADING_ARTICLE = re.compile(r'^(a |an |the )', re.IGNORECASE)


def infer_category(label):
    label_lower = (label or '').lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in label_lower for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def freshness_for(confidence):
    if confidence > 85:
        return 'excellent'
    elif confidence > 70:
        return 'good'
    elif confidence > 50:
        return 'fair'
    return 'poor'


def suitability_for(freshness):
    return SUITABILITY[freshness]


def display_name(label):
    """'a granny smith, apple' -> 'Granny Smith'"""
    name = (label or '').split(',')[0].strip()
    name = _LEADING_ARTICLE.sub('', name)
    return ' '.join(word[:1].upper() + word[1:] for word in name.split(' '))


def analyze_food_properties(label, confidence):
    """Build a food analysis result from a classifier label and a 0-100 confidence"""
    confidence = int(confidence)
    category = infer_category(label)
    freshness = freshness_for(confidence)

    return {
        'food_name': display_name(label),
        'category': category,
        'freshness': freshness,
        'estimated_expiry': ESTIMATED_EXPIRY.get(category, DEFAULT_EXPIRY),
        'nutritional_value': NUTRITIONAL_VALUE.get(category, DEFAULT_NUTRITION),
        'donation_suitability': suitability_for(freshness),
        'confidence': confidence,
        'analysis_data': {'processed_label': label}
    }
