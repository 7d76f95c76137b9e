# ai_classifier.py - image classification backends
import base64
import binascii
import logging
import math
import random
import re

import requests

from errors import UpstreamError, ValidationError
from food_mapper import analyze_food_properties

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r'^data:image/[a-z]+;base64,')


class HuggingFaceClassifier:
    """Image classification through the Hugging Face Inference API"""

    def __init__(self, api_token, model='google/vit-base-patch16-224',
                 api_url='https://api-inference.huggingface.co/models', timeout=20):
        self.api_token = api_token
        self.model = model
        self.url = f"{api_url.rstrip('/')}/{model}"
        self.timeout = timeout

    def classify(self, image_bytes):
        """Return [{'label': ..., 'score': ...}] sorted by score, best first"""
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/octet-stream"
        }

        try:
            response = requests.post(self.url, headers=headers, data=image_bytes, timeout=self.timeout)
        except requests.Timeout:
            raise UpstreamError(f"Classification timed out after {self.timeout}s")
        except requests.RequestException as e:
            raise UpstreamError(f"Classification service unreachable: {e}")

        if response.status_code != 200:
            raise UpstreamError(f"Classification API error {response.status_code}: {response.text[:100]}")

        try:
            predictions = response.json()
        except ValueError:
            raise UpstreamError("Classification API returned invalid JSON")

        if not isinstance(predictions, list) or not predictions:
            raise UpstreamError("Classification API returned no predictions")

        try:
            return sorted(
                ({'label': str(p['label']), 'score': float(p['score'])} for p in predictions),
                key=lambda p: p['score'],
                reverse=True
            )
        except (KeyError, TypeError, ValueError):
            raise UpstreamError("Classification API returned malformed predictions")


class MockClassifier:
    """Canned predictions, no network"""

    CANNED_PREDICTIONS = [
        {'label': 'Fresh Apples', 'score': 0.95},
        {'label': 'Mixed Vegetables', 'score': 0.87},
        {'label': 'Bread Loaf', 'score': 0.92},
    ]

    def __init__(self, seed=None):
        self._random = random.Random(seed)

    def classify(self, image_bytes):
        return [dict(self._random.choice(self.CANNED_PREDICTIONS))]


def create_classifier(config):
    """Build the classifier named by CLASSIFIER_BACKEND"""
    backend = config.get('CLASSIFIER_BACKEND', 'huggingface')

    if backend == 'mock':
        return MockClassifier()

    if backend == 'huggingface':
        token = config.get('HUGGING_FACE_ACCESS_TOKEN')
        if not token:
            logger.warning('HUGGING_FACE_ACCESS_TOKEN not set, using mock classifier')
            return MockClassifier()
        return HuggingFaceClassifier(
            api_token=token,
            model=config.get('CLASSIFIER_MODEL', 'google/vit-base-patch16-224'),
            api_url=config.get('HF_API_URL', 'https://api-inference.huggingface.co/models'),
            timeout=config.get('CLASSIFIER_TIMEOUT', 20)
        )

    raise ValueError(f"Unknown classifier backend: {backend}")


def decode_image_data(image_data):
    """Decode a base64 image, with or without a data: URL prefix"""
    if not image_data or not isinstance(image_data, str):
        raise ValidationError("No image data provided")

    encoded = _DATA_URL_PREFIX.sub('', image_data.strip())
    try:
        image_bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image data is not valid base64")

    if not image_bytes:
        raise ValidationError("No image data provided")
    return image_bytes


def to_percent(score):
    """0-1 score to a whole percentage, halves rounded up"""
    return math.floor(score * 100 + 0.5)


def analyze_image(classifier, image_data):
    """
    Classify an uploaded image and map the top prediction to food attributes.

    Returns (result, predictions); the raw predictions are kept apart so
    they can be stored without being sent back to the client.
    """
    image_bytes = decode_image_data(image_data)
    predictions = classifier.classify(image_bytes)
    if not predictions:
        raise UpstreamError("Classifier returned no predictions")

    top = predictions[0]
    result = analyze_food_properties(top['label'], to_percent(top['score']))
    return result, predictions
