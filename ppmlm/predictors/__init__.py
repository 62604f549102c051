"""Sequential predictor interface and implementations."""

from ppmlm.predictors.base import Predictor
from ppmlm.predictors.ppm import PPMPredictor
from ppmlm.predictors.uniform import UniformPredictor

__all__ = [
    "Predictor",
    "PPMPredictor",
    "UniformPredictor",
]
