"""
Seeding helpers so the detector gives identical boxes for identical images
across calls and across process restarts.
"""

import os
import random

import numpy as np

# torch and cv2 come in with ultralytics; tests run without them
try:
    import torch
    HAS_TORCH = True
except ImportError:
    HAS_TORCH = False

try:
    import cv2
    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False


def set_seed(seed: int = 42) -> None:
    """
    Seed every random number generator inference may touch.

    Args:
        seed: The seed value for all random number generators.
    """
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)
    np.random.seed(seed)

    if HAS_TORCH:
        torch.manual_seed(seed)
        if torch.cuda.is_available():
            torch.cuda.manual_seed_all(seed)
            torch.backends.cudnn.deterministic = True
            torch.backends.cudnn.benchmark = False

    if HAS_CV2:
        cv2.setNumThreads(1)  # Single thread = deterministic
        cv2.setRNGSeed(seed)
