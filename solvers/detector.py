import io
import logging
from typing import List, Optional

from PIL import Image, UnidentifiedImageError
from ultralytics import YOLO

from models.detection import BoundingBox, Detection
from models.errors import DetectorError, DetectorUnavailable, InvalidImage

logger = logging.getLogger(__name__)


def load_labels(labels_path: str) -> List[str]:
    """Read a darknet-style names file: one class label per line."""
    with open(labels_path, "r", encoding="utf-8") as f:
        return [line.rstrip("\r\n") for line in f if line.strip()]


class YoloDetector:
    """
    YOLOv8 glyph detector.

    The model is loaded once at construction and reused for every call.
    Detection and IoU thresholds are fixed per instance so repeated calls on
    the same image give the same boxes.
    """

    def __init__(
        self,
        model_path: str,
        labels_path: Optional[str] = None,
        detection_threshold: float = 0.25,
        iou_threshold: float = 0.45,
        image_size: Optional[int] = None,
    ):
        try:
            self.model = YOLO(model_path)
        except Exception as e:
            raise DetectorUnavailable(f"Failed to load YOLO model from {model_path}: {e}") from e

        if labels_path:
            self.labels = load_labels(labels_path)
        else:
            names = self.model.names
            self.labels = [names[i] for i in sorted(names)] if isinstance(names, dict) else list(names)

        self.detection_threshold = detection_threshold
        self.iou_threshold = iou_threshold
        self.image_size = image_size
        logger.info(f"YOLO model loaded from {model_path} ({len(self.labels)} classes)")

    def _predict_kwargs(self) -> dict:
        kwargs = {
            "conf": self.detection_threshold,
            "iou": self.iou_threshold,
            "verbose": False,
        }
        if self.image_size:
            kwargs["imgsz"] = self.image_size
        return kwargs

    def detect(self, image_bytes: bytes) -> List[Detection]:
        """Run inference on one captcha image and return every box the model reports."""
        if not image_bytes:
            raise InvalidImage("Captcha image is empty")

        try:
            image = Image.open(io.BytesIO(image_bytes))
            image = image.convert("RGB")
        except (UnidentifiedImageError, OSError) as e:
            raise InvalidImage(f"Captcha image is unreadable: {e}") from e

        results = self.model.predict(image, **self._predict_kwargs())

        if not results or results[0].boxes is None:
            return []

        detections = []
        for box in results[0].boxes:
            cls_id = int(box.cls[0])
            if not 0 <= cls_id < len(self.labels):
                raise DetectorError(f"Model predicted class {cls_id} but only {len(self.labels)} labels are known")
            x_min, y_min, x_max, y_max = box.xyxy[0].tolist()
            detections.append(Detection(
                bbox=BoundingBox.from_xyxy(x_min, y_min, x_max, y_max),
                label=self.labels[cls_id],
                confidence=min(1.0, max(0.0, float(box.conf[0]))),
            ))

        logger.debug(f"Detector returned {len(detections)} boxes")
        return detections
